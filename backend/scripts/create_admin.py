#!/usr/bin/env python3
"""
Create (or promote) the administrator account and the default categories.

Usage:
    python scripts/create_admin.py                       # use ADMIN_* settings
    python scripts/create_admin.py --owner               # also mark the account as owner
    python scripts/create_admin.py --email a@b.c --username boss --password secret
    python scripts/create_admin.py --create-tables       # create tables first (no Alembic)
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import structlog

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.session import Base, engine, get_db_session, wait_for_database
from app.db import models  # noqa: F401
from app.services.bootstrap import ensure_admin_user
from app.services.category_service import ensure_default_categories

logger = structlog.get_logger()


def main():
    parser = argparse.ArgumentParser(
        description="Create the RuzMovie administrator account"
    )
    parser.add_argument(
        "--email",
        default=settings.admin_email,
        help="Admin email (default: ADMIN_EMAIL)"
    )
    parser.add_argument(
        "--username",
        default=settings.admin_username,
        help="Admin username (default: ADMIN_USERNAME)"
    )
    parser.add_argument(
        "--password",
        default=settings.admin_password,
        help="Admin password (default: ADMIN_PASSWORD)"
    )
    parser.add_argument(
        "--owner",
        action="store_true",
        help="Mark the account as the platform owner"
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before bootstrapping"
    )
    args = parser.parse_args()

    configure_logging(settings)
    wait_for_database(engine, settings.db_connect_retries)

    if args.create_tables:
        Base.metadata.create_all(bind=engine)

    db = get_db_session()
    try:
        added = ensure_default_categories(db)
        print(f"Default categories added: {added}")

        user = ensure_admin_user(
            db,
            email=args.email,
            username=args.username,
            password=args.password,
            owner=args.owner,
        )
        if user is None:
            print("No admin account created: pass --password or set ADMIN_PASSWORD")
            sys.exit(1)

        role = "owner" if user.is_owner else "admin"
        print(f"Admin account ready: {user.username} <{user.email}> ({role})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
