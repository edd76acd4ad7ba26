"""
Startup data: default categories and the administrator account.

Runs from the application lifespan when BOOTSTRAP_ON_STARTUP is set and from
``scripts/create_admin.py``.
"""
from typing import Optional

import structlog
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import Settings, settings
from app.core.security import get_password_hash
from app.db.models.user import User
from app.services.category_service import ensure_default_categories

logger = structlog.get_logger()


def ensure_admin_user(
    db: Session,
    email: str,
    username: str,
    password: Optional[str],
    owner: bool = False,
) -> Optional[User]:
    """
    Create the admin account, or promote an existing one with the same
    email or username. Without a password nothing is created. The owner
    flag is only granted while no other account holds it.
    """
    user = db.query(User).filter(
        or_(User.email == email, User.username == username)
    ).first()

    if owner:
        other_owner = db.query(User.id).filter(User.is_owner.is_(True))
        if user is not None:
            other_owner = other_owner.filter(User.id != user.id)
        if other_owner.first() is not None:
            logger.info("Owner already exists, admin not promoted to owner", email=email)
            owner = False

    if user is None:
        if not password:
            logger.warning("Admin account not created, no ADMIN_PASSWORD configured", email=email)
            return None
        user = User(
            firstname="Admin",
            lastname="User",
            username=username,
            email=email,
            password=get_password_hash(password),
            is_admin=True,
            is_owner=owner,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Admin account created", user_id=user.id, username=username, owner=owner)
        return user

    changed = False
    if not user.is_admin:
        user.is_admin = True
        changed = True
    if owner and not user.is_owner:
        user.is_owner = True
        changed = True

    if changed:
        db.commit()
        db.refresh(user)
        logger.info("Admin account promoted", user_id=user.id, owner=user.is_owner)
    return user


def run_bootstrap(db: Session, config: Settings = settings) -> None:
    ensure_default_categories(db)
    ensure_admin_user(
        db,
        email=config.admin_email,
        username=config.admin_username,
        password=config.admin_password,
        owner=True,
    )
