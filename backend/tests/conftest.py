"""
Pytest configuration and shared fixtures for the RuzMovie API.
"""
import sys
from pathlib import Path

# Ensure backend package is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.cache import ResponseCache
from app.core.security import create_access_token, get_password_hash
from app.db.session import Base, get_db
from app.db import models  # noqa: F401
from app.db.models import User
from app.services.category_service import ensure_default_categories

TEST_PASSWORD = "secret123"

# bcrypt is slow by design; hash the shared test password once
_TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(scope="function")
def db():
    """
    Create a fresh database for each test.

    Uses an in-memory SQLite database with the default categories in place.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create session
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    ensure_default_categories(session)

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def caches():
    """Fresh response caches: profiles cached, video details uncached"""
    return {
        "profile": ResponseCache(300),
        "video": ResponseCache(0),
    }


@pytest.fixture
def client(db, caches):
    """Test client bound to the test database and fresh caches."""
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    previous = (app.state.profile_cache, app.state.video_cache)
    app.state.profile_cache = caches["profile"]
    app.state.video_cache = caches["video"]

    yield TestClient(app)

    # Clean up
    app.dependency_overrides.clear()
    app.state.profile_cache, app.state.video_cache = previous


@pytest.fixture
def make_user(db):
    """Factory creating users that can log in with TEST_PASSWORD."""
    def _make_user(username, is_admin=False, is_owner=False, **fields):
        user = User(
            firstname=fields.pop("firstname", username.capitalize()),
            lastname=fields.pop("lastname", "Tester"),
            username=username,
            email=fields.pop("email", f"{username}@example.com"),
            password=_TEST_PASSWORD_HASH,
            is_admin=is_admin,
            is_owner=is_owner,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin", is_admin=True)


@pytest.fixture
def owner_user(make_user):
    return make_user("owner", is_admin=True, is_owner=True)


def bearer(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def auth_headers():
    """Authorization headers carrying a real token for the given user."""
    return bearer


@pytest.fixture
def url_video(client, alice):
    """A URL video published by alice in the music category."""
    response = client.post(
        "/api/v1/videos",
        data={
            "title": "Evening Session",
            "description": "Live set",
            "category": "music",
            "url": "https://cdn.example.com/evening.mp4",
            "thumbnail": "https://cdn.example.com/evening.jpg",
        },
        headers=bearer(alice),
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]


@pytest.fixture
def password():
    """Plaintext password of users built by make_user."""
    return TEST_PASSWORD
