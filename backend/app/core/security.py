"""
Password hashing, access tokens and the authentication dependencies.

Tiers:
- get_current_user: optional auth, returns None for guests or bad tokens
- get_current_user_required: any logged-in user
- get_admin_user: admins and the owner
- get_owner_user: the owner only
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthenticationError, PermissionDeniedError
from app.db.models.user import User
from app.db.session import get_db

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)

LOGIN_REQUIRED_MESSAGE = "You need to be logged in to visit this route"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw])\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def parse_token_lifetime(value) -> timedelta:
    """
    Turn a JWT_EXPIRE value into a timedelta.

    Plain digits are seconds ("3600"); otherwise a single number with a unit
    suffix ("30m", "12h", "7d", "2w"). Anything else falls back to 7 days.
    """
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value or "").strip()
    if text.isdigit():
        return timedelta(seconds=int(text))

    match = _DURATION_RE.match(text)
    if match:
        amount, unit = match.groups()
        return timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})

    logger.warning("Unrecognised JWT_EXPIRE value, using 7d", value=value)
    return timedelta(days=7)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying only the user id and an expiry"""
    lifetime = expires_delta or parse_token_lifetime(settings.jwt_expire)
    payload = {
        "id": str(user_id),
        "exp": datetime.now(timezone.utc) + lifetime,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """Return the user id for a valid token, None for anything else"""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    user_id = payload.get("id")
    return str(user_id) if user_id else None


def _resolve_user(credentials: Optional[HTTPAuthorizationCredentials], db: Session) -> Optional[User]:
    if credentials is None or not credentials.credentials:
        return None
    user_id = decode_access_token(credentials.credentials)
    if not user_id:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Optional auth: the caller's user, or None for guests and invalid tokens"""
    return _resolve_user(credentials, db)


def get_current_user_required(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    # Expired, malformed and unknown-user tokens all get the same answer
    user = _resolve_user(credentials, db)
    if user is None:
        raise AuthenticationError(LOGIN_REQUIRED_MESSAGE)
    return user


def get_admin_user(user: User = Depends(get_current_user_required)) -> User:
    if not (user.is_admin or user.is_owner):
        raise PermissionDeniedError("Authorization denied, only admins can visit this route")
    return user


def get_owner_user(user: User = Depends(get_current_user_required)) -> User:
    if not user.is_owner:
        raise PermissionDeniedError("Authorization denied, only the owner can visit this route")
    return user
