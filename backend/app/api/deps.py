from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.cache import ResponseCache, get_profile_cache, get_video_cache
from app.db.session import get_db
from app.services import (
    AuthService, CategoryService, MediaService, UserService, VideoService,
)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_video_service(
    db: Session = Depends(get_db),
    video_cache: ResponseCache = Depends(get_video_cache),
    profile_cache: ResponseCache = Depends(get_profile_cache),
) -> VideoService:
    return VideoService(db, video_cache, profile_cache)


def get_media_service(db: Session = Depends(get_db)) -> MediaService:
    return MediaService(db)


def get_user_service(
    db: Session = Depends(get_db),
    profile_cache: ResponseCache = Depends(get_profile_cache),
) -> UserService:
    return UserService(db, profile_cache)


def get_category_service(
    db: Session = Depends(get_db),
    video_cache: ResponseCache = Depends(get_video_cache),
) -> CategoryService:
    return CategoryService(db, video_cache)
