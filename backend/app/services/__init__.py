# Services module
from app.services.auth_service import AuthService
from app.services.category_service import CategoryService
from app.services.media_service import MediaService
from app.services.user_service import UserService
from app.services.video_service import VideoService

__all__ = [
    "AuthService",
    "CategoryService",
    "MediaService",
    "UserService",
    "VideoService",
]
