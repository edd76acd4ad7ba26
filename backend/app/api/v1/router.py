from fastapi import APIRouter
from app.api.v1.endpoints import (
    auth, videos, users, categories, admin
)

api_router = APIRouter()

# Public and member endpoints
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(videos.router, prefix="/videos", tags=["videos"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(categories.router, prefix="/categories", tags=["categories"])

# Admin endpoints
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
