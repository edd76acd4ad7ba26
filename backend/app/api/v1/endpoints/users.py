from typing import List, Optional

from fastapi import APIRouter, Depends

from app.api.deps import get_user_service
from app.core.security import get_current_user_required, get_owner_user
from app.db.models.user import User
from app.schemas import (
    AdminUserResponse, ApiResponse, ChannelCard, MeResponse, ProfileResponse,
    SubscriptionState, UserUpdate, VideoSummary, ok,
)
from app.services import UserService

router = APIRouter()


@router.get("", response_model=ApiResponse[List[ChannelCard]])
async def recommend_channels(
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    """Other channels to discover"""
    return ok(service.recommend_channels(user))


@router.put("", response_model=ApiResponse[MeResponse])
async def edit_user(
    changes: UserUpdate,
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    """Update the caller's own profile"""
    return ok(service.edit_user(user, changes))


@router.get("/feed", response_model=ApiResponse[List[VideoSummary]])
async def feed(
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    """Videos from subscribed channels, newest first"""
    return ok(service.feed(user))


@router.get("/likedVideos", response_model=ApiResponse[List[VideoSummary]])
async def liked_videos(
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    return ok(service.liked_videos(user))


@router.get("/history", response_model=ApiResponse[List[VideoSummary]])
async def history(
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    return ok(service.history(user))


@router.get("/search", response_model=ApiResponse[List[ChannelCard]])
async def search_users(
    searchterm: Optional[str] = None,
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    return ok(service.search_users(searchterm, user))


@router.get("/{user_id}", response_model=ApiResponse[ProfileResponse])
async def get_profile(
    user_id: str,
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    return ok(service.get_profile(user_id, user))


@router.get("/{user_id}/togglesubscribe", response_model=ApiResponse[SubscriptionState])
async def toggle_subscribe(
    user_id: str,
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    return ok(service.toggle_subscribe(user, user_id))


@router.post("/{user_id}/toggle-admin", response_model=ApiResponse[AdminUserResponse])
async def toggle_admin(
    user_id: str,
    owner: User = Depends(get_owner_user),
    service: UserService = Depends(get_user_service),
):
    """Grant or revoke admin rights (owner only)"""
    return ok(service.toggle_admin(user_id))
