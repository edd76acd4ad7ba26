from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.api.deps import get_user_service, get_video_service
from app.api.v1.endpoints.videos import read_upload
from app.core.security import get_admin_user
from app.db.models.user import User
from app.schemas import (
    AdminUserResponse, ApiResponse, StatsResponse, VideoResponse, VideoUpdate, ok,
)
from app.services import UserService, VideoService
from app.services.video_service import VideoFields

router = APIRouter()


@router.get("/videos", response_model=ApiResponse[List[VideoResponse]])
async def list_videos(
    admin: User = Depends(get_admin_user),
    service: VideoService = Depends(get_video_service),
):
    """Every video with its metadata"""
    return ok(service.list_all())


@router.post("/videos", response_model=ApiResponse[VideoResponse])
async def create_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    thumbnail: Optional[str] = Form(None),
    featured: Optional[bool] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail_file: Optional[UploadFile] = File(None, alias="thumbnailFile"),
    admin: User = Depends(get_admin_user),
    service: VideoService = Depends(get_video_service),
):
    """Same as the public upload, but may mark the video as featured"""
    fields = VideoFields(
        title=title,
        description=description,
        category=category,
        url=url,
        thumbnail=thumbnail,
        featured=featured,
    )
    video = service.create_video(
        admin,
        fields,
        video_upload=await read_upload(video_file),
        thumbnail_upload=await read_upload(thumbnail_file),
        allow_featured=True,
    )
    return ok(video)


@router.put("/videos/{video_id}", response_model=ApiResponse[VideoResponse])
async def update_video(
    video_id: str,
    changes: VideoUpdate,
    admin: User = Depends(get_admin_user),
    service: VideoService = Depends(get_video_service),
):
    return ok(service.update_video(video_id, changes), "Video updated")


@router.delete("/videos/{video_id}", response_model=ApiResponse[None])
async def delete_video(
    video_id: str,
    admin: User = Depends(get_admin_user),
    service: VideoService = Depends(get_video_service),
):
    """Delete a video with its comments, likes and views"""
    service.delete_video(video_id)
    return ok(message="Video deleted")


@router.get("/users", response_model=ApiResponse[List[AdminUserResponse]])
async def list_users(
    admin: User = Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
):
    return ok(service.list_users())


@router.delete("/users/{username}", response_model=ApiResponse[None])
async def remove_user(
    username: str,
    admin: User = Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
):
    service.remove_user(username)
    return ok(message="User removed")


@router.get("/stats", response_model=ApiResponse[StatsResponse])
async def get_stats(
    admin: User = Depends(get_admin_user),
    service: UserService = Depends(get_user_service),
):
    """Platform totals for the admin dashboard"""
    return ok(service.stats())
