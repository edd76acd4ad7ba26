from typing import Generic, List, Optional, TypeVar
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime

T = TypeVar("T")


class CamelModel(BaseModel):
    """Response models: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Envelope
class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


def ok(data=None, message: Optional[str] = None) -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message)


# Auth Schemas
class SignupRequest(BaseModel):
    firstname: str = Field(..., min_length=1, max_length=100)
    lastname: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=3, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("username", "email")
    @classmethod
    def strip_identifier(cls, v: str) -> str:
        return v.strip()


class LoginRequest(BaseModel):
    email_or_username: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("email_or_username", "emailOrUsername", "email", "username"),
    )
    password: str = Field(..., min_length=1)


# User Schemas
class UserBrief(CamelModel):
    id: str
    username: str
    avatar: Optional[str] = None


class ChannelSummary(UserBrief):
    subscribers_count: int = 0


class UserPublic(CamelModel):
    id: str
    firstname: str
    lastname: str
    username: str
    email: str
    avatar: Optional[str] = None
    cover: Optional[str] = None
    channel_description: Optional[str] = None


class MeResponse(UserPublic):
    is_admin: bool = False
    is_owner: bool = False
    channels: List[UserBrief] = []


class AdminUserResponse(CamelModel):
    id: str
    firstname: str
    lastname: str
    username: str
    email: str
    avatar: Optional[str] = None
    is_admin: bool = False
    is_owner: bool = False


class UserUpdate(CamelModel):
    firstname: Optional[str] = Field(default=None, min_length=1, max_length=100)
    lastname: Optional[str] = Field(default=None, min_length=1, max_length=100)
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    avatar: Optional[str] = None
    cover: Optional[str] = None
    channel_description: Optional[str] = None


class ChannelCard(CamelModel):
    id: str
    username: str
    avatar: Optional[str] = None
    channel_description: Optional[str] = None
    subscribers_count: int = 0
    videos_count: int = 0
    is_subscribed: bool = False
    is_me: bool = False


class SubscriptionState(CamelModel):
    is_subscribed: bool
    subscribers_count: int


# Video Schemas
class VideoSummary(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    thumbnail_file_url: Optional[str] = None
    category: str
    featured: bool = False
    upload_type: str
    user_id: str
    created_at: datetime
    user: Optional[UserBrief] = None
    views: int = 0


class VideoResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    category: str
    featured: bool = False
    upload_type: str
    user_id: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    thumbnail_file_name: Optional[str] = None
    thumbnail_file_size: Optional[int] = None
    thumbnail_mime_type: Optional[str] = None
    video_file_url: Optional[str] = None
    thumbnail_file_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class CommentResponse(CamelModel):
    id: str
    text: str
    created_at: datetime
    user: UserBrief


class VideoDetail(VideoResponse):
    user: Optional[UserBrief] = None
    comments: List[CommentResponse] = []
    comments_count: int = 0
    likes_count: int = 0
    dislikes_count: int = 0
    views: int = 0
    subscribers_count: int = 0
    is_liked: bool = False
    is_disliked: bool = False
    is_subscribed: bool = False
    is_viewed: bool = False
    is_video_mine: bool = False


class VideoUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = None
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    featured: Optional[bool] = None
    category: Optional[str] = None


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=5000)

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Comment text is required")
        return v


class LikeState(CamelModel):
    is_liked: bool
    is_disliked: bool
    likes_count: int
    dislikes_count: int


class ViewState(CamelModel):
    recorded: bool
    views: int


# Profile Schemas
class ProfileResponse(UserPublic):
    subscribers_count: int = 0
    is_me: bool = False
    is_subscribed: bool = False
    channels: List[ChannelSummary] = []
    videos: List[VideoSummary] = []


# Category Schemas
class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    order: int
    is_default: bool = False


class CategoryCreate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    slug: Optional[str] = None


class CategoryOrder(BaseModel):
    id: int
    order: int


class CategoryReorderRequest(BaseModel):
    categories: List[CategoryOrder]


# Stats Schemas
class StatsResponse(CamelModel):
    total_users: int
    total_videos: int
    file_videos: int
    total_comments: int
    total_views: int
    total_categories: int
