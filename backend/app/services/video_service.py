from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

import structlog
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.cache import ResponseCache
from app.core.config import Settings, settings
from app.core.errors import BadRequestError, NotFoundError, PayloadTooLargeError
from app.db.models.category import Category
from app.db.models.user import User, Subscription
from app.db.models.video import Video, UploadType, Comment, VideoLike, View
from app.schemas import (
    CommentResponse, LikeState, UserBrief, VideoDetail, VideoResponse,
    VideoSummary, VideoUpdate, ViewState,
)
from app.services.media_service import UploadedFile

logger = structlog.get_logger()

LIKE = 1
DISLIKE = -1

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 12


@dataclass
class VideoFields:
    """Textual fields of an upload form"""
    title: Optional[str]
    description: Optional[str] = None
    category: Optional[str] = None
    url: Optional[str] = None
    thumbnail: Optional[str] = None
    featured: Optional[bool] = None


def video_file_url(video: Video, config: Settings = settings) -> Optional[str]:
    if video.upload_type == UploadType.FILE.value:
        return f"{config.api_v1_prefix}/videos/{video.id}/file"
    return None


def thumbnail_file_url(video: Video, config: Settings = settings) -> Optional[str]:
    if video.has_stored_thumbnail:
        return f"{config.api_v1_prefix}/videos/{video.id}/thumbnail"
    return None


def count_views(db: Session, video_ids: Iterable[str]) -> Dict[str, int]:
    """View counts for many videos in one grouped query"""
    ids = list(video_ids)
    if not ids:
        return {}
    rows = db.query(View.video_id, func.count(View.id)).filter(
        View.video_id.in_(ids)
    ).group_by(View.video_id).all()
    return {video_id: count for video_id, count in rows}


def to_summary(video: Video, views: int, include_user: bool = True) -> VideoSummary:
    return VideoSummary(
        id=video.id,
        title=video.title,
        description=video.description,
        url=video.url,
        thumbnail=video.thumbnail,
        thumbnail_file_url=thumbnail_file_url(video),
        category=video.category,
        featured=bool(video.featured),
        upload_type=video.upload_type,
        user_id=video.user_id,
        created_at=video.created_at,
        user=UserBrief.model_validate(video.user) if include_user and video.user else None,
        views=views,
    )


def summarize(db: Session, videos: List[Video], include_user: bool = True) -> List[VideoSummary]:
    views = count_views(db, (v.id for v in videos))
    return [to_summary(v, views.get(v.id, 0), include_user) for v in videos]


def to_response(video: Video) -> VideoResponse:
    data = VideoResponse.model_validate(video)
    return data.model_copy(update={
        "video_file_url": video_file_url(video),
        "thumbnail_file_url": thumbnail_file_url(video),
    })


class VideoService:
    """Video ingestion, listings and engagement (likes, comments, views)"""

    def __init__(
        self,
        db: Session,
        video_cache: ResponseCache,
        profile_cache: ResponseCache,
        config: Settings = settings,
    ):
        self.db = db
        self.video_cache = video_cache
        self.profile_cache = profile_cache
        self.config = config

    # ---- lookups ----

    def get_or_404(self, video_id: str) -> Video:
        video = self.db.query(Video).filter(Video.id == video_id).first()
        if not video:
            raise NotFoundError(f"No video found for ID - {video_id}")
        return video

    def _resolve_category(self, slug: Optional[str]) -> str:
        slug = (slug or "movies").strip().lower()
        exists = self.db.query(Category.id).filter(Category.slug == slug).first()
        if not exists:
            raise BadRequestError(f"Unknown category '{slug}'")
        return slug

    # ---- ingestion ----

    def create_video(
        self,
        owner: User,
        fields: VideoFields,
        video_upload: Optional[UploadedFile] = None,
        thumbnail_upload: Optional[UploadedFile] = None,
        allow_featured: bool = False,
    ) -> VideoResponse:
        title = (fields.title or "").strip()
        if not title:
            raise BadRequestError("Title is required")

        thumbnail_url = (fields.thumbnail or "").strip() or None
        url = (fields.url or "").strip() or None

        video = Video(
            user_id=owner.id,
            title=title,
            description=fields.description,
            category=self._resolve_category(fields.category),
            featured=bool(fields.featured) if allow_featured else False,
        )

        if video_upload is not None:
            self._check_upload(video_upload, "video/")
            video.upload_type = UploadType.FILE.value
            video.url = None
            video.video_file = video_upload.data
            video.file_name = video_upload.filename
            video.file_size = video_upload.size
            video.mime_type = video_upload.content_type
            if not thumbnail_url and thumbnail_upload is None:
                thumbnail_url = self.config.placeholder_thumbnail_url
        else:
            if not url:
                raise BadRequestError("Provide a video URL or upload a video file")
            if not thumbnail_url and thumbnail_upload is None:
                raise BadRequestError("Provide a thumbnail URL or upload a thumbnail image")
            video.upload_type = UploadType.URL.value
            video.url = url

        if thumbnail_upload is not None:
            self._check_upload(thumbnail_upload, "image/")
            video.thumbnail_file = thumbnail_upload.data
            video.thumbnail_file_name = thumbnail_upload.filename
            video.thumbnail_file_size = thumbnail_upload.size
            video.thumbnail_mime_type = thumbnail_upload.content_type
            # The stored image wins over any URL
            thumbnail_url = None

        video.thumbnail = thumbnail_url

        self.db.add(video)
        self.db.commit()
        self.db.refresh(video)

        self.video_cache.clear()
        self.profile_cache.invalidate(owner.id)

        logger.info(
            "Video created",
            video_id=video.id,
            user_id=owner.id,
            upload_type=video.upload_type,
            file_size=video.file_size,
        )
        return to_response(video)

    def _check_upload(self, upload: UploadedFile, mime_prefix: str) -> None:
        if not upload.data:
            raise BadRequestError(f"Uploaded file '{upload.filename}' is empty")
        if upload.size > self.config.max_upload_size_bytes:
            raise PayloadTooLargeError(
                f"File exceeds the {self.config.max_upload_size_mb}MB upload limit"
            )
        if not (upload.content_type or "").startswith(mime_prefix):
            kind = "video" if mime_prefix == "video/" else "image"
            raise BadRequestError(f"Only {kind} files are allowed")

    # ---- listings ----

    def recommended(self, page: int = 1, limit: int = DEFAULT_PAGE_SIZE, category: Optional[str] = None) -> List[VideoSummary]:
        page = max(page or 1, 1)
        limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
        offset = (page - 1) * limit

        query = self.db.query(Video).options(joinedload(Video.user))
        if category and category.lower() != "all":
            query = query.filter(Video.category == category.lower())

        videos = query.order_by(
            Video.featured.desc(),
            Video.created_at.desc(),
        ).offset(offset).limit(limit).all()

        return summarize(self.db, videos)

    def search(self, term: Optional[str]) -> List[VideoSummary]:
        term = (term or "").strip()
        if not term:
            raise BadRequestError("Please enter the searchterm")

        pattern = f"%{term.lower()}%"
        videos = self.db.query(Video).options(joinedload(Video.user)).filter(
            or_(
                func.lower(Video.title).like(pattern),
                func.lower(func.coalesce(Video.description, "")).like(pattern),
            )
        ).order_by(Video.created_at.desc()).all()

        return summarize(self.db, videos)

    def list_all(self) -> List[VideoResponse]:
        videos = self.db.query(Video).order_by(Video.created_at.desc()).all()
        return [to_response(v) for v in videos]

    # ---- detail ----

    def get_detail(self, video_id: str, viewer: Optional[User] = None) -> VideoDetail:
        detail = self.video_cache.get(video_id)
        if detail is None:
            detail = self._build_public_detail(video_id)
            self.video_cache.set(video_id, detail)

        if viewer is None:
            return detail

        reaction = self.db.query(VideoLike.like).filter(
            VideoLike.video_id == video_id,
            VideoLike.user_id == viewer.id,
        ).scalar()
        is_subscribed = self.db.query(Subscription.id).filter(
            Subscription.subscriber == viewer.id,
            Subscription.subscribe_to == detail.user_id,
        ).first() is not None
        is_viewed = self.db.query(View.id).filter(
            View.user_id == viewer.id,
            View.video_id == video_id,
        ).first() is not None

        return detail.model_copy(update={
            "is_liked": reaction == LIKE,
            "is_disliked": reaction == DISLIKE,
            "is_subscribed": is_subscribed,
            "is_viewed": is_viewed,
            "is_video_mine": viewer.id == detail.user_id,
        })

    def _build_public_detail(self, video_id: str) -> VideoDetail:
        video = self.db.query(Video).options(joinedload(Video.user)).filter(
            Video.id == video_id
        ).first()
        if not video:
            raise NotFoundError(f"No video found for ID - {video_id}")

        comments = self.db.query(Comment).options(joinedload(Comment.user)).filter(
            Comment.video_id == video_id
        ).order_by(Comment.created_at.desc()).all()

        likes_count, dislikes_count = self._reaction_counts(video_id)
        views = self.db.query(func.count(View.id)).filter(View.video_id == video_id).scalar() or 0
        subscribers_count = self.db.query(func.count(Subscription.id)).filter(
            Subscription.subscribe_to == video.user_id
        ).scalar() or 0

        base = to_response(video)
        return VideoDetail(
            **base.model_dump(),
            user=UserBrief.model_validate(video.user) if video.user else None,
            comments=[CommentResponse.model_validate(c) for c in comments],
            comments_count=len(comments),
            likes_count=likes_count,
            dislikes_count=dislikes_count,
            views=views,
            subscribers_count=subscribers_count,
        )

    def _reaction_counts(self, video_id: str):
        rows = self.db.query(VideoLike.like, func.count(VideoLike.id)).filter(
            VideoLike.video_id == video_id
        ).group_by(VideoLike.like).all()
        counts = dict(rows)
        return counts.get(LIKE, 0), counts.get(DISLIKE, 0)

    # ---- engagement ----

    def like(self, video_id: str, user: User) -> LikeState:
        return self._toggle_reaction(video_id, user, LIKE)

    def dislike(self, video_id: str, user: User) -> LikeState:
        return self._toggle_reaction(video_id, user, DISLIKE)

    def _toggle_reaction(self, video_id: str, user: User, value: int) -> LikeState:
        """
        none -> value (insert), value -> none (delete), opposite -> value (flip).
        The (user_id, video_id) unique constraint keeps one row per pair.
        """
        self.get_or_404(video_id)

        try:
            self._write_reaction(video_id, user.id, value)
            self.db.commit()
        except IntegrityError:
            # A concurrent request inserted the row first; apply the
            # transition to the state it left behind.
            self.db.rollback()
            self._write_reaction(video_id, user.id, value)
            self.db.commit()

        self.video_cache.invalidate(video_id)

        reaction = self.db.query(VideoLike.like).filter(
            VideoLike.video_id == video_id,
            VideoLike.user_id == user.id,
        ).scalar()
        likes_count, dislikes_count = self._reaction_counts(video_id)
        return LikeState(
            is_liked=reaction == LIKE,
            is_disliked=reaction == DISLIKE,
            likes_count=likes_count,
            dislikes_count=dislikes_count,
        )

    def _write_reaction(self, video_id: str, user_id: str, value: int) -> None:
        existing = self.db.query(VideoLike).filter(
            VideoLike.user_id == user_id,
            VideoLike.video_id == video_id,
        ).first()

        if existing is None:
            self.db.add(VideoLike(user_id=user_id, video_id=video_id, like=value))
        elif existing.like == value:
            self.db.delete(existing)
        else:
            existing.like = value
        self.db.flush()

    def add_comment(self, video_id: str, user: User, text: str) -> CommentResponse:
        self.get_or_404(video_id)

        comment = Comment(text=text, user_id=user.id, video_id=video_id)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)

        self.video_cache.invalidate(video_id)
        return CommentResponse(
            id=comment.id,
            text=comment.text,
            created_at=comment.created_at,
            user=UserBrief.model_validate(user),
        )

    def record_view(self, video_id: str, user: Optional[User]) -> ViewState:
        """One view per user per video; guests are accepted but not counted"""
        video = self.get_or_404(video_id)

        if user is not None:
            self.db.add(View(user_id=user.id, video_id=video_id))
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                raise BadRequestError("You already viewed this video")

            self.video_cache.invalidate(video_id)
            self.profile_cache.invalidate(video.user_id)

        views = self.db.query(func.count(View.id)).filter(View.video_id == video_id).scalar() or 0
        return ViewState(recorded=user is not None, views=views)

    # ---- admin ----

    def update_video(self, video_id: str, changes: VideoUpdate) -> VideoResponse:
        video = self.get_or_404(video_id)
        data = changes.model_dump(exclude_unset=True)

        if "category" in data:
            data["category"] = self._resolve_category(data["category"])
        if data.get("title") is None:
            data.pop("title", None)
        if data.get("featured") is None:
            data.pop("featured", None)
        if "url" in data:
            if video.upload_type == UploadType.FILE.value:
                raise BadRequestError("Uploaded videos cannot be given a URL")
            data["url"] = (data["url"] or "").strip()
            if not data["url"]:
                raise BadRequestError("Video URL is required")

        for field, value in data.items():
            setattr(video, field, value)

        self.db.commit()
        self.db.refresh(video)

        self.video_cache.invalidate(video_id)
        self.profile_cache.invalidate(video.user_id)
        logger.info("Video updated", video_id=video_id, fields=sorted(data))
        return to_response(video)

    def delete_video(self, video_id: str) -> None:
        video = self.get_or_404(video_id)
        owner_id = video.user_id

        self.db.delete(video)
        self.db.commit()

        self.video_cache.invalidate(video_id)
        self.profile_cache.invalidate(owner_id)
        logger.info("Video deleted", video_id=video_id, user_id=owner_id)
