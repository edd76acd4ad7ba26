from typing import Dict, Iterable, List, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.cache import ResponseCache
from app.core.errors import BadRequestError, NotFoundError, PermissionDeniedError
from app.db.models.category import Category
from app.db.models.user import User, Subscription
from app.db.models.video import Video, UploadType, Comment, VideoLike, View
from app.schemas import (
    AdminUserResponse, ChannelCard, ChannelSummary, MeResponse, ProfileResponse,
    StatsResponse, SubscriptionState, UserBrief, UserPublic, UserUpdate, VideoSummary,
)
from app.services.video_service import LIKE, summarize

logger = structlog.get_logger()

RECOMMENDED_CHANNELS_LIMIT = 10


def subscriber_counts(db: Session, user_ids: Iterable[str]) -> Dict[str, int]:
    ids = list(user_ids)
    if not ids:
        return {}
    rows = db.query(Subscription.subscribe_to, func.count(Subscription.id)).filter(
        Subscription.subscribe_to.in_(ids)
    ).group_by(Subscription.subscribe_to).all()
    return {user_id: count for user_id, count in rows}


def video_counts(db: Session, user_ids: Iterable[str]) -> Dict[str, int]:
    ids = list(user_ids)
    if not ids:
        return {}
    rows = db.query(Video.user_id, func.count(Video.id)).filter(
        Video.user_id.in_(ids)
    ).group_by(Video.user_id).all()
    return {user_id: count for user_id, count in rows}


class UserService:
    """Profiles, subscriptions, personal listings and user administration"""

    def __init__(self, db: Session, profile_cache: ResponseCache):
        self.db = db
        self.profile_cache = profile_cache

    def get_or_404(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError(f"No user found for ID - {user_id}")
        return user

    def _subscribed_ids(self, subscriber_id: str) -> List[str]:
        rows = self.db.query(Subscription.subscribe_to).filter(
            Subscription.subscriber == subscriber_id
        ).all()
        return [row[0] for row in rows]

    def _subscriber_ids(self, channel_id: str) -> List[str]:
        rows = self.db.query(Subscription.subscriber).filter(
            Subscription.subscribe_to == channel_id
        ).all()
        return [row[0] for row in rows]

    def _is_subscribed(self, subscriber_id: str, channel_id: str) -> bool:
        return self.db.query(Subscription.id).filter(
            Subscription.subscriber == subscriber_id,
            Subscription.subscribe_to == channel_id,
        ).first() is not None

    # ---- self ----

    def me(self, user: User) -> MeResponse:
        channels = self.db.query(User).join(
            Subscription, Subscription.subscribe_to == User.id
        ).filter(Subscription.subscriber == user.id).order_by(User.username).all()

        me = MeResponse.model_validate(user)
        return me.model_copy(update={
            "channels": [UserBrief.model_validate(c) for c in channels],
        })

    def edit_user(self, user: User, changes: UserUpdate) -> MeResponse:
        data = changes.model_dump(exclude_unset=True)
        for field in ("firstname", "lastname", "username", "email"):
            # Required columns cannot be cleared
            if field in data and data[field] is None:
                data.pop(field)

        for field, value in data.items():
            setattr(user, field, value.strip() if isinstance(value, str) else value)

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BadRequestError("Username or email is already taken")

        self.db.refresh(user)
        self.profile_cache.invalidate(user.id)
        return self.me(user)

    # ---- subscriptions ----

    def toggle_subscribe(self, subscriber: User, channel_id: str) -> SubscriptionState:
        if subscriber.id == channel_id:
            raise BadRequestError("You cannot subscribe to your own channel")
        self.get_or_404(channel_id)

        deleted = self.db.query(Subscription).filter(
            Subscription.subscriber == subscriber.id,
            Subscription.subscribe_to == channel_id,
        ).delete(synchronize_session=False)

        if deleted:
            self.db.commit()
        else:
            self.db.add(Subscription(subscriber=subscriber.id, subscribe_to=channel_id))
            try:
                self.db.commit()
            except IntegrityError:
                # Another request subscribed first; the pair stays subscribed
                self.db.rollback()

        self.profile_cache.invalidate(subscriber.id, channel_id)

        return SubscriptionState(
            is_subscribed=self._is_subscribed(subscriber.id, channel_id),
            subscribers_count=subscriber_counts(self.db, [channel_id]).get(channel_id, 0),
        )

    # ---- listings ----

    def feed(self, user: User) -> List[VideoSummary]:
        channel_ids = self._subscribed_ids(user.id)
        if not channel_ids:
            return []

        videos = self.db.query(Video).options(joinedload(Video.user)).filter(
            Video.user_id.in_(channel_ids)
        ).order_by(Video.created_at.desc()).all()
        return summarize(self.db, videos)

    def liked_videos(self, user: User) -> List[VideoSummary]:
        videos = self.db.query(Video).options(joinedload(Video.user)).join(
            VideoLike, VideoLike.video_id == Video.id
        ).filter(
            VideoLike.user_id == user.id,
            VideoLike.like == LIKE,
        ).order_by(VideoLike.updated_at.desc()).all()
        return summarize(self.db, videos)

    def history(self, user: User) -> List[VideoSummary]:
        videos = self.db.query(Video).options(joinedload(Video.user)).join(
            View, View.video_id == Video.id
        ).filter(View.user_id == user.id).order_by(View.created_at.desc()).all()
        return summarize(self.db, videos)

    def _channel_cards(self, users: List[User], caller: User) -> List[ChannelCard]:
        ids = [u.id for u in users]
        subscribers = subscriber_counts(self.db, ids)
        videos = video_counts(self.db, ids)
        subscribed = set(self._subscribed_ids(caller.id))

        return [
            ChannelCard(
                id=u.id,
                username=u.username,
                avatar=u.avatar,
                channel_description=u.channel_description,
                subscribers_count=subscribers.get(u.id, 0),
                videos_count=videos.get(u.id, 0),
                is_subscribed=u.id in subscribed,
                is_me=u.id == caller.id,
            )
            for u in users
        ]

    def search_users(self, term: Optional[str], caller: User) -> List[ChannelCard]:
        term = (term or "").strip()
        if not term:
            raise BadRequestError("Please enter the searchterm")

        users = self.db.query(User).filter(
            func.lower(User.username).like(f"%{term.lower()}%")
        ).order_by(User.username).all()
        return self._channel_cards(users, caller)

    def recommend_channels(self, caller: User) -> List[ChannelCard]:
        users = self.db.query(User).filter(User.id != caller.id).order_by(
            User.created_at.desc()
        ).limit(RECOMMENDED_CHANNELS_LIMIT).all()
        return self._channel_cards(users, caller)

    # ---- profile ----

    def get_profile(self, user_id: str, caller: User) -> ProfileResponse:
        profile = self.profile_cache.get(user_id)
        if profile is None:
            profile = self._build_profile(user_id)
            self.profile_cache.set(user_id, profile)

        return profile.model_copy(update={
            "is_me": caller.id == user_id,
            "is_subscribed": self._is_subscribed(caller.id, user_id),
        })

    def _build_profile(self, user_id: str) -> ProfileResponse:
        user = self.get_or_404(user_id)

        channels = self.db.query(User).join(
            Subscription, Subscription.subscribe_to == User.id
        ).filter(Subscription.subscriber == user_id).order_by(User.username).all()
        counts = subscriber_counts(self.db, [user_id] + [c.id for c in channels])

        videos = self.db.query(Video).filter(Video.user_id == user_id).order_by(
            Video.created_at.desc()
        ).all()

        return ProfileResponse(
            **UserPublic.model_validate(user).model_dump(),
            subscribers_count=counts.get(user_id, 0),
            channels=[
                ChannelSummary(
                    id=c.id,
                    username=c.username,
                    avatar=c.avatar,
                    subscribers_count=counts.get(c.id, 0),
                )
                for c in channels
            ],
            videos=summarize(self.db, videos, include_user=False),
        )

    # ---- administration ----

    def list_users(self) -> List[AdminUserResponse]:
        users = self.db.query(User).order_by(User.created_at.desc()).all()
        return [AdminUserResponse.model_validate(u) for u in users]

    def remove_user(self, username: str) -> None:
        user = self.db.query(User).filter(User.username == username).first()
        if not user:
            raise NotFoundError(f"No user found for username - {username}")
        if user.is_owner:
            raise PermissionDeniedError("The owner account cannot be removed")

        user_id = user.id
        # Channels this user subscribed to lose a subscriber
        channel_ids = self._subscribed_ids(user_id)
        # Subscribers' channel lists drop this user
        subscriber_ids = self._subscriber_ids(user_id)

        self.db.delete(user)
        self.db.commit()

        self.profile_cache.invalidate(user_id, *channel_ids, *subscriber_ids)
        logger.info("User removed", user_id=user_id, username=username)

    def toggle_admin(self, user_id: str) -> AdminUserResponse:
        user = self.get_or_404(user_id)
        if user.is_owner:
            raise BadRequestError("The owner's admin status cannot be changed")

        user.is_admin = not user.is_admin
        self.db.commit()
        self.db.refresh(user)

        logger.info("Admin status toggled", user_id=user.id, is_admin=user.is_admin)
        return AdminUserResponse.model_validate(user)

    def stats(self) -> StatsResponse:
        return StatsResponse(
            total_users=self.db.query(func.count(User.id)).scalar() or 0,
            total_videos=self.db.query(func.count(Video.id)).scalar() or 0,
            file_videos=self.db.query(func.count(Video.id)).filter(
                Video.upload_type == UploadType.FILE.value
            ).scalar() or 0,
            total_comments=self.db.query(func.count(Comment.id)).scalar() or 0,
            total_views=self.db.query(func.count(View.id)).scalar() or 0,
            total_categories=self.db.query(func.count(Category.id)).scalar() or 0,
        )
