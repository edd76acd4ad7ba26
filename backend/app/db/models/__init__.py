from app.db.models.user import User, Subscription
from app.db.models.video import Video, UploadType, Comment, VideoLike, View
from app.db.models.category import Category

__all__ = [
    "User",
    "Subscription",
    "Video",
    "UploadType",
    "Comment",
    "VideoLike",
    "View",
    "Category",
]
