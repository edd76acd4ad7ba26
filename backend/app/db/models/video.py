import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, BigInteger, LargeBinary, DateTime,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.dialects.mysql import LONGBLOB
from sqlalchemy.orm import relationship, deferred
import enum
from app.db.session import Base


# LONGBLOB on MySQL, plain BLOB elsewhere
Blob = LargeBinary().with_variant(LONGBLOB(), "mysql")


def generate_uuid():
    return str(uuid.uuid4())


class UploadType(str, enum.Enum):
    URL = "url"
    FILE = "file"


class Video(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    url = Column(String(1000), nullable=True)
    thumbnail = Column(String(1000), nullable=True)
    # Category slug; deliberately not a foreign key (see Category)
    category = Column(String(100), nullable=False, default="movies", index=True)
    featured = Column(Boolean, nullable=False, default=False)
    upload_type = Column(String(10), nullable=False, default=UploadType.URL.value)

    # Stored video file; blobs are deferred so list/detail queries never load them
    video_file = deferred(Column(Blob, nullable=True))
    file_name = Column(String(255))
    file_size = Column(BigInteger)
    mime_type = Column(String(100))

    # Stored thumbnail file
    thumbnail_file = deferred(Column(Blob, nullable=True))
    thumbnail_file_name = Column(String(255))
    thumbnail_file_size = Column(BigInteger)
    thumbnail_mime_type = Column(String(100))

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="videos")
    comments = relationship("Comment", back_populates="video", cascade="all, delete-orphan")
    likes = relationship("VideoLike", back_populates="video", cascade="all, delete-orphan")
    views = relationship("View", back_populates="video", cascade="all, delete-orphan")

    @property
    def has_stored_file(self) -> bool:
        return self.upload_type == UploadType.FILE.value and bool(self.file_size)

    @property
    def has_stored_thumbnail(self) -> bool:
        return bool(self.thumbnail_file_size)

    def __repr__(self):
        return f"<Video {self.id}: {self.title[:50] if self.title else 'Untitled'}>"


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    text = Column(Text, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="comments")
    video = relationship("Video", back_populates="comments")


class VideoLike(Base):
    __tablename__ = "video_likes"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_video_likes_user_video"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    like = Column(Integer, nullable=False)  # 1 or -1

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="likes")
    video = relationship("Video", back_populates="likes")


class View(Base):
    __tablename__ = "views"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_views_user_video"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    video_id = Column(String(36), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="views")
    video = relationship("Video", back_populates="views")
