"""
Stored video/thumbnail blobs and HTTP byte-range handling.

Blob columns on ``Video`` are deferred, so they are only read here, with
``undefer``, and never pulled into the JSON endpoints.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple

import structlog
from sqlalchemy.orm import Session, load_only, undefer

from app.core.config import Settings, settings
from app.core.errors import NotFoundError, RangeNotSatisfiableError
from app.db.models.video import Video, UploadType

logger = structlog.get_logger()

_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)

DEFAULT_VIDEO_MIME = "video/mp4"
DEFAULT_THUMBNAIL_MIME = "image/jpeg"


@dataclass
class UploadedFile:
    """An uploaded multipart file, already read into memory"""
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class StoredFile:
    data: bytes
    mime_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ThumbnailResult:
    """Either stored bytes to send or a URL to redirect to"""
    file: Optional[StoredFile] = None
    redirect_url: Optional[str] = None


def parse_range_header(range_header: Optional[str], size: int) -> Optional[Tuple[int, int]]:
    """
    Resolve a ``Range`` header against a resource of ``size`` bytes.

    Returns an inclusive (start, end) pair, or None when the header is absent
    or not a single byte range (the caller then sends the whole file).
    Raises RangeNotSatisfiableError when the range lies outside the file.
    """
    if not range_header:
        return None

    match = _RANGE_RE.match(range_header)
    if not match:
        return None

    first, last = match.groups()
    if not first and not last:
        return None

    if not first:
        # Suffix range: the last N bytes
        suffix = int(last)
        if suffix == 0 or size == 0:
            raise _unsatisfiable(size)
        start = max(size - suffix, 0)
        end = size - 1
    else:
        start = int(first)
        end = int(last) if last else size - 1
        end = min(end, size - 1)

    if start >= size or start > end:
        raise _unsatisfiable(size)

    return start, end


def _unsatisfiable(size: int) -> RangeNotSatisfiableError:
    return RangeNotSatisfiableError(
        "Requested range not satisfiable",
        headers={"Content-Range": f"bytes */{size}"},
    )


class MediaService:
    def __init__(self, db: Session, config: Settings = settings):
        self.db = db
        self.config = config

    def get_video_file(self, video_id: str) -> StoredFile:
        video = self.db.query(Video).options(
            load_only(Video.id, Video.upload_type, Video.file_name, Video.mime_type, Video.file_size),
            undefer(Video.video_file),
        ).filter(Video.id == video_id).first()

        if not video:
            raise NotFoundError(f"No video found for ID - {video_id}")

        if video.upload_type != UploadType.FILE.value or not video.video_file:
            raise NotFoundError("Video file not available")

        return StoredFile(
            data=video.video_file,
            mime_type=video.mime_type or DEFAULT_VIDEO_MIME,
            filename=video.file_name or f"{video.id}.mp4",
        )

    def get_thumbnail(self, video_id: str) -> ThumbnailResult:
        """Stored bytes, then the stored URL, then the placeholder"""
        video = self.db.query(Video).options(
            load_only(
                Video.id, Video.thumbnail, Video.thumbnail_file_name,
                Video.thumbnail_mime_type, Video.thumbnail_file_size,
            ),
            undefer(Video.thumbnail_file),
        ).filter(Video.id == video_id).first()

        if not video:
            raise NotFoundError(f"No video found for ID - {video_id}")

        if video.thumbnail_file:
            return ThumbnailResult(file=StoredFile(
                data=video.thumbnail_file,
                mime_type=video.thumbnail_mime_type or DEFAULT_THUMBNAIL_MIME,
                filename=video.thumbnail_file_name or f"{video.id}.jpg",
            ))

        if video.thumbnail:
            return ThumbnailResult(redirect_url=video.thumbnail)

        return ThumbnailResult(redirect_url=self.config.placeholder_thumbnail_url)


PLACEHOLDER_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="800" height="450" viewBox="0 0 800 450">
  <defs>
    <linearGradient id="g" x1="0" y1="0" x2="1" y2="1">
      <stop offset="0%" stop-color="#1e293b"/>
      <stop offset="100%" stop-color="#334155"/>
    </linearGradient>
  </defs>
  <rect width="800" height="450" fill="url(#g)"/>
  <g fill="#e2e8f0" font-family="Inter,Segoe UI,Arial" text-anchor="middle">
    <text x="400" y="230" font-size="36" font-weight="700">RuzMovie</text>
    <text x="400" y="270" font-size="18" opacity="0.8">No thumbnail</text>
  </g>
</svg>"""
