from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile
from fastapi.responses import RedirectResponse, Response

from app.api.deps import get_media_service, get_video_service
from app.core.security import get_current_user, get_current_user_required
from app.db.models.user import User
from app.schemas import (
    ApiResponse, CommentCreate, CommentResponse, LikeState, VideoDetail,
    VideoResponse, VideoSummary, ViewState, ok,
)
from app.services import MediaService, VideoService
from app.services.media_service import StoredFile, UploadedFile, parse_range_header
from app.services.video_service import DEFAULT_PAGE_SIZE, VideoFields

router = APIRouter()

ASSET_CACHE_CONTROL = "public, max-age=31536000, immutable"


async def read_upload(upload: Optional[UploadFile]) -> Optional[UploadedFile]:
    """Read a multipart file; empty file inputs count as absent"""
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    return UploadedFile(
        filename=upload.filename,
        content_type=upload.content_type or "",
        data=data,
    )


def content_disposition(filename: str) -> str:
    """Inline disposition with an ASCII fallback plus the RFC 6266 UTF-8 name"""
    fallback = filename.encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace('"', "_").replace("\\", "_").strip()
    if not fallback or fallback.startswith("."):
        fallback = "file" + fallback
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _asset_headers(stored: StoredFile) -> dict:
    return {
        "Content-Disposition": content_disposition(stored.filename),
        "Accept-Ranges": "bytes",
        "Cache-Control": ASSET_CACHE_CONTROL,
    }


@router.get("", response_model=ApiResponse[List[VideoSummary]])
async def recommended_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1),
    category: Optional[str] = None,
    service: VideoService = Depends(get_video_service),
):
    """Public listing, featured first then newest"""
    return ok(service.recommended(page=page, limit=limit, category=category))


@router.post("", response_model=ApiResponse[VideoResponse])
async def create_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    thumbnail: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail_file: Optional[UploadFile] = File(None, alias="thumbnailFile"),
    user: User = Depends(get_current_user_required),
    service: VideoService = Depends(get_video_service),
):
    """Publish a video by URL or by uploading the file itself"""
    fields = VideoFields(
        title=title,
        description=description,
        category=category,
        url=url,
        thumbnail=thumbnail,
    )
    video = service.create_video(
        user,
        fields,
        video_upload=await read_upload(video_file),
        thumbnail_upload=await read_upload(thumbnail_file),
    )
    return ok(video)


@router.get("/search", response_model=ApiResponse[List[VideoSummary]])
async def search_videos(
    searchterm: Optional[str] = None,
    user: Optional[User] = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    return ok(service.search(searchterm))


@router.get("/{video_id}", response_model=ApiResponse[VideoDetail])
async def get_video(
    video_id: str,
    user: Optional[User] = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    """Video with comments, counts and the caller's flags"""
    return ok(service.get_detail(video_id, user))


@router.get("/{video_id}/file")
async def stream_video_file(
    video_id: str,
    range_header: Optional[str] = Header(None, alias="range"),
    media: MediaService = Depends(get_media_service),
):
    """
    Stream a stored video file.

    Supports single byte ranges (``bytes=start-end`` and ``bytes=-N``) so
    players can seek; without a Range header the whole file is returned.
    """
    stored = media.get_video_file(video_id)
    size = stored.size
    headers = _asset_headers(stored)

    byte_range = parse_range_header(range_header, size)
    if byte_range is None:
        headers["Content-Length"] = str(size)
        return Response(
            content=stored.data,
            status_code=200,
            media_type=stored.mime_type,
            headers=headers,
        )

    start, end = byte_range
    chunk = stored.data[start:end + 1]
    headers["Content-Range"] = f"bytes {start}-{end}/{size}"
    headers["Content-Length"] = str(len(chunk))
    return Response(
        content=chunk,
        status_code=206,
        media_type=stored.mime_type,
        headers=headers,
    )


@router.get("/{video_id}/thumbnail")
async def get_thumbnail(
    video_id: str,
    media: MediaService = Depends(get_media_service),
):
    result = media.get_thumbnail(video_id)
    if result.file is not None:
        return Response(
            content=result.file.data,
            media_type=result.file.mime_type,
            headers=_asset_headers(result.file),
        )
    return RedirectResponse(
        result.redirect_url,
        status_code=302,
        headers={"Cache-Control": ASSET_CACHE_CONTROL},
    )


@router.api_route("/{video_id}/like", methods=["GET", "POST"], response_model=ApiResponse[LikeState])
async def like_video(
    video_id: str,
    user: User = Depends(get_current_user_required),
    service: VideoService = Depends(get_video_service),
):
    return ok(service.like(video_id, user))


@router.api_route("/{video_id}/dislike", methods=["GET", "POST"], response_model=ApiResponse[LikeState])
async def dislike_video(
    video_id: str,
    user: User = Depends(get_current_user_required),
    service: VideoService = Depends(get_video_service),
):
    return ok(service.dislike(video_id, user))


@router.post("/{video_id}/comment", response_model=ApiResponse[CommentResponse])
async def add_comment(
    video_id: str,
    data: CommentCreate,
    user: User = Depends(get_current_user_required),
    service: VideoService = Depends(get_video_service),
):
    return ok(service.add_comment(video_id, user, data.text))


@router.api_route("/{video_id}/view", methods=["GET", "POST"], response_model=ApiResponse[ViewState])
async def record_view(
    video_id: str,
    user: Optional[User] = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    """Count a view once per signed-in user; guests are acknowledged only"""
    state = service.record_view(video_id, user)
    if not state.recorded:
        return ok(state, "View not recorded - user not authenticated")
    return ok(state)
