"""
Integration tests for video ingestion, listings and file streaming.
"""
from app.core.config import settings
from app.db.models import Video

VIDEO_BYTES = bytes(range(256)) * 4  # 1024 bytes


def _upload_file(client, headers, filename="clip.mp4", **fields):
    data = {"title": "Clip", "category": "movies", **fields}
    return client.post(
        "/api/v1/videos",
        data=data,
        files={"videoFile": (filename, VIDEO_BYTES, "video/mp4")},
        headers=headers,
    )


def test_file_upload_without_thumbnail_uses_placeholder(client, alice, auth_headers):
    response = _upload_file(client, auth_headers(alice))

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["uploadType"] == "file"
    assert data["url"] is None
    assert data["thumbnail"] == settings.placeholder_thumbnail_url
    assert data["fileSize"] == len(VIDEO_BYTES)
    assert data["mimeType"] == "video/mp4"
    assert data["videoFileUrl"] == f"/api/v1/videos/{data['id']}/file"
    assert "videoFile" not in data


def test_url_upload_without_any_thumbnail_is_rejected(client, db, alice, auth_headers):
    response = client.post(
        "/api/v1/videos",
        data={"title": "Clip", "url": "https://cdn.example.com/clip.mp4"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Provide a thumbnail URL or upload a thumbnail image"
    assert db.query(Video).count() == 0


def test_upload_needs_url_or_file(client, db, alice, auth_headers):
    response = client.post(
        "/api/v1/videos",
        data={"title": "Clip", "thumbnail": "https://cdn.example.com/t.jpg"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Provide a video URL or upload a video file"
    assert db.query(Video).count() == 0


def test_upload_rejects_non_video_file(client, db, alice, auth_headers):
    response = client.post(
        "/api/v1/videos",
        data={"title": "Clip"},
        files={"videoFile": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(alice),
    )

    assert response.status_code == 400
    assert db.query(Video).count() == 0


def test_upload_rejects_unknown_category(client, alice, auth_headers):
    response = _upload_file(client, auth_headers(alice), category="documentaries")

    assert response.status_code == 400


def test_upload_requires_login(client):
    response = client.post("/api/v1/videos", data={"title": "Clip"})

    assert response.status_code == 401


def test_stored_thumbnail_wins_over_url(client, alice, auth_headers):
    response = client.post(
        "/api/v1/videos",
        data={
            "title": "Clip",
            "url": "https://cdn.example.com/clip.mp4",
            "thumbnail": "https://cdn.example.com/ignored.jpg",
        },
        files={"thumbnailFile": ("cover.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers(alice),
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["thumbnail"] is None
    assert data["thumbnailFileUrl"] == f"/api/v1/videos/{data['id']}/thumbnail"

    thumb = client.get(data["thumbnailFileUrl"])
    assert thumb.status_code == 200
    assert thumb.content == b"\x89PNG fake"
    assert thumb.headers["content-type"] == "image/png"


def test_range_request_returns_partial_content(client, alice, auth_headers):
    video_id = _upload_file(client, auth_headers(alice)).json()["data"]["id"]

    response = client.get(f"/api/v1/videos/{video_id}/file", headers={"Range": "bytes=0-99"})

    assert response.status_code == 206
    assert response.headers["content-range"] == f"bytes 0-99/{len(VIDEO_BYTES)}"
    assert response.headers["content-length"] == "100"
    assert response.headers["accept-ranges"] == "bytes"
    assert response.content == VIDEO_BYTES[:100]


def test_no_range_returns_whole_file(client, alice, auth_headers):
    video_id = _upload_file(client, auth_headers(alice)).json()["data"]["id"]

    response = client.get(f"/api/v1/videos/{video_id}/file")

    assert response.status_code == 200
    assert response.content == VIDEO_BYTES
    assert response.headers["content-type"] == "video/mp4"
    assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
    assert response.headers["content-disposition"] == (
        "inline; filename=\"clip.mp4\"; filename*=UTF-8''clip.mp4"
    )


def test_range_past_end_is_unsatisfiable(client, alice, auth_headers):
    video_id = _upload_file(client, auth_headers(alice)).json()["data"]["id"]

    response = client.get(f"/api/v1/videos/{video_id}/file", headers={"Range": "bytes=5000-"})

    assert response.status_code == 416
    assert response.headers["content-range"] == f"bytes */{len(VIDEO_BYTES)}"


def test_url_video_has_no_file(client, url_video):
    response = client.get(f"/api/v1/videos/{url_video['id']}/file")

    assert response.status_code == 404
    assert response.json()["message"] == "Video file not available"


def test_thumbnail_redirects_to_stored_url(client, url_video):
    response = client.get(
        f"/api/v1/videos/{url_video['id']}/thumbnail",
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == "https://cdn.example.com/evening.jpg"


def test_thumbnail_falls_back_to_placeholder(client, db, url_video):
    video = db.query(Video).filter(Video.id == url_video["id"]).first()
    video.thumbnail = None
    db.commit()

    response = client.get(
        f"/api/v1/videos/{url_video['id']}/thumbnail",
        follow_redirects=False,
    )

    assert response.status_code == 302
    assert response.headers["location"] == settings.placeholder_thumbnail_url


def test_non_ascii_file_name_streams(client, alice, auth_headers):
    created = _upload_file(client, auth_headers(alice), filename="кино.mp4")
    assert created.status_code == 200, created.text
    video_id = created.json()["data"]["id"]

    response = client.get(f"/api/v1/videos/{video_id}/file", headers={"Range": "bytes=0-99"})

    assert response.status_code == 206
    assert response.content == VIDEO_BYTES[:100]
    assert response.headers["content-disposition"] == (
        "inline; filename=\"file.mp4\"; filename*=UTF-8''%D0%BA%D0%B8%D0%BD%D0%BE.mp4"
    )


def test_non_ascii_thumbnail_name_is_served(client, alice, auth_headers):
    created = client.post(
        "/api/v1/videos",
        data={"title": "Clip", "url": "https://cdn.example.com/clip.mp4"},
        files={"thumbnailFile": ("обложка.png", b"\x89PNG fake", "image/png")},
        headers=auth_headers(alice),
    )
    assert created.status_code == 200, created.text

    response = client.get(created.json()["data"]["thumbnailFileUrl"])

    assert response.status_code == 200
    assert response.content == b"\x89PNG fake"
    assert response.headers["content-disposition"].startswith('inline; filename="file.png"; ')


def test_unknown_video_is_404(client):
    for path in ("/api/v1/videos/nope", "/api/v1/videos/nope/file", "/api/v1/videos/nope/thumbnail"):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["success"] is False


def test_listing_filters_by_category(client, alice, auth_headers, url_video):
    _upload_file(client, auth_headers(alice), title="Feature", category="movies")

    music = client.get("/api/v1/videos", params={"category": "music"}).json()["data"]
    everything = client.get("/api/v1/videos", params={"category": "all"}).json()["data"]

    assert [v["title"] for v in music] == ["Evening Session"]
    assert len(everything) == 2
    assert music[0]["views"] == 0
    assert music[0]["user"]["username"] == "alice"


def test_listing_paginates(client, alice, auth_headers):
    headers = auth_headers(alice)
    for i in range(5):
        client.post(
            "/api/v1/videos",
            data={
                "title": f"Video {i}",
                "url": f"https://cdn.example.com/{i}.mp4",
                "thumbnail": f"https://cdn.example.com/{i}.jpg",
            },
            headers=headers,
        )

    first = client.get("/api/v1/videos", params={"page": 1, "limit": 2}).json()["data"]
    third = client.get("/api/v1/videos", params={"page": 3, "limit": 2}).json()["data"]

    assert len(first) == 2
    assert len(third) == 1


def test_search_matches_title_and_description(client, url_video):
    by_title = client.get("/api/v1/videos/search", params={"searchterm": "EVENING"}).json()["data"]
    by_description = client.get("/api/v1/videos/search", params={"searchterm": "live"}).json()["data"]

    assert [v["id"] for v in by_title] == [url_video["id"]]
    assert [v["id"] for v in by_description] == [url_video["id"]]


def test_search_requires_term(client):
    response = client.get("/api/v1/videos/search")

    assert response.status_code == 400
    assert response.json()["message"] == "Please enter the searchterm"


def test_video_detail_for_guest_and_member(client, bob, auth_headers, url_video):
    video_id = url_video["id"]
    client.post(f"/api/v1/videos/{video_id}/like", headers=auth_headers(bob))
    client.post(
        f"/api/v1/videos/{video_id}/comment",
        json={"text": "Great set"},
        headers=auth_headers(bob),
    )

    guest = client.get(f"/api/v1/videos/{video_id}").json()["data"]
    member = client.get(f"/api/v1/videos/{video_id}", headers=auth_headers(bob)).json()["data"]

    assert guest["likesCount"] == 1
    assert guest["commentsCount"] == 1
    assert guest["comments"][0]["user"]["username"] == "bob"
    assert guest["isLiked"] is False
    assert member["isLiked"] is True
    assert member["isVideoMine"] is False
    assert member["user"]["username"] == "alice"


def test_invalid_token_on_optional_route_is_ignored(client, url_video):
    response = client.get(
        f"/api/v1/videos/{url_video['id']}",
        headers={"Authorization": "Bearer not-a-token"},
    )

    assert response.status_code == 200
    assert response.json()["data"]["isLiked"] is False
