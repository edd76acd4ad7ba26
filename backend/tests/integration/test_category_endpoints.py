"""
Integration tests for category management.
"""
from app.db.models import Category, Video


def _category(db, slug):
    return db.query(Category).filter(Category.slug == slug).first()


def test_list_is_public_and_ordered(client):
    response = client.get("/api/v1/categories")

    assert response.status_code == 200
    slugs = [c["slug"] for c in response.json()["data"]]
    assert slugs == ["movies", "music", "dramas", "cartoons"]
    assert all(c["isDefault"] for c in response.json()["data"])


def test_create_appends_to_order(client, admin_user, auth_headers):
    response = client.post(
        "/api/v1/categories",
        json={"name": "Documentaries", "slug": "Documentaries"},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "documentaries"
    assert data["order"] == 5
    assert data["isDefault"] is False


def test_create_requires_name_and_slug(client, admin_user, auth_headers):
    response = client.post(
        "/api/v1/categories",
        json={"name": "Only name"},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 400


def test_create_rejects_duplicates(client, admin_user, auth_headers):
    response = client.post(
        "/api/v1/categories",
        json={"name": "Movies", "slug": "films"},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Category name or slug already exists"


def test_create_requires_admin(client, alice, auth_headers):
    response = client.post(
        "/api/v1/categories",
        json={"name": "Sports", "slug": "sports"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 403
    assert response.json()["message"] == "Authorization denied, only admins can visit this route"


def test_default_category_cannot_be_deleted(client, db, admin_user, auth_headers):
    movies = _category(db, "movies")

    response = client.delete(f"/api/v1/categories/{movies.id}", headers=auth_headers(admin_user))

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot delete default category"


def test_empty_category_is_deleted(client, db, admin_user, auth_headers):
    created = client.post(
        "/api/v1/categories",
        json={"name": "Sports", "slug": "sports"},
        headers=auth_headers(admin_user),
    ).json()["data"]

    response = client.delete(f"/api/v1/categories/{created['id']}", headers=auth_headers(admin_user))

    assert response.status_code == 200
    assert _category(db, "sports") is None


def test_category_in_use_cannot_be_deleted(client, db, alice, admin_user, auth_headers):
    created = client.post(
        "/api/v1/categories",
        json={"name": "Sports", "slug": "sports"},
        headers=auth_headers(admin_user),
    ).json()["data"]
    db.add(Video(user_id=alice.id, title="Match", category="sports", url="https://x/m.mp4"))
    db.commit()

    response = client.delete(f"/api/v1/categories/{created['id']}", headers=auth_headers(admin_user))

    assert response.status_code == 400
    assert response.json()["message"] == (
        "Cannot delete category with 1 video(s). Please move or delete videos first."
    )


def test_delete_missing_category(client, admin_user, auth_headers):
    response = client.delete("/api/v1/categories/9999", headers=auth_headers(admin_user))

    assert response.status_code == 404


def test_slug_change_moves_videos(client, db, admin_user, auth_headers, url_video):
    music = _category(db, "music")

    response = client.put(
        f"/api/v1/categories/{music.id}",
        json={"slug": "songs"},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 200
    assert response.json()["data"]["slug"] == "songs"
    video = db.query(Video).filter(Video.id == url_video["id"]).first()
    db.refresh(video)
    assert video.category == "songs"


def test_reorder(client, db, admin_user, auth_headers):
    cartoons = _category(db, "cartoons")
    movies = _category(db, "movies")

    response = client.post(
        "/api/v1/categories/reorder",
        json={"categories": [{"id": cartoons.id, "order": 0}, {"id": movies.id, "order": 10}]},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 200
    slugs = [c["slug"] for c in response.json()["data"]]
    assert slugs == ["cartoons", "music", "dramas", "movies"]


def test_reorder_requires_a_list(client, admin_user, auth_headers):
    response = client.post(
        "/api/v1/categories/reorder",
        json={"categories": "movies"},
        headers=auth_headers(admin_user),
    )

    assert response.status_code == 400
