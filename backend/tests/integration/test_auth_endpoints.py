"""
Integration tests for signup, login and the current-user endpoint.
"""
from app.core.security import decode_access_token
from app.db.models import User

SIGNUP = {
    "firstname": "Dana",
    "lastname": "Reyes",
    "username": "dana",
    "email": "dana@example.com",
    "password": "correct-horse",
}


def test_signup_returns_token_for_new_user(client, db):
    response = client.post("/api/v1/auth/signup", json=SIGNUP)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True

    user_id = decode_access_token(body["data"])
    user = db.query(User).filter(User.id == user_id).first()
    assert user is not None
    assert user.username == "dana"
    assert user.password != SIGNUP["password"]


def test_signup_rejects_taken_username(client, alice):
    response = client.post("/api/v1/auth/signup", json={**SIGNUP, "username": "alice"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Username or email is already taken"}


def test_signup_requires_all_fields(client):
    payload = {k: v for k, v in SIGNUP.items() if k != "email"}

    response = client.post("/api/v1/auth/signup", json=payload)

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "email" in response.json()["message"]


def test_login_with_email_or_username(client, alice, password):
    for identifier in ("alice", "alice@example.com"):
        response = client.post(
            "/api/v1/auth/login",
            json={"email_or_username": identifier, "password": password},
        )

        assert response.status_code == 200
        assert decode_access_token(response.json()["data"]) == alice.id


def test_login_failures_share_one_message(client, alice, password):
    wrong_password = client.post(
        "/api/v1/auth/login",
        json={"email_or_username": "alice", "password": "nope-nope"},
    )
    unknown_user = client.post(
        "/api/v1/auth/login",
        json={"email_or_username": "nobody", "password": password},
    )

    assert wrong_password.status_code == 400
    assert unknown_user.status_code == 400
    assert wrong_password.json()["message"] == unknown_user.json()["message"] == "Invalid credentials"


def test_me_includes_subscribed_channels(client, alice, bob, auth_headers):
    client.get(f"/api/v1/users/{alice.id}/togglesubscribe", headers=auth_headers(bob))

    response = client.get("/api/v1/auth/me", headers=auth_headers(bob))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "bob"
    assert data["isAdmin"] is False
    assert data["isOwner"] is False
    assert [c["username"] for c in data["channels"]] == ["alice"]
    assert "password" not in data


def test_me_requires_valid_token(client):
    missing = client.get("/api/v1/auth/me")
    garbage = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})

    for response in (missing, garbage):
        assert response.status_code == 401
        assert response.json()["message"] == "You need to be logged in to visit this route"
