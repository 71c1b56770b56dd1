from uuid import uuid4

from conftest import DEFAULT_PASSWORD
from vitraya.db.models import User


def _email() -> str:
    return f"auth_{uuid4().hex[:10]}@test.com"


def test_signup_login_and_me(client) -> None:
    email = _email()
    signup = client.post(
        "/auth/signup",
        json={"email": email, "password": DEFAULT_PASSWORD, "first_name": "Grace", "last_name": "Hopper"},
    )
    assert signup.status_code == 201
    assert signup.json()["token_type"] == "bearer"

    login = client.post("/auth/login", data={"username": email.upper(), "password": DEFAULT_PASSWORD})
    assert login.status_code == 200
    assert "session" in login.cookies

    token = login.json()["access_token"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.json()
    assert body["email"] == email
    assert body["first_name"] == "Grace"
    assert body["display_name"] == "Grace Hopper"
    assert body["auth_provider"] == "password"


def test_signup_duplicate_email_conflict(client) -> None:
    email = _email()
    assert client.post("/auth/signup", json={"email": email, "password": DEFAULT_PASSWORD}).status_code == 201
    again = client.post("/auth/signup", json={"email": email, "password": DEFAULT_PASSWORD})
    assert again.status_code == 409


def test_signup_rejects_short_password(client) -> None:
    response = client.post("/auth/signup", json={"email": _email(), "password": "123"})
    assert response.status_code == 422


def test_login_bad_password(client) -> None:
    email = _email()
    client.post("/auth/signup", json={"email": email, "password": DEFAULT_PASSWORD})
    response = client.post("/auth/login", data={"username": email, "password": "wrong-password"})
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_session_cookie_authenticates(client) -> None:
    email = _email()
    client.post("/auth/signup", json={"email": email, "password": DEFAULT_PASSWORD})
    client.post("/auth/login", data={"username": email, "password": DEFAULT_PASSWORD})

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == email

    logout = client.post("/auth/logout")
    assert logout.status_code == 200
    client.cookies.clear()
    assert client.get("/auth/me").status_code == 401


def test_invalid_token_rejected(client) -> None:
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_firebase_session_requires_token(client, fake_firebase) -> None:
    response = client.post("/api/auth/session", json={})
    assert response.status_code == 400


def test_firebase_session_rejects_unverified_token(client, fake_firebase) -> None:
    response = client.post("/api/auth/session", json={"idToken": "forged"})
    assert response.status_code == 401


def test_firebase_session_creates_google_user(client, fake_firebase, db_session) -> None:
    email = _email()
    uid = f"uid-{uuid4().hex[:8]}"
    fake_firebase["good-token"] = {"uid": uid, "email": email, "name": "Marie Salomea Curie", "picture": None}

    response = client.post("/api/auth/session", json={"idToken": "good-token"})
    assert response.status_code == 200
    assert response.json() == {"status": "success"}
    set_cookie = response.headers["set-cookie"].lower()
    assert "session=" in set_cookie
    assert "httponly" in set_cookie
    assert "samesite=strict" in set_cookie

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["auth_provider"] == "google"

    user = db_session.query(User).filter(User.firebase_uid == uid).one()
    assert user.first_name == "Marie"
    assert user.last_name == "Salomea Curie"

    again = client.post("/api/auth/session", json={"idToken": "good-token"})
    assert again.status_code == 200
    assert db_session.query(User).filter(User.email == email).count() == 1
