import time

import pytest


@pytest.fixture
def provider(monkeypatch: pytest.MonkeyPatch):
    """In-memory stand-in for the identity provider's REST endpoints."""
    from app import auth

    accounts: dict[str, dict] = {}

    async def _fake_post(path: str, body: dict) -> dict:
        email = body["email"]
        if path == "signup":
            if email in accounts:
                raise auth.IdentityProviderError(
                    "User already registered", status_code=422, payload={"code": "user_already_exists"}
                )
            accounts[email] = {"id": f"uid-{len(accounts) + 1}", "password": body["password"]}
            return {"id": accounts[email]["id"], "email": email}
        account = accounts.get(email)
        if not account or account["password"] != body["password"]:
            raise auth.IdentityProviderError("Invalid login credentials", status_code=400)
        return {"access_token": "x", "user": {"id": account["id"], "email": email}}

    monkeypatch.setattr(auth, "_provider_post", _fake_post)
    return accounts


def test_session_token_round_trip():
    from app.auth import create_session_token, verify_session_token

    token = create_session_token(user_id="user-1", email="ada@example.com")
    claims = verify_session_token(token)
    assert claims["sub"] == "user-1"
    assert claims["email"] == "ada@example.com"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_expired_or_tampered_tokens_are_rejected():
    from app.auth import create_session_token, verify_session_token

    expired = create_session_token(user_id="user-1", email="a@b.co", now=time.time() - 8 * 24 * 3600)
    assert verify_session_token(expired) is None
    assert verify_session_token("not-a-token") is None
    assert verify_session_token("") is None


def test_duplicate_marker_detection():
    from app.auth import IdentityProviderError

    assert IdentityProviderError("User already registered").is_duplicate
    assert IdentityProviderError("x", payload={"error_code": "email_exists"}).is_duplicate
    assert not IdentityProviderError("weak password").is_duplicate


@pytest.mark.asyncio
async def test_create_account_then_duplicate(provider, fake_store):
    from app.auth import MSG_EMAIL_IN_USE, MSG_SIGN_UP_OK, create_account

    first = await create_account(name="Ada", email="ada@example.com", password="password123")
    assert first == {"success": True, "message": MSG_SIGN_UP_OK}
    assert fake_store.rows("users") == [{"id": "uid-1", "name": "Ada", "email": "ada@example.com"}]

    second = await create_account(name="Ada", email="ada@example.com", password="password123")
    assert second == {"success": False, "message": MSG_EMAIL_IN_USE}
    assert len(fake_store.rows("users")) == 1


@pytest.mark.asyncio
async def test_authenticate_and_current_user(provider, fake_store):
    from app.auth import MSG_INVALID_LOGIN, authenticate, create_account, current_user

    await create_account(name="Ada", email="ada@example.com", password="password123")

    bad = await authenticate(email="ada@example.com", password="wrong-password")
    assert bad == {"success": False, "message": MSG_INVALID_LOGIN}

    ok = await authenticate(email="ada@example.com", password="password123")
    assert ok["success"] is True
    assert ok["user_id"] == "uid-1"

    user = await current_user(ok["token"])
    assert user == {"id": "uid-1", "name": "Ada", "email": "ada@example.com"}


@pytest.mark.asyncio
async def test_current_user_requires_profile(fake_store):
    from app.auth import create_session_token, current_user

    token = create_session_token(user_id="ghost", email="ghost@example.com")
    assert await current_user(token) is None
    assert await current_user(None) is None


def test_sign_in_sets_session_cookie(provider):
    from fastapi.testclient import TestClient

    from app.main import app

    client = TestClient(app)
    created = client.post("/api/auth/sign-up", json={
        "name": "Ada Lovelace",
        "email": "Ada@Example.com",
        "password": "password123",
        "confirm_password": "password123",
    })
    assert created.status_code == 200
    assert created.json()["success"] is True

    again = client.post("/api/auth/sign-up", json={
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "password": "password123",
        "confirm_password": "password123",
    })
    assert again.status_code == 409

    res = client.post("/api/auth/sign-in", json={"email": "ada@example.com", "password": "password123"})
    assert res.status_code == 200
    cookie = res.headers["set-cookie"].lower()
    assert cookie.startswith("session=")
    assert "httponly" in cookie
    assert "max-age=604800" in cookie
    assert "path=/" in cookie
    assert "samesite=lax" in cookie

    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json() == {"id": "uid-1", "name": "Ada Lovelace", "email": "ada@example.com"}

    client.post("/api/auth/sign-out")
    assert client.get("/api/auth/me").status_code == 401


def test_sign_in_wrong_password_is_401(provider):
    from fastapi.testclient import TestClient

    from app.main import app

    client = TestClient(app)
    res = client.post("/api/auth/sign-in", json={"email": "nobody@example.com", "password": "password123"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid email or password"
    assert "set-cookie" not in res.headers


def test_production_without_secret_refuses_sessions(monkeypatch: pytest.MonkeyPatch, seeded_user):
    from fastapi import HTTPException
    from fastapi.testclient import TestClient
    from jose import jwt

    from app import auth
    from app.main import app
    from core.config import DEV_SESSION_SECRET

    issued_at = int(time.time())
    forged = jwt.encode(
        {"sub": seeded_user["id"], "email": seeded_user["email"], "iat": issued_at, "exp": issued_at + 3600},
        DEV_SESSION_SECRET,
        algorithm="HS256",
    )
    monkeypatch.setattr(auth, "SESSION_SECRET", "")
    monkeypatch.setattr(auth, "IS_PRODUCTION", True)

    with pytest.raises(HTTPException) as exc_info:
        auth.verify_session_token(forged)
    assert exc_info.value.status_code == 500
    with pytest.raises(HTTPException):
        auth.create_session_token(user_id="user-1", email="ada@example.com")

    res = TestClient(app).get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert res.status_code == 500


def test_development_without_secret_uses_dev_key(monkeypatch: pytest.MonkeyPatch):
    from app import auth

    monkeypatch.setattr(auth, "SESSION_SECRET", "")
    monkeypatch.setattr(auth, "IS_PRODUCTION", False)

    token = auth.create_session_token(user_id="user-1", email="ada@example.com")
    assert auth.verify_session_token(token)["sub"] == "user-1"
