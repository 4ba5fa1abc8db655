from fastapi import HTTPException, Request, Response
from jose import JWTError, jwt
import logging
import time
import httpx

from app.db import user_repo
from core.config import (
    DEV_SESSION_SECRET,
    IS_PRODUCTION,
    SESSION_COOKIE_NAME,
    SESSION_MAX_AGE_SEC,
    SESSION_SECRET,
    SUPABASE_SERVICE_KEY,
    SUPABASE_URL,
)

logger = logging.getLogger("app.auth")

SESSION_ALGORITHM = "HS256"
PROVIDER_TIMEOUT_SEC = 6.0

MSG_EMAIL_IN_USE = "Email already in use"
MSG_SIGN_UP_FAILED = "Account creation failed. Please try again."
MSG_SIGN_UP_OK = "Account created successfully!"
MSG_INVALID_LOGIN = "Invalid email or password"

_DUPLICATE_MARKERS = ("already registered", "already exists", "user_already_exists", "email_exists")


class IdentityProviderError(RuntimeError):
    def __init__(self, message: str, status_code: int = 0, payload: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def is_duplicate(self) -> bool:
        text = " ".join([
            str(self),
            str(self.payload.get("code") or ""),
            str(self.payload.get("error_code") or ""),
            str(self.payload.get("msg") or ""),
        ]).lower()
        return any(marker in text for marker in _DUPLICATE_MARKERS)


# ---------- IDENTITY PROVIDER ----------

async def _provider_post(path: str, body: dict) -> dict:
    if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
        raise IdentityProviderError("identity provider is not configured")

    url = f"{SUPABASE_URL.rstrip('/')}/auth/v1/{path.lstrip('/')}"
    try:
        async with httpx.AsyncClient(timeout=PROVIDER_TIMEOUT_SEC) as client:
            response = await client.post(
                url,
                json=body,
                headers={"apikey": SUPABASE_SERVICE_KEY},
            )
    except httpx.HTTPError as exc:
        raise IdentityProviderError(f"identity provider unreachable: {exc}") from exc

    try:
        data = response.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    if response.status_code >= 400:
        message = str(data.get("msg") or data.get("error_description") or data.get("message") or response.status_code)
        raise IdentityProviderError(message, status_code=response.status_code, payload=data)
    return data


def _user_id_from_payload(data: dict) -> str | None:
    user = data.get("user") if isinstance(data.get("user"), dict) else data
    user_id = (user or {}).get("id")
    return str(user_id) if user_id else None


async def provider_sign_up(email: str, password: str, name: str) -> str:
    data = await _provider_post("signup", {
        "email": email,
        "password": password,
        "data": {"name": name},
    })
    user_id = _user_id_from_payload(data)
    if not user_id:
        raise IdentityProviderError("identity provider returned no user id")
    return user_id


async def provider_sign_in(email: str, password: str) -> str:
    data = await _provider_post("token?grant_type=password", {
        "email": email,
        "password": password,
    })
    user_id = _user_id_from_payload(data)
    if not user_id:
        raise IdentityProviderError("identity provider returned no user id")
    return user_id


# ---------- SESSION TOKENS ----------

def _session_secret() -> str:
    if SESSION_SECRET:
        return SESSION_SECRET
    if IS_PRODUCTION:
        raise HTTPException(500, "SESSION_SECRET is not configured")
    return DEV_SESSION_SECRET


def create_session_token(user_id: str, email: str, now: float | None = None) -> str:
    issued_at = int(now if now is not None else time.time())
    claims = {
        "sub": str(user_id),
        "email": str(email),
        "iat": issued_at,
        "exp": issued_at + SESSION_MAX_AGE_SEC,
    }
    return jwt.encode(claims, _session_secret(), algorithm=SESSION_ALGORITHM)


def verify_session_token(token: str) -> dict | None:
    if not token:
        return None
    try:
        payload = jwt.decode(token, _session_secret(), algorithms=[SESSION_ALGORITHM])
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE_SEC,
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=IS_PRODUCTION,
        samesite="lax",
    )


# ---------- SESSION STORE ----------

async def create_account(name: str, email: str, password: str) -> dict:
    try:
        user_id = await provider_sign_up(email=email, password=password, name=name)
    except IdentityProviderError as exc:
        if exc.is_duplicate:
            return {"success": False, "message": MSG_EMAIL_IN_USE}
        logger.warning("create_account provider failure | err=%s", exc)
        return {"success": False, "message": MSG_SIGN_UP_FAILED}

    if await user_repo.get_user_async(user_id):
        return {"success": False, "message": MSG_EMAIL_IN_USE}

    try:
        await user_repo.insert_user_async(user_id=user_id, name=name, email=email)
    except Exception as exc:
        logger.warning("create_account profile write failed | user_id=%s err=%s", user_id, exc)
        return {"success": False, "message": MSG_SIGN_UP_FAILED}

    return {"success": True, "message": MSG_SIGN_UP_OK}


async def authenticate(email: str, password: str) -> dict:
    """
    Validate credentials with the identity provider and mint a session token.
    """
    try:
        user_id = await provider_sign_in(email=email, password=password)
    except IdentityProviderError as exc:
        logger.info("authenticate rejected | status=%s", exc.status_code)
        return {"success": False, "message": MSG_INVALID_LOGIN}

    return {
        "success": True,
        "user_id": user_id,
        "token": create_session_token(user_id=user_id, email=email),
    }


async def current_user(token: str | None) -> dict | None:
    payload = verify_session_token(token or "")
    if not payload:
        return None

    profile = await user_repo.get_user_async(str(payload["sub"]))
    if not profile:
        return None

    return {
        "id": str(payload["sub"]),
        "name": str(profile.get("name") or ""),
        "email": str(payload.get("email") or profile.get("email") or ""),
    }


# ---------- FASTAPI DEPENDENCIES ----------

def session_token_from_request(request: Request) -> str | None:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        return token

    auth = request.headers.get("Authorization") or ""
    if auth.startswith("Bearer "):
        return auth.replace("Bearer ", "", 1).strip() or None
    return None


async def get_optional_user(request: Request) -> dict | None:
    return await current_user(session_token_from_request(request))


async def get_current_user(request: Request) -> dict:
    user = await get_optional_user(request)
    if not user:
        raise HTTPException(401, "Unauthorized")
    return user
