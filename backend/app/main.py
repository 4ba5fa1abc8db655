from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from app.api.auth_routes import router as auth_router
from app.api.interviews import router as interviews_router
from app.api.ws_call import router as call_ws_router
from app.call.registry import call_registry
from core.config import ENVIRONMENT, IS_PRODUCTION, QA_MODE, SESSION_SECRET

app = FastAPI(title="Intervia API")
logger = logging.getLogger("app.main")


def _get_allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if not raw:
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    return [item.strip() for item in raw.split(",") if item.strip()]


_allowed_origins = _get_allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.on_event("startup")
async def startup_banner():
    if QA_MODE:
        logger.info("[SYSTEM] QA_MODE ENABLED")
    logger.info("[SYSTEM] env=%s CORS allow_origins=%s", ENVIRONMENT, _allowed_origins)
    if IS_PRODUCTION and not SESSION_SECRET:
        logger.error("[SYSTEM] SESSION_SECRET is not configured; session endpoints will return 500")


@app.on_event("shutdown")
async def shutdown_handler():
    logger.info("[SYSTEM] shutdown complete | live_calls=%s", len(call_registry))


@app.get("/healthz")
async def healthz():
    return {"status": "ok", "service": "intervia-backend", "live_calls": len(call_registry)}


app.include_router(auth_router)
app.include_router(interviews_router)
app.include_router(call_ws_router)
