import os
from pathlib import Path
from dotenv import load_dotenv

_BACKEND_ROOT = Path(__file__).resolve().parents[1]
_BACKEND_ENV_PATH = _BACKEND_ROOT / ".env"
load_dotenv(dotenv_path=_BACKEND_ENV_PATH, override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return str(os.getenv(name, default)).strip().lower() in {"1", "true", "yes", "on"}


ENVIRONMENT = str(os.getenv("ENV") or "development").strip().lower()
IS_PRODUCTION = ENVIRONMENT == "production"
QA_MODE = _env_flag("QA_MODE")

OPENAI_API_KEY = str(os.getenv("OPENAI_API_KEY") or "").strip()
MODEL_NAME = str(os.getenv("MODEL_NAME") or "gpt-4.1-mini").strip()
LLM_TIMEOUT_SEC = max(1.0, float(os.getenv("LLM_TIMEOUT_SEC", "30")))
LLM_RETRIES = max(0, int(os.getenv("LLM_RETRIES", "1")))

SUPABASE_URL = str(os.getenv("SUPABASE_URL") or "").strip()
SUPABASE_SERVICE_KEY = str(
    os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY") or ""
).strip()

SESSION_SECRET = str(os.getenv("SESSION_SECRET") or "").strip()
DEV_SESSION_SECRET = "dev-only-session-secret"
SESSION_COOKIE_NAME = str(os.getenv("SESSION_COOKIE_NAME") or "session").strip()
SESSION_MAX_AGE_SEC = 60 * 60 * 24 * 7

VAPI_WEB_TOKEN = str(os.getenv("VAPI_WEB_TOKEN") or "").strip()
VAPI_WORKFLOW_ID = str(os.getenv("VAPI_WORKFLOW_ID") or "").strip()
PUBLIC_BASE_URL = str(os.getenv("PUBLIC_BASE_URL") or "http://localhost:8000").strip().rstrip("/")
