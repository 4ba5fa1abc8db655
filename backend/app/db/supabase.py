"""
Supabase client shared by the repositories.

The client is created lazily so the app can boot (and tests can run)
without credentials. Repositories call get_client() on every operation;
tests swap the client through set_client().
"""

import logging
from threading import Lock

from supabase import Client, create_client

from core.config import SUPABASE_SERVICE_KEY, SUPABASE_URL

logger = logging.getLogger("app.db.supabase")

_client: Client | None = None
_client_lock = Lock()


class SupabaseUnavailable(RuntimeError):
    pass


def get_client() -> Client:
    global _client
    with _client_lock:
        if _client is not None:
            return _client
        if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
            raise SupabaseUnavailable("SUPABASE_URL / SUPABASE_SERVICE_KEY are not configured")
        _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
        logger.info("Supabase client initialized | url=%s", SUPABASE_URL)
        return _client


def set_client(client) -> None:
    global _client
    with _client_lock:
        _client = client
