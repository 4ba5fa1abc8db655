import asyncio
import logging
import uuid
from datetime import datetime, timezone

from app.db import supabase as supabase_db


logger = logging.getLogger("app.db.interview_repo")

INTERVIEWS_TABLE = "interviews"
FEEDBACK_TABLE = "feedback"
LATEST_INTERVIEWS_LIMIT = 20


class RepositoryError(RuntimeError):
    pass


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _rows(res) -> list[dict]:
    return list(getattr(res, "data", None) or [])


# ---------- INTERVIEWS ----------

def by_user(user_id: str) -> list[dict]:
    """
    All interviews owned by user_id, newest first.
    Empty list on store errors.
    """
    try:
        res = (
            supabase_db.get_client()
            .table(INTERVIEWS_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .execute()
        )
    except Exception as exc:
        logger.warning("by_user failed | user_id=%s err=%s", user_id, exc)
        return []
    return _rows(res)


def latest_excluding_user(user_id: str, limit: int = LATEST_INTERVIEWS_LIMIT) -> list[dict]:
    """
    Most recent finalized interviews created by anyone except user_id.
    """
    if int(limit) <= 0:
        return []
    try:
        res = (
            supabase_db.get_client()
            .table(INTERVIEWS_TABLE)
            .select("*")
            .eq("finalized", True)
            .neq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(int(limit))
            .execute()
        )
    except Exception as exc:
        logger.warning("latest_excluding_user failed | user_id=%s err=%s", user_id, exc)
        return []

    return [
        row for row in _rows(res)
        if row.get("finalized") is True and row.get("user_id") != user_id
    ]


def by_id(interview_id: str) -> dict | None:
    try:
        res = (
            supabase_db.get_client()
            .table(INTERVIEWS_TABLE)
            .select("*")
            .eq("id", interview_id)
            .limit(1)
            .execute()
        )
    except Exception as exc:
        logger.warning("by_id failed | interview_id=%s err=%s", interview_id, exc)
        return None

    rows = _rows(res)
    return rows[0] if rows else None


def insert_interview(record: dict) -> str:
    row = dict(record)
    row.setdefault("id", new_id())
    row.setdefault("created_at", utc_now_iso())
    try:
        supabase_db.get_client().table(INTERVIEWS_TABLE).insert(row).execute()
    except Exception as exc:
        logger.warning("insert_interview failed | user_id=%s err=%s", row.get("user_id"), exc)
        raise RepositoryError(f"insert_interview failed: {exc}") from exc
    return row["id"]


# ---------- FEEDBACK ----------

def feedback_by_interview_and_user(interview_id: str, user_id: str) -> dict | None:
    """
    Most recent feedback for (interview_id, user_id).
    Duplicates are allowed; the newest one wins.
    """
    try:
        res = (
            supabase_db.get_client()
            .table(FEEDBACK_TABLE)
            .select("*")
            .eq("interview_id", interview_id)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
    except Exception as exc:
        logger.warning(
            "feedback_by_interview_and_user failed | interview_id=%s user_id=%s err=%s",
            interview_id,
            user_id,
            exc,
        )
        return None

    rows = _rows(res)
    return rows[0] if rows else None


def insert_feedback(record: dict) -> str:
    row = dict(record)
    row.setdefault("id", new_id())
    row.setdefault("created_at", utc_now_iso())
    try:
        supabase_db.get_client().table(FEEDBACK_TABLE).insert(row).execute()
    except Exception as exc:
        logger.warning(
            "insert_feedback failed | interview_id=%s user_id=%s err=%s",
            row.get("interview_id"),
            row.get("user_id"),
            exc,
        )
        raise RepositoryError(f"insert_feedback failed: {exc}") from exc
    return row["id"]


# ---------- ASYNC WRAPPERS ----------

async def by_user_async(user_id: str) -> list[dict]:
    return await asyncio.to_thread(by_user, user_id)


async def latest_excluding_user_async(user_id: str, limit: int = LATEST_INTERVIEWS_LIMIT) -> list[dict]:
    return await asyncio.to_thread(latest_excluding_user, user_id, limit)


async def by_id_async(interview_id: str) -> dict | None:
    return await asyncio.to_thread(by_id, interview_id)


async def feedback_by_interview_and_user_async(interview_id: str, user_id: str) -> dict | None:
    return await asyncio.to_thread(feedback_by_interview_and_user, interview_id, user_id)


async def insert_interview_async(record: dict) -> str:
    return await asyncio.to_thread(insert_interview, record)


async def insert_feedback_async(record: dict) -> str:
    return await asyncio.to_thread(insert_feedback, record)
