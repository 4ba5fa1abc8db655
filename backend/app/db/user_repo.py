import asyncio
import logging

from app.db import supabase as supabase_db
from app.db.interview_repo import RepositoryError


logger = logging.getLogger("app.db.user_repo")

USERS_TABLE = "users"


def get_user(user_id: str) -> dict | None:
    try:
        res = (
            supabase_db.get_client()
            .table(USERS_TABLE)
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as exc:
        logger.warning("get_user failed | user_id=%s err=%s", user_id, exc)
        return None

    rows = list(getattr(res, "data", None) or [])
    return rows[0] if rows else None


def insert_user(user_id: str, name: str, email: str) -> None:
    try:
        supabase_db.get_client().table(USERS_TABLE).insert({
            "id": user_id,
            "name": name,
            "email": email,
        }).execute()
    except Exception as exc:
        logger.warning("insert_user failed | user_id=%s err=%s", user_id, exc)
        raise RepositoryError(f"insert_user failed: {exc}") from exc


async def get_user_async(user_id: str) -> dict | None:
    return await asyncio.to_thread(get_user, user_id)


async def insert_user_async(user_id: str, name: str, email: str) -> None:
    await asyncio.to_thread(insert_user, user_id, name, email)
