import json
import os
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENV", "development")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("SESSION_SECRET", "pytest-session-secret")
os.environ.setdefault("QA_MODE", "true")


class _Result:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Just enough of the supabase query builder for the repositories."""

    def __init__(self, store: "FakeSupabase", table: str):
        self.store = store
        self.table = table
        self.filters = []
        self._order = None
        self._limit = None
        self._insert = None

    def select(self, *_args, **_kwargs):
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def insert(self, row):
        self._insert = dict(row)
        return self

    def execute(self):
        if self.table in self.store.failing_tables:
            raise RuntimeError(f"{self.table} unavailable")

        rows = self.store.tables.setdefault(self.table, [])
        if self._insert is not None:
            rows.append(dict(self._insert))
            return _Result([dict(self._insert)])

        out = [dict(row) for row in rows if all(check(row) for check in self.filters)]
        if self._order:
            column, desc = self._order
            out.sort(key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self._limit is not None:
            out = out[: self._limit]
        return _Result(out)


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failing_tables: set[str] = set()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> list[dict]:
        return list(self.tables.get(name, []))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("ENV", "development")
    monkeypatch.setenv("QA_MODE", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")


@pytest.fixture(autouse=True)
def fake_store():
    from app.db import supabase as supabase_db

    store = FakeSupabase()
    supabase_db.set_client(store)
    try:
        yield store
    finally:
        supabase_db.set_client(None)


@pytest.fixture
def seeded_user(fake_store) -> dict:
    user = {"id": "user-1", "name": "Ada Lovelace", "email": "ada@example.com"}
    fake_store.tables.setdefault("users", []).append(dict(user))
    return user


@pytest.fixture
def session_token(seeded_user) -> str:
    from app.auth import create_session_token

    return create_session_token(user_id=seeded_user["id"], email=seeded_user["email"])


@pytest.fixture
def valid_feedback_payload() -> dict:
    return {
        "totalScore": 72,
        "categoryScores": [
            {"name": "Communication Skills", "score": 80, "comment": "Clear and structured."},
            {"name": "Technical Knowledge", "score": 70, "comment": "Solid React basics."},
            {"name": "Problem Solving", "score": 65, "comment": "Reasonable approach."},
            {"name": "Cultural Fit", "score": 75, "comment": "Good alignment."},
            {"name": "Confidence and Clarity", "score": 70, "comment": "Mostly confident."},
        ],
        "strengths": ["Explains React concepts well"],
        "areasForImprovement": ["Go deeper on state management"],
        "finalAssessment": "A promising candidate with room to grow.",
    }


@pytest.fixture
def fake_llm(monkeypatch: pytest.MonkeyPatch, valid_feedback_payload):
    """Replace call_llm with a canned response; returns the list of prompts seen."""
    from app.ai_reasoning import llm

    calls = []
    state = {"response": json.dumps(valid_feedback_payload)}

    async def _fake_call_llm(prompt, **kwargs):
        calls.append({"prompt": prompt, **kwargs})
        return state["response"]

    monkeypatch.setattr(llm, "call_llm", _fake_call_llm)

    class _Handle:
        prompts = calls

        @staticmethod
        def respond_with(text: str):
            state["response"] = text

    return _Handle()


@pytest.fixture(autouse=True)
def _fresh_call_registry():
    from app.call.registry import call_registry

    yield
    call_registry._by_user.clear()  # test-only direct mutation
