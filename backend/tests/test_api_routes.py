import json

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client(session_token):
    from app.main import app

    c = TestClient(app)
    c.headers["Authorization"] = f"Bearer {session_token}"
    return c


@pytest.fixture
def anon_client():
    from app.main import app

    return TestClient(app)


@pytest.fixture
def stored_interviews(fake_store):
    fake_store.tables["interviews"] = [
        {
            "id": "own-1",
            "user_id": "user-1",
            "role": "Frontend Developer",
            "type": "Technical",
            "level": "junior",
            "techstack": ["react"],
            "questions": ["What is JSX?"],
            "finalized": True,
            "created_at": "2025-03-01T10:00:00+00:00",
        },
        {
            "id": "other-1",
            "user_id": "user-2",
            "role": "Backend Developer",
            "type": "Mixed",
            "level": "senior",
            "techstack": ["python", "fastapi"],
            "questions": ["What is ASGI?"],
            "finalized": True,
            "created_at": "2025-03-02T10:00:00+00:00",
        },
        {
            "id": "draft-1",
            "user_id": "user-3",
            "role": "Designer",
            "type": "Behavioral",
            "level": "mid",
            "techstack": [],
            "questions": [],
            "finalized": False,
            "created_at": "2025-03-03T10:00:00+00:00",
        },
    ]
    fake_store.tables["feedback"] = [
        {
            "id": "fb-1",
            "interview_id": "other-1",
            "user_id": "user-1",
            "total_score": 64,
            "category_scores": [],
            "strengths": [],
            "areas_for_improvement": [],
            "final_assessment": "Decent attempt.",
            "created_at": "2025-03-04T10:00:00+00:00",
        },
    ]
    return fake_store


def test_healthz(anon_client):
    res = anon_client.get("/healthz")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_protected_routes_require_session(anon_client):
    assert anon_client.get("/api/home").status_code == 401
    assert anon_client.get("/api/interviews/own-1").status_code == 401
    assert anon_client.post("/api/interviews/own-1/feedback", json={"transcript": []}).status_code == 401
    assert anon_client.get("/api/voice/config").status_code == 401


def test_bearer_header_is_accepted(anon_client, session_token):
    res = anon_client.get("/api/auth/me", headers={"Authorization": f"Bearer {session_token}"})
    assert res.status_code == 200
    assert res.json()["id"] == "user-1"


def test_home_lists_own_and_latest(client, stored_interviews):
    res = client.get("/api/home")
    assert res.status_code == 200
    body = res.json()
    assert [card["id"] for card in body["user_interviews"]] == ["own-1"]
    assert [card["id"] for card in body["latest_interviews"]] == ["other-1"]

    latest = body["latest_interviews"][0]
    assert latest["has_feedback"] is True
    assert latest["total_score"] == 64
    assert latest["type"] == "Mixed"


def test_interview_detail_and_missing(client, stored_interviews):
    res = client.get("/api/interviews/own-1")
    assert res.status_code == 200
    assert res.json()["interview"]["questions"] == ["What is JSX?"]
    assert res.json()["user_name"] == "Ada Lovelace"

    assert client.get("/api/interviews/nope").status_code == 404


def test_feedback_read(client, stored_interviews):
    res = client.get("/api/interviews/other-1/feedback")
    assert res.status_code == 200
    assert res.json()["feedback"]["id"] == "fb-1"

    empty = client.get("/api/interviews/own-1/feedback")
    assert empty.status_code == 200
    assert empty.json()["feedback"] is None


def test_feedback_create(client, stored_interviews, fake_llm):
    res = client.post(
        "/api/interviews/own-1/feedback",
        json={"transcript": [{"role": "user", "content": "I know React"}]},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True

    saved = [row for row in stored_interviews.rows("feedback") if row["id"] == body["feedback_id"]]
    assert len(saved) == 1
    assert saved[0]["interview_id"] == "own-1"
    assert saved[0]["user_id"] == "user-1"


def test_feedback_create_model_failure(client, stored_interviews, fake_llm):
    fake_llm.respond_with("not json at all")
    res = client.post("/api/interviews/own-1/feedback", json={"transcript": []})
    assert res.status_code == 200
    assert res.json() == {"success": False, "feedback_id": None}
    assert len(stored_interviews.rows("feedback")) == 1


def test_vapi_generate(anon_client, fake_store, fake_llm):
    fake_llm.respond_with(json.dumps({"questions": ["What is JSX?", "Explain hooks"]}))
    res = anon_client.post("/api/vapi/generate", json={
        "role": "Frontend Developer",
        "type": "Technical",
        "level": "Junior",
        "techstack": "react,typescript",
        "amount": "2",
        "userid": "user-1",
    })
    assert res.status_code == 200
    assert res.json() == {"success": True}
    assert fake_store.rows("interviews")[0]["questions"] == ["What is JSX?", "Explain hooks"]


def test_vapi_generate_failure_is_500(anon_client, fake_store, fake_llm):
    fake_llm.respond_with("{}")
    res = anon_client.post("/api/vapi/generate", json={
        "role": "Frontend Developer",
        "type": "Technical",
        "level": "Junior",
        "techstack": "react",
        "amount": 3,
        "userid": "user-1",
    })
    assert res.status_code == 500
    assert res.json()["success"] is False
    assert fake_store.rows("interviews") == []


def test_vapi_generate_ping(anon_client):
    assert anon_client.get("/api/vapi/generate").json() == {"success": True, "data": "Thank you!"}


def test_voice_config(client):
    body = client.get("/api/voice/config").json()
    assert "{{questions}}" in json.dumps(body["interviewer"])
    assert body["generator"]


def test_feedback_create_rejects_unknown_roles(client, stored_interviews, fake_llm):
    res = client.post(
        "/api/interviews/own-1/feedback",
        json={"transcript": [{"role": "interviewer", "content": "Tell me about yourself"}]},
    )
    assert res.status_code == 422
    assert fake_llm.prompts == []
    assert len(stored_interviews.rows("feedback")) == 1
