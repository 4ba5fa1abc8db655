import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.auth import get_current_user
from app.call.registry import call_registry
from app.db import interview_repo
from app.interview.cards import build_feedback_view, build_interview_card
from app.interview.evaluator import create_feedback
from app.interview.questions import generate_interview
from app.schemas import CreateFeedbackRequest, CreateFeedbackResponse, GenerateInterviewRequest
from app.voice.assistants import INTERVIEWER_ASSISTANT, generator_workflow
from core.config import VAPI_WEB_TOKEN

logger = logging.getLogger("app.api.interviews")

router = APIRouter(prefix="/api")


# ---------- GENERATION (called by the voice workflow) ----------

@router.post("/vapi/generate")
async def generate_interview_route(payload: GenerateInterviewRequest):
    try:
        await generate_interview(
            role=payload.role,
            interview_type=payload.type,
            level=payload.level,
            techstack=payload.techstack,
            amount=payload.amount,
            user_id=payload.userid,
        )
    except Exception as exc:
        logger.warning("Error generating interview | user_id=%s err=%s", payload.userid, exc)
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
    return {"success": True}


@router.get("/vapi/generate")
async def generate_interview_ping():
    return {"success": True, "data": "Thank you!"}


@router.get("/voice/config")
async def voice_config(user: dict = Depends(get_current_user)):
    return {
        "web_token": VAPI_WEB_TOKEN,
        "interviewer": INTERVIEWER_ASSISTANT,
        "generator": generator_workflow(),
    }


# ---------- READS ----------

@router.get("/calls/active")
async def active_call(user: dict = Depends(get_current_user)):
    return {"call": call_registry.active_call(user["id"])}


@router.get("/home")
async def home(user: dict = Depends(get_current_user)):
    user_id = user["id"]
    own, latest = await asyncio.gather(
        interview_repo.by_user_async(user_id),
        interview_repo.latest_excluding_user_async(user_id),
    )
    latest = [item for item in latest if item.get("id")]
    feedback = await asyncio.gather(*[
        interview_repo.feedback_by_interview_and_user_async(item["id"], user_id)
        for item in latest
    ])
    latest_cards = [build_interview_card(item, fb) for item, fb in zip(latest, feedback)]
    return {
        "user": user,
        "user_interviews": [build_interview_card(item) for item in own],
        "latest_interviews": latest_cards,
    }


@router.get("/interviews/{interview_id}")
async def get_interview(interview_id: str, user: dict = Depends(get_current_user)):
    interview = await interview_repo.by_id_async(interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")
    return {
        "interview": interview,
        "card": build_interview_card(interview),
        "user_name": user.get("name") or "User",
    }


@router.get("/interviews/{interview_id}/feedback")
async def get_feedback(interview_id: str, user: dict = Depends(get_current_user)):
    interview = await interview_repo.by_id_async(interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")
    feedback = await interview_repo.feedback_by_interview_and_user_async(interview_id, user["id"])
    return build_feedback_view(interview, feedback)


# ---------- FEEDBACK ----------

@router.post("/interviews/{interview_id}/feedback", response_model=CreateFeedbackResponse)
async def post_feedback(
    interview_id: str,
    payload: CreateFeedbackRequest,
    user: dict = Depends(get_current_user),
):
    interview = await interview_repo.by_id_async(interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="Interview not found")

    result = await create_feedback(
        interview_id=interview_id,
        user_id=user["id"],
        transcript=[entry.model_dump() for entry in payload.transcript],
    )
    return CreateFeedbackResponse(**result)
