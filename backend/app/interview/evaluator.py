import logging
from typing import Iterable

from pydantic import ValidationError

from app.ai_reasoning import llm
from app.ai_reasoning.parsing import extract_json_dict
from app.ai_reasoning.prompts.feedback_prompt import FEEDBACK_SYSTEM_PROMPT, build_feedback_prompt
from app.db import interview_repo
from app.interview.models import FeedbackResult
from app.transcript import coerce_messages, format_transcript
from core.logger import log_event

logger = logging.getLogger("app.interview.evaluator")


class FeedbackGenerationError(RuntimeError):
    pass


def parse_feedback(raw_text: str) -> FeedbackResult:
    parsed = extract_json_dict(raw_text)
    if not isinstance(parsed, dict) or not parsed:
        raise FeedbackGenerationError("model returned no structured feedback")
    try:
        return FeedbackResult.model_validate(parsed)
    except ValidationError as exc:
        raise FeedbackGenerationError(f"feedback schema mismatch: {exc.error_count()} error(s)") from exc


async def score_transcript(transcript: Iterable) -> FeedbackResult:
    prompt = build_feedback_prompt(format_transcript(transcript))
    raw = await llm.call_llm(prompt, system=FEEDBACK_SYSTEM_PROMPT, temperature=0.2)
    return parse_feedback(raw)


async def create_feedback(interview_id: str, user_id: str, transcript: Iterable) -> dict:
    """
    Score a finished interview and persist exactly one Feedback record.

    Returns {"success": True, "feedback_id": ...} or {"success": False}.
    Nothing is written unless scoring and validation both succeed.
    """
    messages = coerce_messages(transcript)
    log_event(
        "feedback",
        "generate_started",
        interview_id,
        user_id=user_id,
        turns=len(messages),
    )

    try:
        result = await score_transcript(messages)
        feedback_id = await interview_repo.insert_feedback_async(
            result.to_record(interview_id=interview_id, user_id=user_id)
        )
    except Exception as exc:
        logger.warning(
            "create_feedback failed | interview_id=%s user_id=%s err=%s",
            interview_id,
            user_id,
            exc,
        )
        log_event("feedback", "generate_failed", interview_id, user_id=user_id, error=type(exc).__name__)
        return {"success": False}

    log_event(
        "feedback",
        "generate_succeeded",
        interview_id,
        user_id=user_id,
        feedback_id=feedback_id,
        total_score=result.total_score,
    )
    return {"success": True, "feedback_id": feedback_id}
