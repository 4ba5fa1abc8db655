import logging

from app.ai_reasoning import llm
from app.ai_reasoning.parsing import extract_json_list
from app.ai_reasoning.prompts.question_prompt import build_question_prompt
from app.db import interview_repo
from core.logger import log_event

logger = logging.getLogger("app.interview.questions")

# Characters the voice assistant reads out literally.
_VOICE_UNSAFE_CHARS = str.maketrans({"/": " ", "*": ""})


class QuestionGenerationError(RuntimeError):
    pass


def split_techstack(techstack) -> list[str]:
    if isinstance(techstack, (list, tuple)):
        items = techstack
    else:
        items = str(techstack or "").split(",")
    return [str(item).strip() for item in items if str(item or "").strip()]


def format_questions(questions: list[str]) -> str:
    """Bullet list injected into the interviewer assistant's {{questions}} slot."""
    return "\n".join(f"- {question}" for question in list(questions or []))


def _clean_question(text) -> str:
    return " ".join(str(text or "").translate(_VOICE_UNSAFE_CHARS).split())


async def generate_questions(role: str, level: str, techstack: str, interview_type: str, amount) -> list[str]:
    prompt = build_question_prompt(
        role=role,
        level=level,
        techstack=techstack,
        interview_type=interview_type,
        amount=amount,
    )
    raw = await llm.call_llm(prompt, temperature=0.7)
    parsed = extract_json_list(raw)
    if not parsed:
        raise QuestionGenerationError("model returned no questions")

    questions = [_clean_question(item) for item in parsed]
    questions = [q for q in questions if q]
    if not questions:
        raise QuestionGenerationError("model returned only empty questions")
    return questions


async def generate_interview(
    role: str,
    interview_type: str,
    level: str,
    techstack,
    amount,
    user_id: str,
) -> str:
    """
    Generate questions and store a finalized Interview. Returns its id.
    Raises on model or store failure; the HTTP layer converts that.
    """
    stack = split_techstack(techstack)
    questions = await generate_questions(
        role=role,
        level=level,
        techstack=", ".join(stack),
        interview_type=interview_type,
        amount=amount,
    )

    interview_id = await interview_repo.insert_interview_async({
        "role": role,
        "type": interview_type,
        "level": level,
        "techstack": stack,
        "questions": questions,
        "user_id": user_id,
        "finalized": True,
    })
    log_event(
        "questions",
        "interview_generated",
        interview_id,
        user_id=user_id,
        role=role,
        question_count=len(questions),
    )
    return interview_id
