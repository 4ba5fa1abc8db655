import re
from datetime import datetime, timezone

from app.interview.models import FEEDBACK_CATEGORIES


_WORD_SPLIT_RE = re.compile(r"[\s-]+")
_LEVEL_SUFFIX_RE = re.compile(r"\blevel\s*$", re.IGNORECASE)
_MIX_RE = re.compile(r"mix", re.IGNORECASE)


def _title_words(text: str) -> str:
    words = [w for w in _WORD_SPLIT_RE.split(str(text or "").lower()) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


def format_level_text(level: str) -> str:
    if not level:
        return ""
    formatted = _title_words(level)
    if not _LEVEL_SUFFIX_RE.search(formatted):
        return f"{formatted} Level"
    return formatted


def normalize_type(interview_type: str) -> str:
    return "Mixed" if _MIX_RE.search(str(interview_type or "")) else str(interview_type or "")


def format_tech_names(techstack, max_items: int = 4) -> list[str]:
    items = [t for t in list(techstack or []) if str(t or "").strip()]
    return [_title_words(t) for t in items[:max_items]]


def _parse_timestamp(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def format_card_date(value, now: datetime | None = None) -> str:
    """Card date such as 'Mar 5, 2025'; today when value is missing."""
    moment = _parse_timestamp(value) or now or datetime.now(timezone.utc)
    return f"{moment:%b} {moment.day}, {moment.year}"


def format_feedback_date(value) -> str:
    moment = _parse_timestamp(value)
    if moment is None:
        return "N/A"
    hour = moment.hour % 12 or 12
    meridiem = "PM" if moment.hour >= 12 else "AM"
    return f"{moment:%b} {moment.day}, {moment.year} {hour}:{moment:%M} {meridiem}"


def build_interview_card(interview: dict, feedback: dict | None = None) -> dict:
    feedback = feedback or None
    has_feedback = bool(feedback and feedback.get("final_assessment"))
    return {
        "id": interview.get("id"),
        "user_id": interview.get("user_id"),
        "role": interview.get("role") or "",
        "type": normalize_type(interview.get("type") or ""),
        "level": format_level_text(interview.get("level") or ""),
        "techstack": format_tech_names(interview.get("techstack")),
        "date": format_card_date((feedback or {}).get("created_at") or interview.get("created_at")),
        "finalized": bool(interview.get("finalized", False)),
        "has_feedback": has_feedback,
        "total_score": feedback.get("total_score") if has_feedback else None,
        "final_assessment": feedback.get("final_assessment") if has_feedback else None,
    }


def build_feedback_view(interview: dict, feedback: dict | None) -> dict:
    view = {
        "interview_id": interview.get("id"),
        "role": interview.get("role") or "",
        "feedback": None,
    }
    if not feedback:
        return view

    order = {name: idx for idx, name in enumerate(FEEDBACK_CATEGORIES)}
    categories = sorted(
        list(feedback.get("category_scores") or []),
        key=lambda item: order.get(item.get("name"), len(order)),
    )
    view["feedback"] = {
        "id": feedback.get("id"),
        "total_score": feedback.get("total_score"),
        "created_at": feedback.get("created_at"),
        "date": format_feedback_date(feedback.get("created_at")),
        "final_assessment": feedback.get("final_assessment") or "",
        "category_scores": [
            {
                "position": idx + 1,
                "name": item.get("name"),
                "score": item.get("score"),
                "comment": item.get("comment") or "",
            }
            for idx, item in enumerate(categories)
        ],
        "strengths": list(feedback.get("strengths") or []),
        "areas_for_improvement": list(feedback.get("areas_for_improvement") or []),
    }
    return view
