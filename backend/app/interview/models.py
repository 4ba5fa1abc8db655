import math
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator


FEEDBACK_CATEGORIES = (
    "Communication Skills",
    "Technical Knowledge",
    "Problem Solving",
    "Cultural Fit",
    "Confidence and Clarity",
)

# Labels the model tends to echo from older rubric wording.
_CATEGORY_ALIASES = {
    "culturalandrolefit": "Cultural Fit",
    "rolefit": "Cultural Fit",
}


def _category_key(name: str) -> str:
    return re.sub(r"[^a-z]", "", str(name or "").lower().replace("&", "and"))


_CANONICAL_BY_KEY = {_category_key(name): name for name in FEEDBACK_CATEGORIES}
_CANONICAL_BY_KEY.update(_CATEGORY_ALIASES)


def canonical_category(name: str) -> str | None:
    return _CANONICAL_BY_KEY.get(_category_key(name))


def clamp_score(value) -> int:
    """
    Numeric (or numeric string) score clamped to [0, 100].
    Anything else is a schema mismatch.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError("score must be a number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"score must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"score must be a finite number, got {value!r}")
    return max(0, min(100, int(round(number))))


def _string_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("expected a list of strings")
    return [str(item).strip() for item in value if str(item or "").strip()]


class CategoryScore(BaseModel):
    name: str
    score: int
    comment: str = ""

    @field_validator("score", mode="before")
    @classmethod
    def _clamp(cls, value):
        return clamp_score(value)

    @field_validator("comment", mode="before")
    @classmethod
    def _comment(cls, value):
        return str(value or "").strip()


class FeedbackResult(BaseModel):
    """
    Structured scoring returned by the language model.

    category_scores always holds the five fixed categories in rubric order.
    Extra categories are dropped; a missing one fails validation.
    """
    model_config = ConfigDict(populate_by_name=True)

    total_score: int = Field(alias="totalScore")
    category_scores: list[CategoryScore] = Field(alias="categoryScores")
    strengths: list[str] = Field(default_factory=list)
    areas_for_improvement: list[str] = Field(default_factory=list, alias="areasForImprovement")
    final_assessment: str = Field(alias="finalAssessment")

    @field_validator("total_score", mode="before")
    @classmethod
    def _clamp_total(cls, value):
        return clamp_score(value)

    @field_validator("category_scores", mode="before")
    @classmethod
    def _fixed_categories(cls, value):
        if not isinstance(value, (list, tuple)):
            raise ValueError("categoryScores must be a list")

        by_name: dict[str, dict] = {}
        for item in value:
            if isinstance(item, BaseModel):
                item = item.model_dump()
            if not isinstance(item, dict):
                continue
            canonical = canonical_category(item.get("name"))
            if canonical is None or canonical in by_name:
                continue
            by_name[canonical] = {**item, "name": canonical}

        missing = [name for name in FEEDBACK_CATEGORIES if name not in by_name]
        if missing:
            raise ValueError(f"missing categories: {', '.join(missing)}")
        return [by_name[name] for name in FEEDBACK_CATEGORIES]

    @field_validator("strengths", "areas_for_improvement", mode="before")
    @classmethod
    def _lists(cls, value):
        return _string_list(value)

    @field_validator("final_assessment", mode="before")
    @classmethod
    def _assessment(cls, value):
        text = str(value or "").strip()
        if not text:
            raise ValueError("finalAssessment must not be empty")
        return text

    def to_record(self, interview_id: str, user_id: str) -> dict:
        return {
            "interview_id": interview_id,
            "user_id": user_id,
            "total_score": self.total_score,
            "category_scores": [item.model_dump() for item in self.category_scores],
            "strengths": list(self.strengths),
            "areas_for_improvement": list(self.areas_for_improvement),
            "final_assessment": self.final_assessment,
        }
