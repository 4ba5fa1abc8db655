from app.interview.models import FEEDBACK_CATEGORIES


FEEDBACK_SYSTEM_PROMPT = (
    "You are a professional interviewer analyzing a mock interview. "
    "Your task is to evaluate the candidate based on structured categories. "
    "If the candidate skips a question, deduct points in proportion to how many "
    "questions were asked. If the candidate skips every question the rating is zero; "
    "if only some are skipped, rate accordingly. "
    "The highest possible rating is 100 and the lowest is 0. Output JSON only."
)

_CATEGORY_HINTS = {
    "Communication Skills": "Clarity, articulation, structured responses.",
    "Technical Knowledge": "Understanding of key concepts for the role.",
    "Problem Solving": "Ability to analyze problems and propose solutions.",
    "Cultural Fit": "Alignment with company values and job role.",
    "Confidence and Clarity": "Confidence in responses, engagement, and clarity.",
}


def build_feedback_prompt(formatted_transcript: str) -> str:
    """
    Rubric prompt for one finished interview.
    The category list is fixed; the model must not invent others.
    """
    rubric = "\n".join(
        f"- **{name}**: {_CATEGORY_HINTS[name]}"
        for name in FEEDBACK_CATEGORIES
    )
    category_shape = ",\n    ".join(
        f'{{"name": "{name}", "score": 0-100, "comment": "string"}}'
        for name in FEEDBACK_CATEGORIES
    )

    return f"""
You are an AI interviewer analyzing a mock interview. Your task is to evaluate the candidate based on structured categories. Be thorough and detailed in your analysis. Don't be lenient with the candidate. If there are mistakes or areas for improvement, point them out.
Once a question has been answered properly, do not keep revolving around it.

Transcript:
{formatted_transcript}

Please score the candidate from 0 to 100 in the following areas. Do not add categories other than the ones provided:
{rubric}

Return STRICT JSON only in this format:
{{
  "totalScore": 0-100,
  "categoryScores": [
    {category_shape}
  ],
  "strengths": ["string"],
  "areasForImprovement": ["string"],
  "finalAssessment": "string"
}}
"""
