import json
import re


_FENCED_OBJECT_RE = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)
_FENCED_ARRAY_RE = re.compile(r"```(?:json)?\s*(\[[\s\S]*?\])\s*```", re.IGNORECASE)


def _loads(text: str):
    try:
        return json.loads(text)
    except Exception:
        return None


def extract_json_dict(text: str) -> dict | None:
    text = (text or "").strip()
    if not text:
        return None

    parsed = _loads(text)
    if parsed is not None:
        return parsed if isinstance(parsed, dict) else None

    fenced = _FENCED_OBJECT_RE.search(text)
    if fenced:
        parsed = _loads(fenced.group(1))
        if isinstance(parsed, dict):
            return parsed

    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end != -1 and end > start:
        parsed = _loads(text[start:end + 1])
        return parsed if isinstance(parsed, dict) else None

    return None


def extract_json_list(text: str) -> list | None:
    """
    Bare array, fenced array, or an object wrapping the array
    under its first list-valued key.
    """
    text = (text or "").strip()
    if not text:
        return None

    parsed = _loads(text)
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        for value in parsed.values():
            if isinstance(value, list):
                return value
        return None

    fenced = _FENCED_ARRAY_RE.search(text)
    if fenced:
        parsed = _loads(fenced.group(1))
        if isinstance(parsed, list):
            return parsed

    start = text.find("[")
    end = text.rfind("]")
    if start != -1 and end != -1 and end > start:
        parsed = _loads(text[start:end + 1])
        return parsed if isinstance(parsed, list) else None

    return None
