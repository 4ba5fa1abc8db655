from typing import Iterable

from .models import TRANSCRIPT_ROLES, TranscriptMessage


def extract_final_utterance(message: dict) -> TranscriptMessage | None:
    """
    Map one voice-SDK message event to a transcript entry.

    Only {"type": "transcript", "transcriptType": "final"} events qualify.
    Partial transcripts exist for live captions and are never kept.
    """
    if not isinstance(message, dict):
        return None
    if message.get("type") != "transcript":
        return None
    if message.get("transcriptType") != "final":
        return None

    role = str(message.get("role") or "").strip().lower()
    if role not in TRANSCRIPT_ROLES:
        return None

    content = str(message.get("transcript") or "")
    return TranscriptMessage(role=role, content=content)


def append_final(messages: tuple[TranscriptMessage, ...], message: dict) -> tuple[TranscriptMessage, ...]:
    utterance = extract_final_utterance(message)
    if utterance is None:
        return messages
    return messages + (utterance,)


def coerce_messages(raw: Iterable) -> list[TranscriptMessage]:
    """
    Accept TranscriptMessage objects or {"role", "content"} dicts
    (HTTP bodies) and keep their order.
    """
    out: list[TranscriptMessage] = []
    for item in list(raw or []):
        if isinstance(item, TranscriptMessage):
            out.append(item)
            continue
        if isinstance(item, dict):
            out.append(TranscriptMessage(
                role=str(item.get("role") or ""),
                content=str(item.get("content") or ""),
            ))
            continue
        role = getattr(item, "role", "")
        content = getattr(item, "content", "")
        out.append(TranscriptMessage(role=str(role or ""), content=str(content or "")))
    return out


def format_transcript(messages: Iterable) -> str:
    return "".join(
        f"- {message.role}: {message.content}\n"
        for message in coerce_messages(messages)
    )
