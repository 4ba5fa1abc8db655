from .ingestion import append_final, coerce_messages, extract_final_utterance, format_transcript
from .models import TRANSCRIPT_ROLES, TranscriptMessage

__all__ = [
    "TRANSCRIPT_ROLES",
    "TranscriptMessage",
    "append_final",
    "coerce_messages",
    "extract_final_utterance",
    "format_transcript",
]
