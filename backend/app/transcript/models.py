from dataclasses import dataclass


TRANSCRIPT_ROLES = ("user", "system", "assistant")


@dataclass(frozen=True)
class TranscriptMessage:
    """
    One finalized utterance of a call.
    Only built from FINAL transcript events; never revised afterwards.
    """
    role: str
    content: str
