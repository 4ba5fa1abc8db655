from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from app.call.state import (
    MessageReceived,
    SessionClosed,
    SessionOpenFailed,
    SessionOpened,
    SpeechEnded,
    SpeechStarted,
    VoiceError,
)

logger = logging.getLogger("app.voice.session")

SendFn = Callable[[dict], Awaitable[None]]

# Peer-initiated endings the SDK reports as errors.
BENIGN_VOICE_ERRORS = (
    "Meeting ended due to ejection",
    "Meeting has ended",
)


def voice_error_message(error) -> str:
    if isinstance(error, str):
        return error.strip()
    if isinstance(error, dict):
        for key in ("message", "errorMsg", "error"):
            value = error.get(key)
            if value:
                return voice_error_message(value)
        return ""
    return str(error or "").strip()


def is_benign_voice_error(message: str) -> bool:
    text = str(message or "")
    if not text.strip():
        return True
    return any(pattern in text for pattern in BENIGN_VOICE_ERRORS)


@dataclass
class VoiceRelaySession:
    """
    Voice session whose SDK runs in the browser.

    Commands go out through send_fn; SDK events come back as frames and are
    translated into call events.
    """
    send_fn: SendFn
    call_id: str = ""

    async def open(self, params: dict) -> None:
        await self.send_fn({"type": "open_session", "call_id": self.call_id, **params})

    async def close(self) -> None:
        await self.send_fn({"type": "stop_session", "call_id": self.call_id})

    def handle_error(self, error) -> VoiceError | None:
        message = voice_error_message(error)
        if is_benign_voice_error(message):
            logger.debug("benign voice error ignored | call_id=%s", self.call_id)
            return None
        logger.warning("voice error | call_id=%s err=%s", self.call_id, message)
        return VoiceError(message=message)

    def translate(self, frame: dict):
        event = str((frame or {}).get("event") or "").strip().lower()

        if event == "call-start":
            return SessionOpened()
        if event == "call-start-failed":
            return SessionOpenFailed(error=voice_error_message(frame.get("error")))
        if event == "call-end":
            return SessionClosed()
        if event == "speech-start":
            return SpeechStarted()
        if event == "speech-end":
            return SpeechEnded()
        if event == "message":
            message = frame.get("message")
            return MessageReceived(message=message) if isinstance(message, dict) else None
        if event == "error":
            return self.handle_error(frame.get("error"))

        logger.debug("unknown voice frame ignored | call_id=%s event=%s", self.call_id, event)
        return None
