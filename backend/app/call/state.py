from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum

from app.transcript import TranscriptMessage, append_final


class CallStatus(str, Enum):
    INACTIVE = "INACTIVE"
    CONNECTING = "CONNECTING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class CallMode(str, Enum):
    GENERATE = "generate"
    INTERVIEW = "interview"


_IDLE = (CallStatus.INACTIVE, CallStatus.FINISHED)
_ON_CALL = (CallStatus.CONNECTING, CallStatus.ACTIVE)


@dataclass(frozen=True)
class CallState:
    mode: CallMode
    status: CallStatus = CallStatus.INACTIVE
    is_speaking: bool = False
    messages: tuple[TranscriptMessage, ...] = ()
    finish_handled: bool = False
    last_error: str | None = None

    @property
    def is_idle(self) -> bool:
        return self.status in _IDLE

    @property
    def latest_message(self) -> str | None:
        return self.messages[-1].content if self.messages else None

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "status": self.status.value,
            "is_speaking": self.is_speaking,
            "latest_message": self.latest_message,
            "message_count": len(self.messages),
            "last_error": self.last_error,
        }


# ---------- EVENTS ----------

@dataclass(frozen=True)
class StartRequested:
    pass


@dataclass(frozen=True)
class SessionOpened:
    pass


@dataclass(frozen=True)
class SessionOpenFailed:
    error: str = ""


@dataclass(frozen=True)
class SessionClosed:
    pass


@dataclass(frozen=True)
class StopRequested:
    pass


@dataclass(frozen=True)
class SpeechStarted:
    pass


@dataclass(frozen=True)
class SpeechEnded:
    pass


@dataclass(frozen=True)
class MessageReceived:
    message: dict = field(default_factory=dict)


@dataclass(frozen=True)
class VoiceError:
    message: str = ""


CallEvent = (
    StartRequested
    | SessionOpened
    | SessionOpenFailed
    | SessionClosed
    | StopRequested
    | SpeechStarted
    | SpeechEnded
    | MessageReceived
    | VoiceError
)


# ---------- EFFECTS ----------

@dataclass(frozen=True)
class OpenSession:
    mode: CallMode


@dataclass(frozen=True)
class CloseSession:
    pass


@dataclass(frozen=True)
class FinishCall:
    mode: CallMode
    messages: tuple[TranscriptMessage, ...]


CallEffect = OpenSession | CloseSession | FinishCall


def initial_state(mode: CallMode | str) -> CallState:
    return CallState(mode=CallMode(mode))


def _finish(state: CallState) -> tuple[CallState, list]:
    finished = replace(state, status=CallStatus.FINISHED, is_speaking=False, finish_handled=True)
    if state.finish_handled:
        return finished, []
    return finished, [FinishCall(mode=state.mode, messages=state.messages)]


def reduce(state: CallState, event) -> tuple[CallState, list]:
    """
    Pure transition function for one call.

    Returns the next state and the effects the controller must run.
    Events that are not valid for the current status leave it unchanged.
    """
    if isinstance(event, StartRequested):
        if state.status not in _IDLE:
            return state, []
        connecting = replace(
            state,
            status=CallStatus.CONNECTING,
            is_speaking=False,
            messages=(),
            finish_handled=False,
            last_error=None,
        )
        return connecting, [OpenSession(mode=state.mode)]

    if isinstance(event, SessionOpenFailed):
        if state.status != CallStatus.CONNECTING:
            return state, []
        return replace(state, status=CallStatus.INACTIVE, is_speaking=False, last_error=event.error or None), []

    if isinstance(event, SessionOpened):
        if state.status != CallStatus.CONNECTING:
            return state, []
        return replace(state, status=CallStatus.ACTIVE), []

    if isinstance(event, SessionClosed):
        if state.status not in _ON_CALL:
            return state, []
        return _finish(state)

    if isinstance(event, StopRequested):
        if state.status not in _ON_CALL:
            return state, []
        finished, effects = _finish(state)
        return finished, [CloseSession(), *effects]

    if isinstance(event, SpeechStarted):
        return replace(state, is_speaking=True), []

    if isinstance(event, SpeechEnded):
        return replace(state, is_speaking=False), []

    if isinstance(event, MessageReceived):
        if state.status not in _ON_CALL:
            return state, []
        return replace(state, messages=append_final(state.messages, event.message)), []

    if isinstance(event, VoiceError):
        return replace(state, last_error=event.message or None), []

    return state, []
