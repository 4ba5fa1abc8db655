from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from app.call.state import (
    CallMode,
    CallState,
    CloseSession,
    FinishCall,
    OpenSession,
    SessionOpenFailed,
    StartRequested,
    StopRequested,
    initial_state,
    reduce,
)
from app.interview.evaluator import create_feedback
from app.interview.questions import format_questions
from app.voice.assistants import INTERVIEWER_ASSISTANT, generator_workflow
from core.logger import log_event

logger = logging.getLogger("app.call.controller")

HOME_PATH = "/"

FeedbackFn = Callable[[str, str, list], Awaitable[dict]]
NavigateFn = Callable[[str], Awaitable[None]]
StateFn = Callable[[CallState], Awaitable[None]]


def feedback_path(interview_id: str) -> str:
    return f"/interview/{interview_id}/feedback"


@dataclass
class CallContext:
    mode: CallMode
    user_id: str
    user_name: str = "User"
    interview_id: str | None = None
    questions: list[str] = field(default_factory=list)


def build_session_params(context: CallContext) -> dict:
    if context.mode == CallMode.GENERATE:
        return {
            **generator_workflow(),
            "assistantOverrides": {
                "variableValues": {
                    "username": context.user_name,
                    "userid": context.user_id,
                },
            },
        }

    return {
        "assistant": INTERVIEWER_ASSISTANT,
        "assistantOverrides": {
            "variableValues": {
                "questions": format_questions(context.questions),
            },
        },
    }


class CallController:
    """
    Drives one voice call through the reducer in app.call.state and runs
    the effects it asks for. Events are processed one at a time in arrival
    order; events raised while an effect runs are queued behind it.
    """

    def __init__(
        self,
        context: CallContext,
        voice_session,
        feedback_fn: FeedbackFn | None = None,
        on_state: StateFn | None = None,
        on_navigate: NavigateFn | None = None,
        call_id: str | None = None,
    ):
        self.call_id = call_id or str(uuid.uuid4())
        self.context = context
        self.voice_session = voice_session
        self.feedback_fn = feedback_fn or create_feedback
        self.on_state = on_state
        self.on_navigate = on_navigate
        self.state = initial_state(context.mode)
        self.navigation: str | None = None
        self._pending: deque = deque()
        self._draining = False

    def _log(self, event: str, **fields) -> None:
        log_event("call", event, self.call_id, mode=self.context.mode.value, **fields)

    async def start(self) -> CallState:
        return await self.dispatch(StartRequested())

    async def stop(self) -> CallState:
        return await self.dispatch(StopRequested())

    async def handle_frame(self, frame: dict) -> CallState:
        event = self.voice_session.translate(frame)
        if event is None:
            return self.state
        return await self.dispatch(event)

    async def dispatch(self, event) -> CallState:
        self._pending.append(event)
        if self._draining:
            return self.state

        self._draining = True
        try:
            while self._pending:
                current = self._pending.popleft()
                previous = self.state
                self.state, effects = reduce(previous, current)

                if self.state.status != previous.status:
                    self._log(
                        "transition",
                        from_status=previous.status.value,
                        to_status=self.state.status.value,
                        trigger=type(current).__name__,
                    )
                if self.state != previous and self.on_state is not None:
                    await self.on_state(self.state)

                for effect in effects:
                    await self._run_effect(effect)
        finally:
            self._draining = False
        return self.state

    async def _run_effect(self, effect) -> None:
        if isinstance(effect, OpenSession):
            await self._open_session()
        elif isinstance(effect, CloseSession):
            await self._close_session()
        elif isinstance(effect, FinishCall):
            await self._finish(effect)

    async def _open_session(self) -> None:
        params = build_session_params(self.context)
        try:
            await self.voice_session.open(params)
        except Exception as exc:
            logger.warning("open session failed | call_id=%s err=%s", self.call_id, exc)
            self._pending.append(SessionOpenFailed(error=str(exc) or type(exc).__name__))

    async def _close_session(self) -> None:
        try:
            await self.voice_session.close()
        except Exception as exc:
            logger.warning("close session failed | call_id=%s err=%s", self.call_id, exc)

    async def _finish(self, effect: FinishCall) -> None:
        if effect.mode == CallMode.GENERATE:
            await self._navigate(HOME_PATH)
            return

        interview_id = self.context.interview_id
        if not interview_id:
            logger.warning("interview call finished without interview_id | call_id=%s", self.call_id)
            await self._navigate(HOME_PATH)
            return

        self._log("feedback_requested", interview_id=interview_id, turns=len(effect.messages))
        try:
            result = await self.feedback_fn(interview_id, self.context.user_id, list(effect.messages))
        except Exception as exc:
            logger.warning("feedback generation raised | call_id=%s err=%s", self.call_id, exc)
            result = {"success": False}

        if bool((result or {}).get("success")) and (result or {}).get("feedback_id"):
            await self._navigate(feedback_path(interview_id))
        else:
            logger.warning("feedback not saved; returning home | call_id=%s", self.call_id)
            await self._navigate(HOME_PATH)

    async def _navigate(self, path: str) -> None:
        self.navigation = path
        self._log("navigate", to=path)
        if self.on_navigate is not None:
            await self.on_navigate(path)

    def snapshot(self) -> dict:
        payload = self.state.to_dict()
        payload["call_id"] = self.call_id
        payload["navigation"] = self.navigation
        return payload
