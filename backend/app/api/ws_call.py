from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState
import asyncio
import json
import logging
import os
import uuid

from app.auth import current_user
from app.call import CallContext, CallController, CallMode
from app.call.registry import CallAlreadyActive, call_registry
from app.db import interview_repo
from app.voice.session import VoiceRelaySession
from core.config import SESSION_COOKIE_NAME
from core.logger import log_event

logger = logging.getLogger("ws_call")

MAX_WS_TEXT_BYTES = max(1024, int(os.getenv("WS_MAX_TEXT_BYTES", "65536")))

router = APIRouter()
websocket_send_locks: dict[WebSocket, asyncio.Lock] = {}


async def _send_text_with_lock(websocket: WebSocket, encoded_payload: str) -> None:
    send_lock = websocket_send_locks.get(websocket)
    if send_lock is None:
        await websocket.send_text(encoded_payload)
        return
    async with send_lock:
        await websocket.send_text(encoded_payload)


def _token_from_websocket(websocket: WebSocket) -> str:
    return (
        str(websocket.cookies.get(SESSION_COOKIE_NAME) or "").strip()
        or str(websocket.query_params.get("token") or "").strip()
    )


@router.websocket("/ws/call")
async def call_ws(websocket: WebSocket):
    user = await current_user(_token_from_websocket(websocket))
    if not user:
        await websocket.close(code=1008, reason="Unauthorized")
        return

    try:
        mode = CallMode(str(websocket.query_params.get("mode") or "").strip().lower())
    except ValueError:
        await websocket.close(code=1008, reason="Invalid mode")
        return

    interview_id = str(websocket.query_params.get("interview_id") or "").strip() or None
    questions: list[str] = []
    if mode == CallMode.INTERVIEW:
        interview = await interview_repo.by_id_async(interview_id) if interview_id else None
        if not interview:
            await websocket.close(code=1008, reason="Interview not found")
            return
        questions = list(interview.get("questions") or [])

    call_id = str(uuid.uuid4())
    navigated = asyncio.Event()

    def _log_event(event: str, **fields):
        log_event("ws_call", event, call_id, user_id=user["id"], mode=mode.value, **fields)

    async def _safe_send(payload: dict):
        if websocket.client_state != WebSocketState.CONNECTED:
            return
        try:
            encoded = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            logger.warning("ws payload encode failed | call_id=%s err=%s", call_id, exc)
            return
        try:
            await _send_text_with_lock(websocket, encoded)
        except Exception as exc:
            logger.warning("ws send failed | call_id=%s err=%s", call_id, exc)

    async def _on_state(_state):
        await _safe_send({"type": "state", **controller.snapshot()})

    async def _on_navigate(path: str):
        await _safe_send({"type": "navigate", "to": path})
        navigated.set()

    voice_session = VoiceRelaySession(send_fn=_safe_send, call_id=call_id)
    controller = CallController(
        context=CallContext(
            mode=mode,
            user_id=user["id"],
            user_name=user.get("name") or "User",
            interview_id=interview_id,
            questions=questions,
        ),
        voice_session=voice_session,
        on_state=_on_state,
        on_navigate=_on_navigate,
        call_id=call_id,
    )

    try:
        call_registry.claim(user["id"], call_id, controller)
    except CallAlreadyActive as exc:
        _log_event("rejected_concurrent", active_call_id=exc.call_id)
        await websocket.close(code=1008, reason="Call already in progress")
        return

    try:
        await websocket.accept()
        websocket_send_locks[websocket] = asyncio.Lock()
        _log_event("connect", interview_id=interview_id)
        await _safe_send({"type": "state", **controller.snapshot()})

        while not navigated.is_set():
            raw = await websocket.receive_text()
            if len(raw.encode("utf-8")) > MAX_WS_TEXT_BYTES:
                logger.warning("ws frame too large; dropped | call_id=%s", call_id)
                continue
            try:
                frame = json.loads(raw)
            except ValueError:
                logger.warning("ws frame is not JSON; dropped | call_id=%s", call_id)
                continue
            if not isinstance(frame, dict):
                continue

            event = str(frame.get("event") or "").strip().lower()
            if event == "start":
                await controller.start()
            elif event == "stop":
                await controller.stop()
            elif event == "ping":
                await _safe_send({"type": "pong"})
            else:
                await controller.handle_frame(frame)

    except WebSocketDisconnect:
        _log_event("disconnect", status=controller.state.status.value)

    finally:
        call_registry.release(user["id"], call_id)
        websocket_send_locks.pop(websocket, None)
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.close()
            except RuntimeError:
                pass
        _log_event("closed", navigation=controller.navigation)
