from __future__ import annotations

import time
from threading import Lock


class CallAlreadyActive(RuntimeError):
    def __init__(self, call_id: str):
        super().__init__(f"call already in progress: {call_id}")
        self.call_id = call_id


class CallRegistry:
    """
    Live calls, at most one per user.

    A call holds the user's slot from claim() until release(); only the
    call that holds the slot can release it.
    """

    def __init__(self):
        self._lock = Lock()
        self._by_user: dict[str, dict] = {}

    def claim(self, user_id: str, call_id: str, controller) -> None:
        with self._lock:
            current = self._by_user.get(user_id)
            if current is not None and current["call_id"] != call_id:
                raise CallAlreadyActive(current["call_id"])
            self._by_user[user_id] = {
                "call_id": call_id,
                "controller": controller,
                "started_at": time.time(),
            }

    def release(self, user_id: str, call_id: str) -> bool:
        with self._lock:
            current = self._by_user.get(user_id)
            if current is None or current["call_id"] != call_id:
                return False
            del self._by_user[user_id]
            return True

    def active_call(self, user_id: str) -> dict | None:
        with self._lock:
            current = self._by_user.get(user_id)
            if current is None:
                return None
            controller = current["controller"]
            started_at = current["started_at"]

        payload = controller.snapshot()
        payload["started_at"] = started_at
        return payload

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_user)


call_registry = CallRegistry()
