from .controller import CallContext, CallController, build_session_params, feedback_path
from .state import CallMode, CallState, CallStatus, initial_state, reduce

__all__ = [
    "CallContext",
    "CallController",
    "CallMode",
    "CallState",
    "CallStatus",
    "build_session_params",
    "feedback_path",
    "initial_state",
    "reduce",
]
