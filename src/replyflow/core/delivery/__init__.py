"""Reply delivery: thread planning, live streaming and fallback."""

from .delta import resolve_delta
from .dispatch import dispatch_prepared_message
from .dispatcher import ReplyDispatcher, normalize_reply_payload
from .models import (
    DispatchResult,
    PreparedMessage,
    ReplyDispatchKind,
    ReplyEvent,
    ReplyOptions,
    ReplyPayload,
    ReplyState,
)
from .router import DeliveryRouter
from .stream_session import StreamSession, StreamState
from .thread_plan import (
    ReplyDeliveryPlan,
    ReplyToMode,
    ThreadTargets,
    resolve_thread_targets,
    resolve_thread_ts,
)
from .tokens import SILENT_REPLY_TOKEN, is_silent_reply_text
from .typing_status import TypingCallbacks

__all__ = [
    "DeliveryRouter",
    "DispatchResult",
    "PreparedMessage",
    "ReplyDeliveryPlan",
    "ReplyDispatchKind",
    "ReplyDispatcher",
    "ReplyEvent",
    "ReplyOptions",
    "ReplyPayload",
    "ReplyState",
    "ReplyToMode",
    "SILENT_REPLY_TOKEN",
    "StreamSession",
    "StreamState",
    "ThreadTargets",
    "TypingCallbacks",
    "dispatch_prepared_message",
    "is_silent_reply_text",
    "normalize_reply_payload",
    "resolve_delta",
    "resolve_thread_targets",
    "resolve_thread_ts",
]
