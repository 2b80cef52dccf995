"""Thread targeting for replies.

``ReplyToMode`` decides which thread each outgoing reply of a response is
attached to:

- ``all``: every reply goes to the incoming thread (or starts one on the
  triggering message).
- ``first``: only the first reply threads; later replies go to the channel.
- ``off``: nothing is threaded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .models import ReplyState

logger = logging.getLogger(__name__)


class ReplyToMode(str, Enum):
    ALL = "all"
    FIRST = "first"
    OFF = "off"

    @classmethod
    def parse(cls, value: Any) -> "ReplyToMode":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        if not raw:
            return cls.OFF
        try:
            return cls(raw)
        except ValueError:
            logger.warning("Unknown reply_to_mode %r, falling back to 'off'", value)
            return cls.OFF


def _clean_ts(value: Optional[str]) -> Optional[str]:
    value = (value or "").strip()
    return value or None


def resolve_thread_ts(
    mode: ReplyToMode,
    incoming_thread_ts: Optional[str],
    message_ts: Optional[str],
    has_replied: bool,
) -> Optional[str]:
    """Thread a reply should attach to, or ``None`` for a top-level message."""
    if mode == ReplyToMode.OFF:
        return None
    if mode == ReplyToMode.FIRST and has_replied:
        return None
    return _clean_ts(incoming_thread_ts) or _clean_ts(message_ts)


@dataclass(frozen=True)
class ThreadTargets:
    reply_thread_ts: Optional[str]
    status_thread_ts: Optional[str]


def resolve_thread_targets(
    mode: ReplyToMode,
    message_ts: Optional[str],
    thread_ts: Optional[str] = None,
    parent_user_id: Optional[str] = None,
) -> ThreadTargets:
    """Reply thread and the thread the typing status is shown in.

    A message counts as a thread reply when it carries a thread ts different
    from its own ts, or names a parent user.
    """
    incoming = _clean_ts(thread_ts)
    own_ts = _clean_ts(message_ts)
    is_thread_reply = bool(incoming) and (incoming != own_ts or bool(parent_user_id))
    if is_thread_reply:
        reply_thread_ts = incoming
    elif mode == ReplyToMode.ALL:
        reply_thread_ts = own_ts
    else:
        reply_thread_ts = None
    return ThreadTargets(
        reply_thread_ts=reply_thread_ts,
        status_thread_ts=reply_thread_ts or own_ts,
    )


class ReplyDeliveryPlan:
    """Per-response thread planner.

    ``next_thread_ts()`` only reads state; ``mark_sent()`` is the single
    mutation and is called after every delivered payload.
    """

    def __init__(
        self,
        mode: ReplyToMode,
        incoming_thread_ts: Optional[str],
        message_ts: Optional[str],
        state: Optional[ReplyState] = None,
    ) -> None:
        self.mode = ReplyToMode.parse(mode)
        self.incoming_thread_ts = incoming_thread_ts
        self.message_ts = message_ts
        self.state = state if state is not None else ReplyState()

    @property
    def has_replied(self) -> bool:
        return self.state.has_replied

    def next_thread_ts(self) -> Optional[str]:
        return resolve_thread_ts(
            self.mode, self.incoming_thread_ts, self.message_ts, self.state.has_replied,
        )

    def stream_thread_hint(self) -> Optional[str]:
        """Thread target the first reply would get, ignoring what was sent."""
        return resolve_thread_ts(
            self.mode, self.incoming_thread_ts, self.message_ts, False,
        )

    def mark_sent(self) -> None:
        self.state.mark_replied()
