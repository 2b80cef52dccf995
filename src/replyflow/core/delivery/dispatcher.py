"""Sequential per-event reply dispatcher with typing lifecycle."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional

from .models import DispatchResult, ReplyDispatchKind, ReplyEvent, ReplyPayload
from .tokens import SILENT_REPLY_TOKEN, is_silent_reply_text

logger = logging.getLogger(__name__)

DeliverFn = Callable[[ReplyPayload, ReplyDispatchKind], Awaitable[None]]
HookFn = Callable[[], Awaitable[None]]


def normalize_reply_payload(
    payload: ReplyPayload, silent_reply_token: str = SILENT_REPLY_TOKEN,
) -> Optional[ReplyPayload]:
    """Drop payloads with nothing visible to send; ``None`` means skip."""
    has_media = payload.has_media()
    text = (payload.text or "").strip()
    if not text and not has_media:
        return None
    if not has_media and is_silent_reply_text(text, silent_reply_token):
        return None
    return payload


class ReplyDispatcher:
    """Deliver reply events one at a time and tally what went out.

    A failed delivery is logged and the typing indicator is cleared; later
    events are still dispatched.
    """

    def __init__(
        self,
        deliver: DeliverFn,
        on_reply_start: Optional[HookFn] = None,
        on_idle: Optional[HookFn] = None,
        silent_reply_token: str = SILENT_REPLY_TOKEN,
    ) -> None:
        self._deliver = deliver
        self._on_reply_start = on_reply_start
        self._on_idle = on_idle
        self._silent_reply_token = silent_reply_token
        self.result = DispatchResult()
        self.failed = 0

    async def dispatch(self, event: ReplyEvent) -> bool:
        """Deliver *event*; returns True when it was delivered."""
        payload = normalize_reply_payload(event.payload, self._silent_reply_token)
        if payload is None:
            return False

        if self._on_reply_start is not None:
            await self._on_reply_start()

        try:
            await self._deliver(payload, event.kind)
        except Exception as exc:
            self.failed += 1
            logger.error("slack %s reply failed: %s", event.kind.value, exc)
            if self._on_idle is not None:
                await self._on_idle()
            return False

        self.result.counts[event.kind] = self.result.counts.get(event.kind, 0) + 1
        if event.is_final:
            self.result.queued_final = True
        return True

    async def mark_idle(self) -> None:
        if self._on_idle is not None:
            await self._on_idle()
