"""Typing indicator callbacks (best effort)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..channel.protocol import ChatTransport

logger = logging.getLogger(__name__)


class TypingCallbacks:
    """Turn the typing indicator on lazily and off when delivery goes idle.

    Transport failures are logged and swallowed.
    """

    def __init__(
        self,
        transport: "ChatTransport",
        channel: str,
        thread_ts: Optional[str] = None,
    ) -> None:
        self.transport = transport
        self.channel = channel
        self.thread_ts = thread_ts
        self.active = False

    @property
    def target(self) -> str:
        return f"{self.channel}/{self.thread_ts}" if self.thread_ts else self.channel

    async def on_reply_start(self) -> None:
        if self.active:
            return
        self.active = True
        try:
            await self.transport.set_typing(self.channel, self.thread_ts, True)
        except Exception as exc:
            logger.error("slack typing start failed for %s: %s", self.target, exc)

    async def on_idle(self) -> None:
        if not self.active:
            return
        self.active = False
        try:
            await self.transport.set_typing(self.channel, self.thread_ts, False)
        except Exception as exc:
            logger.error("slack typing stop failed for %s: %s", self.target, exc)
