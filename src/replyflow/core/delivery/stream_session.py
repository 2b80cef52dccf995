"""Live-updating message session.

A session is bound to one ``(channel, thread_ts)`` pair and moves through
``PENDING → ACTIVE → STOPPED``. Transport failures propagate to the caller;
the session never retries.

With a ``buffer_size`` appended text is held locally until that many
characters are pending; whatever is still buffered goes out with the stop
call.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ...errors import StreamStateError
from .delta import resolve_delta

if TYPE_CHECKING:
    from ..channel.protocol import ChatTransport, StreamHandle

logger = logging.getLogger(__name__)


class StreamState(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    STOPPED = "stopped"


class StreamSession:
    """One live message under construction."""

    def __init__(
        self,
        transport: "ChatTransport",
        channel: str,
        thread_ts: str,
        buffer_size: Optional[int] = None,
    ) -> None:
        self.transport = transport
        self.channel = channel
        self.thread_ts = thread_ts
        self.buffer_size = buffer_size if buffer_size and buffer_size > 0 else None
        self.state = StreamState.PENDING
        self.handle: Optional["StreamHandle"] = None
        # Last full snapshot accepted by this session.
        self.streamed_text = ""
        self._pending = ""

    @property
    def stopped(self) -> bool:
        return self.state == StreamState.STOPPED

    @property
    def pending_text(self) -> str:
        return self._pending

    async def start(self, initial_text: Optional[str] = None) -> None:
        """Open the live message and append *initial_text* as the first delta."""
        if self.state != StreamState.PENDING:
            raise StreamStateError(f"stream session already {self.state.value}")
        self.handle = await self.transport.start_stream(self.channel, self.thread_ts)
        self.state = StreamState.ACTIVE
        logger.debug(
            "slack-stream: started channel=%s thread=%s", self.channel, self.thread_ts,
        )
        if initial_text:
            await self.append(initial_text)

    async def append(self, text: str) -> None:
        if not text or self.state != StreamState.ACTIVE:
            return
        self.streamed_text += text
        await self._write(text)

    async def update(self, snapshot: str) -> None:
        """Append whatever *snapshot* adds to the text streamed so far."""
        if self.state != StreamState.ACTIVE:
            return
        delta = resolve_delta(self.streamed_text, snapshot)
        self.streamed_text = snapshot
        if delta:
            await self._write(delta)

    async def _write(self, text: str) -> None:
        if self.buffer_size is None:
            await self.transport.append_stream(self.handle, text)
            logger.debug("slack-stream: appended %d chars", len(text))
            return
        self._pending += text
        if len(self._pending) >= self.buffer_size:
            chunk, self._pending = self._pending, ""
            await self.transport.append_stream(self.handle, chunk)
            logger.debug("slack-stream: flushed %d buffered chars", len(chunk))

    async def stop(self, final_text: Optional[str] = None) -> None:
        """Finalise the message, flushing buffered text. Safe to call more than once."""
        if self.state == StreamState.STOPPED:
            return
        was_active = self.state == StreamState.ACTIVE
        self.state = StreamState.STOPPED
        tail, self._pending = self._pending + (final_text or ""), ""
        if not was_active:
            return
        await self.transport.stop_stream(self.handle, tail or None)
        logger.debug(
            "slack-stream: stopped channel=%s thread=%s", self.channel, self.thread_ts,
        )
