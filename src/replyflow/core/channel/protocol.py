"""Chat transport protocol consumed by the delivery core."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from ..delivery.models import ReplyPayload


@dataclass(frozen=True)
class StreamHandle:
    """Transport-side reference to one live-updating message."""

    channel: str
    thread_ts: str
    ts: str


class ChatTransport(Protocol):
    """Chat platform operations. Every method may raise on failure."""

    async def send_message(
        self,
        target: str,
        payload: ReplyPayload,
        thread_ts: Optional[str] = None,
    ) -> str:
        """Send *payload* as a standalone message; returns the message ts."""
        ...

    async def start_stream(
        self,
        channel: str,
        thread_ts: str,
        seed_text: Optional[str] = None,
    ) -> StreamHandle:
        """Open a live-updating message in *thread_ts*."""
        ...

    async def append_stream(self, handle: StreamHandle, text: str) -> None:
        """Append *text* to an open live message."""
        ...

    async def stop_stream(self, handle: StreamHandle, final_text: Optional[str] = None) -> None:
        """Finalise a live message, optionally with trailing text."""
        ...

    async def set_typing(self, channel: str, thread_ts: Optional[str], on: bool) -> None:
        """Show or clear the typing indicator."""
        ...

    async def remove_ack_marker(self, channel: str, message_ts: str, reaction: str) -> None:
        """Remove the acknowledgement reaction from a message."""
        ...
