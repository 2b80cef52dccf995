"""ConsoleTransport: prints transport calls instead of hitting a chat API.

Used by ``replyflow demo`` to show which delivery path a response takes.
"""

from __future__ import annotations

import itertools
import logging
import sys
from typing import Optional, TextIO

from ..core.channel.protocol import StreamHandle
from ..core.delivery.models import ReplyPayload

logger = logging.getLogger(__name__)


class ConsoleTransport:
    """Write one line per transport call to *out*."""

    def __init__(self, out: Optional[TextIO] = None) -> None:
        self._out = out or sys.stdout
        self._ts = itertools.count(1)

    def _next_ts(self) -> str:
        return f"1700000000.{next(self._ts):06d}"

    def _emit(self, line: str) -> None:
        self._out.write(line + "\n")
        self._out.flush()

    async def send_message(
        self,
        target: str,
        payload: ReplyPayload,
        thread_ts: Optional[str] = None,
    ) -> str:
        ts = self._next_ts()
        where = f"{target} thread={thread_ts}" if thread_ts else target
        self._emit(f"[send] {where}: {payload.text}")
        for url in payload.media_list():
            self._emit(f"[send] {where}: <media {url}>")
        return ts

    async def start_stream(
        self,
        channel: str,
        thread_ts: str,
        seed_text: Optional[str] = None,
    ) -> StreamHandle:
        handle = StreamHandle(channel=channel, thread_ts=thread_ts, ts=self._next_ts())
        self._emit(f"[stream:start] {channel} thread={thread_ts} ts={handle.ts}")
        if seed_text:
            self._emit(f"[stream:append] {seed_text!r}")
        return handle

    async def append_stream(self, handle: StreamHandle, text: str) -> None:
        self._emit(f"[stream:append] {text!r}")

    async def stop_stream(self, handle: StreamHandle, final_text: Optional[str] = None) -> None:
        suffix = f" {final_text!r}" if final_text else ""
        self._emit(f"[stream:stop] ts={handle.ts}{suffix}")

    async def set_typing(self, channel: str, thread_ts: Optional[str], on: bool) -> None:
        self._emit(f"[typing] {channel} thread={thread_ts} {'on' if on else 'off'}")

    async def remove_ack_marker(self, channel: str, message_ts: str, reaction: str) -> None:
        self._emit(f"[ack] removed :{reaction}: from {channel}/{message_ts}")
