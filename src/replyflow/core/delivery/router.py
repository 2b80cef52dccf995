"""Stream-or-send routing for reply payloads.

The router owns the single live stream of a response. Streaming is attempted
only for threaded, text-only, non-tool replies; any stream API failure turns
streaming off for the rest of the response and the payload is sent as a
normal message instead, so nothing is dropped or duplicated.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from .models import ReplyDispatchKind, ReplyPayload
from .stream_session import StreamSession
from .thread_plan import ReplyDeliveryPlan
from .tokens import SILENT_REPLY_TOKEN, is_silent_reply_text

if TYPE_CHECKING:
    from ..channel.protocol import ChatTransport

logger = logging.getLogger(__name__)


class DeliveryRouter:
    """Deliver reply payloads for one response."""

    def __init__(
        self,
        transport: "ChatTransport",
        plan: ReplyDeliveryPlan,
        channel: str,
        reply_target: str,
        streaming_enabled: bool = False,
        silent_reply_token: str = SILENT_REPLY_TOKEN,
        block_streaming: Optional[bool] = None,
        stream_buffer_size: Optional[int] = None,
    ) -> None:
        self.transport = transport
        self.plan = plan
        self.channel = channel
        self.reply_target = reply_target
        self.silent_reply_token = silent_reply_token
        self.block_streaming = block_streaming
        self.stream_buffer_size = stream_buffer_size

        self.use_streaming = streaming_enabled and bool(plan.stream_thread_hint())
        if streaming_enabled and not self.use_streaming:
            logger.debug("slack-stream: disabled for this response (thread_ts unavailable)")

        self._stream: Optional[StreamSession] = None
        self._stream_failed = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def stream_session(self) -> Optional[StreamSession]:
        return self._stream

    @property
    def stream_failed(self) -> bool:
        return self._stream_failed

    @property
    def disable_block_streaming(self) -> Optional[bool]:
        """Block-streaming hint for the reply generator."""
        if self.use_streaming:
            return False
        if isinstance(self.block_streaming, bool):
            return not self.block_streaming
        return None

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def _can_stream(
        self, payload: ReplyPayload, kind: ReplyDispatchKind, thread_ts: Optional[str],
    ) -> bool:
        text = (payload.text or "").strip()
        return (
            self.use_streaming
            and not self._stream_failed
            and kind != ReplyDispatchKind.TOOL
            and not payload.has_media()
            and bool(thread_ts)
            and bool(text)
            and not is_silent_reply_text(text, self.silent_reply_token)
        )

    async def deliver(self, payload: ReplyPayload, kind: ReplyDispatchKind) -> None:
        """Deliver one payload, streaming it when eligible.

        Discrete send failures propagate; stream failures fall back.
        """
        reply_thread_ts = self.plan.next_thread_ts()
        effective_thread_ts = (reply_thread_ts or "").strip() or None

        if not self._can_stream(payload, kind, effective_thread_ts):
            await self.stop_stream_if_active()
            await self._deliver_normal(payload, reply_thread_ts)
            return

        text = payload.text.strip()
        try:
            if self._stream is None or self._stream.thread_ts != effective_thread_ts:
                await self.stop_stream_if_active()
                self._stream = StreamSession(
                    self.transport,
                    self.channel,
                    effective_thread_ts,
                    buffer_size=self.stream_buffer_size,
                )
                await self._stream.start(initial_text=text)
            else:
                await self._stream.update(text)
            self.plan.mark_sent()
        except Exception as exc:
            self._stream_failed = True
            logger.debug(
                "slack-stream: stream API failed; falling back for this response: %s", exc,
            )
            await self.stop_stream_if_active()
            await self._deliver_normal(payload, reply_thread_ts)

    async def _deliver_normal(self, payload: ReplyPayload, thread_ts: Optional[str]) -> None:
        await self.transport.send_message(self.reply_target, payload, thread_ts)
        self.plan.mark_sent()

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def stop_stream_if_active(self) -> None:
        """Stop the live stream, if any. Never raises."""
        session = self._stream
        if session is None:
            return
        try:
            await session.stop()
        except Exception as exc:
            self._stream_failed = True
            logger.debug("slack-stream: failed to stop stream: %s", exc)
        finally:
            self._stream = None

    async def teardown(self) -> None:
        """End-of-response cleanup; idempotent."""
        await self.stop_stream_if_active()
