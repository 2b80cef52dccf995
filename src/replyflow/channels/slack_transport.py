"""SlackTransport: Slack Web API implementation of :class:`ChatTransport`.

Uses ``chat.postMessage`` for discrete replies and the native streaming
methods (``chat.startStream`` / ``chat.appendStream`` / ``chat.stopStream``)
for live-updating replies. The typing indicator is the assistant thread
status.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..core.channel.protocol import StreamHandle
from ..core.delivery.models import ReplyPayload
from ..errors import SlackApiError, SlackRateLimitedError

logger = logging.getLogger(__name__)

SLACK_API_BASE = "https://slack.com/api"
SLACK_TEXT_LIMIT = 4000
TYPING_STATUS = "is typing..."


def split_message(text: str, limit: int = SLACK_TEXT_LIMIT) -> List[str]:
    """Split long text into chunks of at most *limit* characters.

    Strategy: split by paragraph (``\\n\\n``), then by line (``\\n``) if a
    paragraph still exceeds the limit, and hard-split single long lines.
    """
    if not text:
        return []
    if len(text) <= limit:
        return [text]

    parts: List[str] = []
    current = ""

    for paragraph in text.split("\n\n"):
        if len(paragraph) > limit:
            for line in paragraph.split("\n"):
                if len(current) + len(line) + 1 > limit:
                    if current:
                        parts.append(current)
                        current = ""
                    while len(line) > limit:
                        parts.append(line[:limit])
                        line = line[limit:]
                    current = line
                else:
                    current = f"{current}\n{line}" if current else line
        else:
            candidate = f"{current}\n\n{paragraph}" if current else paragraph
            if len(candidate) > limit:
                if current:
                    parts.append(current)
                current = paragraph
            else:
                current = candidate

    if current:
        parts.append(current)

    return parts


class SlackTransport:
    """Slack Web API client bound to one bot token."""

    def __init__(
        self,
        bot_token: str,
        text_limit: int = SLACK_TEXT_LIMIT,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = SLACK_API_BASE,
        max_send_attempts: int = 3,
    ) -> None:
        self._bot_token = bot_token
        self._base_url = base_url.rstrip("/")
        self._text_limit = text_limit if text_limit > 0 else SLACK_TEXT_LIMIT
        self._max_send_attempts = max(1, max_send_attempts)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(30.0, connect=10.0),
        )
        # user id -> DM channel id
        self._dm_channels: Dict[str, str] = {}

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Web API
    # ------------------------------------------------------------------

    async def _call(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST one Web API method; raises on transport or API errors."""
        body = {k: v for k, v in payload.items() if v is not None}
        resp = await self._client.post(
            f"{self._base_url}/{method}",
            json=body,
            headers={"Authorization": f"Bearer {self._bot_token}"},
        )
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            raise SlackRateLimitedError(
                method, float(retry_after) if retry_after else None,
            )
        try:
            data = resp.json()
        except ValueError:
            raise SlackApiError(method, f"http_{resp.status_code}")
        if not data.get("ok"):
            error = str(data.get("error") or "unknown_error")
            if error == "ratelimited":
                raise SlackRateLimitedError(method)
            raise SlackApiError(method, error)
        return data

    async def _call_with_retry(self, method: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Like :meth:`_call` but retries rate-limited requests."""
        for attempt in range(self._max_send_attempts):
            try:
                return await self._call(method, payload)
            except SlackRateLimitedError as exc:
                if attempt >= self._max_send_attempts - 1:
                    raise
                delay = exc.retry_after if exc.retry_after is not None else 2 ** attempt
                logger.warning(
                    "%s rate limited (attempt %d/%d), retrying in %.1fs",
                    method, attempt + 1, self._max_send_attempts, delay,
                )
                await asyncio.sleep(delay)
        raise SlackApiError(method, "retries_exhausted")

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------

    async def resolve_channel(self, target: str) -> str:
        """Map ``channel:<id>``, ``user:<id>`` or a raw id to a channel id."""
        target = (target or "").strip()
        if target.startswith("channel:"):
            return target[len("channel:"):]
        if target.startswith("user:"):
            user_id = target[len("user:"):]
            cached = self._dm_channels.get(user_id)
            if cached:
                return cached
            data = await self._call("conversations.open", {"users": user_id})
            channel_id = str((data.get("channel") or {}).get("id") or "")
            if not channel_id:
                raise SlackApiError("conversations.open", "missing_channel")
            self._dm_channels[user_id] = channel_id
            return channel_id
        if not target:
            raise SlackApiError("chat.postMessage", "missing_target")
        return target

    # ------------------------------------------------------------------
    # ChatTransport
    # ------------------------------------------------------------------

    async def send_message(
        self,
        target: str,
        payload: ReplyPayload,
        thread_ts: Optional[str] = None,
    ) -> str:
        channel = await self.resolve_channel(target)
        text = payload.text or ""
        media = payload.media_list()
        last_ts = ""

        if not media:
            for chunk in split_message(text, self._text_limit):
                data = await self._call_with_retry("chat.postMessage", {
                    "channel": channel,
                    "text": chunk,
                    "thread_ts": thread_ts,
                })
                last_ts = str(data.get("ts") or "")
            return last_ts

        # Media references are posted as links; the caption rides on the first.
        for index, url in enumerate(media):
            caption = text if index == 0 else ""
            body = f"{caption}\n{url}" if caption else url
            for chunk in split_message(body, self._text_limit):
                data = await self._call_with_retry("chat.postMessage", {
                    "channel": channel,
                    "text": chunk,
                    "thread_ts": thread_ts,
                    "unfurl_media": True,
                })
                last_ts = str(data.get("ts") or "")
        return last_ts

    async def start_stream(
        self,
        channel: str,
        thread_ts: str,
        seed_text: Optional[str] = None,
    ) -> StreamHandle:
        data = await self._call("chat.startStream", {
            "channel": channel,
            "thread_ts": thread_ts,
            "markdown_text": seed_text or None,
        })
        ts = str(data.get("ts") or "")
        if not ts:
            raise SlackApiError("chat.startStream", "missing_ts")
        return StreamHandle(channel=str(data.get("channel") or channel), thread_ts=thread_ts, ts=ts)

    async def append_stream(self, handle: StreamHandle, text: str) -> None:
        await self._call("chat.appendStream", {
            "channel": handle.channel,
            "ts": handle.ts,
            "markdown_text": text,
        })

    async def stop_stream(self, handle: StreamHandle, final_text: Optional[str] = None) -> None:
        await self._call("chat.stopStream", {
            "channel": handle.channel,
            "ts": handle.ts,
            "markdown_text": final_text or None,
        })

    async def set_typing(self, channel: str, thread_ts: Optional[str], on: bool) -> None:
        if not thread_ts:
            # Slack only shows assistant status inside a thread.
            return
        await self._call("assistant.threads.setStatus", {
            "channel_id": channel,
            "thread_ts": thread_ts,
            "status": TYPING_STATUS if on else "",
        })

    async def remove_ack_marker(self, channel: str, message_ts: str, reaction: str) -> None:
        await self._call("reactions.remove", {
            "channel": channel,
            "timestamp": message_ts,
            "name": reaction.strip(":"),
        })
