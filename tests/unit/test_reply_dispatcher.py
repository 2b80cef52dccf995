"""Tests for ReplyDispatcher, payload normalisation and the silent token."""

from unittest.mock import AsyncMock

import pytest

from src.replyflow.core.delivery.dispatcher import ReplyDispatcher, normalize_reply_payload
from src.replyflow.core.delivery.models import (
    DispatchResult,
    ReplyDispatchKind,
    ReplyEvent,
    ReplyPayload,
)
from src.replyflow.core.delivery.tokens import is_silent_reply_text


class TestSilentToken:
    @pytest.mark.parametrize("text", ["NO_REPLY", "  NO_REPLY", "NO_REPLY.", "ok then NO_REPLY"])
    def test_silent(self, text):
        assert is_silent_reply_text(text) is True

    @pytest.mark.parametrize("text", ["", None, "NO_REPLY_X", "hello", "say NO_REPLYING"])
    def test_not_silent(self, text):
        assert is_silent_reply_text(text) is False

    def test_custom_token(self):
        assert is_silent_reply_text("SKIP", "SKIP") is True
        assert is_silent_reply_text("NO_REPLY", "SKIP") is False


class TestPayload:
    def test_media_list_dedupes(self):
        payload = ReplyPayload(media_url="a", media_urls=("a", "b", ""))
        assert payload.media_list() == ["a", "b"]
        assert payload.has_media()

    def test_no_media(self):
        assert not ReplyPayload(text="x").has_media()

    def test_any_delivered(self):
        assert not DispatchResult().any_delivered
        assert DispatchResult(queued_final=True).any_delivered
        result = DispatchResult()
        result.counts[ReplyDispatchKind.TOOL] = 3
        assert not result.any_delivered


class TestNormalize:
    def test_empty_skipped(self):
        assert normalize_reply_payload(ReplyPayload(text="   ")) is None

    def test_silent_skipped(self):
        assert normalize_reply_payload(ReplyPayload(text="NO_REPLY")) is None

    def test_silent_with_media_kept(self):
        payload = ReplyPayload(text="NO_REPLY", media_url="u")
        assert normalize_reply_payload(payload) is payload

    def test_media_only_kept(self):
        payload = ReplyPayload(media_url="u")
        assert normalize_reply_payload(payload) is payload


class TestReplyDispatcher:
    @pytest.mark.asyncio
    async def test_counts_by_kind(self):
        deliver = AsyncMock()
        dispatcher = ReplyDispatcher(deliver)
        await dispatcher.dispatch(ReplyEvent(ReplyPayload(text="t"), ReplyDispatchKind.TOOL))
        await dispatcher.dispatch(ReplyEvent(ReplyPayload(text="b"), ReplyDispatchKind.BLOCK))
        await dispatcher.dispatch(ReplyEvent(ReplyPayload(text="f"), ReplyDispatchKind.FINAL))

        counts = dispatcher.result.counts
        assert counts[ReplyDispatchKind.TOOL] == 1
        assert counts[ReplyDispatchKind.BLOCK] == 1
        assert counts[ReplyDispatchKind.FINAL] == 1
        assert dispatcher.result.queued_final is True
        assert deliver.await_count == 3

    @pytest.mark.asyncio
    async def test_failure_logged_and_idle_called(self, caplog):
        deliver = AsyncMock(side_effect=[RuntimeError("boom"), None])
        on_start = AsyncMock()
        on_idle = AsyncMock()
        dispatcher = ReplyDispatcher(deliver, on_reply_start=on_start, on_idle=on_idle)

        first = await dispatcher.dispatch(ReplyEvent(ReplyPayload(text="a")))
        second = await dispatcher.dispatch(ReplyEvent(ReplyPayload(text="b")))

        assert first is False
        assert second is True
        assert dispatcher.failed == 1
        on_idle.assert_awaited_once()
        assert on_start.await_count == 2
        assert "block reply failed" in caplog.text

    @pytest.mark.asyncio
    async def test_skipped_payload_does_not_start_typing(self):
        on_start = AsyncMock()
        dispatcher = ReplyDispatcher(AsyncMock(), on_reply_start=on_start)
        assert await dispatcher.dispatch(ReplyEvent(ReplyPayload(text=""))) is False
        on_start.assert_not_awaited()
