"""Tests for pending channel history and ack cleanup."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.replyflow.core.channel.ack import remove_ack_after_reply
from src.replyflow.core.channel.history import (
    ChannelHistory,
    HistoryEntry,
    resolve_history_key,
)
from src.replyflow.core.delivery.models import PreparedMessage


def _entry(body: str) -> HistoryEntry:
    return HistoryEntry(sender="U1", body=body)


class TestResolveHistoryKey:
    def test_channel_only(self):
        assert resolve_history_key("C1") == "C1"

    def test_thread(self):
        assert resolve_history_key("C1", "123.4") == "C1:123.4"


class TestChannelHistory:
    def test_append_trims_to_limit(self):
        history = ChannelHistory()
        for i in range(5):
            history.append("C1", _entry(f"m{i}"), limit=3)
        assert [e.body for e in history.entries("C1")] == ["m2", "m3", "m4"]

    def test_zero_limit_disables_history(self):
        history = ChannelHistory()
        assert history.append("C1", _entry("m"), limit=0) == []
        assert history.entries("C1") == []

    def test_clear_if_enabled(self):
        history = ChannelHistory()
        history.append("C1", _entry("m"), limit=5)
        assert history.clear_if_enabled("C1", limit=5) is True
        assert history.entries("C1") == []

    def test_clear_skipped_when_disabled(self):
        history = ChannelHistory()
        history.append("C1", _entry("m"), limit=5)
        assert history.clear_if_enabled("C1", limit=0) is False
        assert len(history.entries("C1")) == 1

    def test_keys_are_independent(self):
        history = ChannelHistory()
        history.append("C1", _entry("a"), limit=5)
        history.append("C1:1.0", _entry("b"), limit=5)
        history.clear_if_enabled("C1", limit=5)
        assert [e.body for e in history.entries("C1:1.0")] == ["b"]


def _prepared(**kwargs) -> PreparedMessage:
    defaults = dict(channel="C1", message_ts="123", reply_target="channel:C1")
    defaults.update(kwargs)
    return PreparedMessage(**defaults)


class TestRemoveAckAfterReply:
    @pytest.fixture
    def transport(self):
        t = MagicMock()
        t.remove_ack_marker = AsyncMock()
        return t

    @pytest.mark.asyncio
    async def test_removes_on_ack_message(self, transport):
        prepared = _prepared(
            ack_reaction_value="eyes", ack_reaction_placed=True, ack_reaction_message_ts="99",
        )
        assert await remove_ack_after_reply(transport, prepared, True) is True
        transport.remove_ack_marker.assert_awaited_once_with("C1", "99", "eyes")

    @pytest.mark.asyncio
    async def test_disabled(self, transport):
        prepared = _prepared(ack_reaction_value="eyes", ack_reaction_placed=True)
        assert await remove_ack_after_reply(transport, prepared, False) is False
        transport.remove_ack_marker.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_reaction_placed(self, transport):
        prepared = _prepared(ack_reaction_value="eyes", ack_reaction_placed=False)
        assert await remove_ack_after_reply(transport, prepared, True) is False
        transport.remove_ack_marker.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_is_swallowed(self, transport):
        transport.remove_ack_marker.side_effect = RuntimeError("no_reaction")
        prepared = _prepared(ack_reaction_value="eyes", ack_reaction_placed=True)
        assert await remove_ack_after_reply(transport, prepared, True) is False
