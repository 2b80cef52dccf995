"""Tests for the ``replyflow demo`` command against the console transport."""

from argparse import Namespace

import pytest

from src.replyflow.cli.main import cmd_demo_async


def _args(tmp_path, **kwargs):
    defaults = dict(
        config=str(tmp_path / "missing.yaml"),
        channel="C1",
        message_ts="1700000000.000001",
        thread_ts=None,
        reply_to_mode="all",
        streaming=True,
        block=["Hello", "Hello world"],
        final="",
        delay=0,
        slack=False,
    )
    defaults.update(kwargs)
    return Namespace(**defaults)


@pytest.mark.asyncio
async def test_demo_streams_blocks(tmp_path, capsys):
    await cmd_demo_async(_args(tmp_path))
    out = capsys.readouterr().out

    assert "[stream:start] C1 thread=1700000000.000001" in out
    assert "[stream:append] ' world'" in out
    assert "[stream:stop]" in out
    assert "Delivered: tool=1, block=2, final=0" in out


@pytest.mark.asyncio
async def test_demo_off_mode_sends_discretely(tmp_path, capsys):
    await cmd_demo_async(_args(tmp_path, reply_to_mode="off"))
    out = capsys.readouterr().out

    assert "[stream:start]" not in out
    assert "[send] channel:C1: Hello world" in out


@pytest.mark.asyncio
async def test_demo_slack_requires_token(tmp_path, capsys):
    await cmd_demo_async(_args(tmp_path, slack=True))
    assert "SLACK_BOT_TOKEN" in capsys.readouterr().out
