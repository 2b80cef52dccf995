"""
CLI 命令接口
"""

import argparse
import asyncio
import logging
from dataclasses import replace
from typing import AsyncIterator, List

import yaml

from ..channels.console_transport import ConsoleTransport
from ..channels.slack_transport import SlackTransport
from ..core.channel.history import ChannelHistory, resolve_history_key
from ..core.delivery.dispatch import dispatch_prepared_message
from ..core.delivery.models import (
    PreparedMessage,
    ReplyDispatchKind,
    ReplyEvent,
    ReplyOptions,
    ReplyPayload,
)
from ..core.delivery.thread_plan import ReplyToMode
from ..infra.config import DeliveryConfig, get_default_config, load_config, save_config

logger = logging.getLogger(__name__)

DEMO_BLOCKS = [
    "Looking into it",
    "Looking into it. The deploy failed",
    "Looking into it. The deploy failed on the migration step.",
]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level or "INFO"),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def _demo_events(blocks: List[str], final_text: str) -> List[ReplyEvent]:
    events = [
        ReplyEvent(ReplyPayload(text="$ kubectl rollout status"), ReplyDispatchKind.TOOL),
    ]
    events.extend(ReplyEvent(ReplyPayload(text=b), ReplyDispatchKind.BLOCK) for b in blocks)
    if final_text:
        events.append(ReplyEvent(ReplyPayload(text=final_text), ReplyDispatchKind.FINAL))
    return events


def cmd_config(args):
    """配置管理"""
    if args.show:
        config = load_config(args.config)
        print(yaml.safe_dump(config, default_flow_style=False, allow_unicode=True))
    elif args.init:
        save_config(get_default_config(), args.config)
        print(f"Config initialised: {args.config or '~/.replyflow/config.yaml'}")
    else:
        print("Use --show to print the config, --init to write defaults")


async def cmd_demo_async(args) -> None:
    """Run a canned response through the dispatch loop."""
    config = DeliveryConfig.from_dict(load_config(args.config))
    if args.reply_to_mode:
        config = replace(config, reply_to_mode=ReplyToMode.parse(args.reply_to_mode))
    if args.streaming is not None:
        config = replace(config, streaming=args.streaming)

    if args.slack:
        if not config.bot_token:
            print("slack.bot_token (or SLACK_BOT_TOKEN) is required for --slack")
            return
        transport = SlackTransport(config.bot_token, text_limit=config.text_limit)
    else:
        transport = ConsoleTransport()

    prepared = PreparedMessage(
        channel=args.channel,
        message_ts=args.message_ts,
        thread_ts=args.thread_ts,
        reply_target=f"channel:{args.channel}",
        history_key=resolve_history_key(args.channel, args.thread_ts),
        is_roomish=True,
    )
    events = _demo_events(list(args.block or DEMO_BLOCKS), args.final)

    async def generate(options: ReplyOptions) -> AsyncIterator[ReplyEvent]:
        logger.info("demo generator: disable_block_streaming=%s", options.disable_block_streaming)
        for event in events:
            await asyncio.sleep(args.delay)
            yield event

    try:
        result = await dispatch_prepared_message(
            prepared,
            transport=transport,
            config=config,
            generate=generate,
            histories=ChannelHistory(),
        )
    finally:
        if isinstance(transport, SlackTransport):
            await transport.aclose()

    counts = ", ".join(f"{k.value}={v}" for k, v in result.counts.items())
    print(f"Delivered: {counts} (final queued: {result.queued_final})")


def cmd_demo(args):
    """Run the demo response"""
    asyncio.run(cmd_demo_async(args))


def main():
    """CLI 主入口"""
    parser = argparse.ArgumentParser(
        description="replyflow - threaded reply delivery with native streaming",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--config", type=str, help="Config file path")
    parser.add_argument("--log-level", type=str, default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="Log level")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    parser_config = subparsers.add_parser("config", help="Config management")
    parser_config.add_argument("--show", action="store_true", help="Print the effective config")
    parser_config.add_argument("--init", action="store_true", help="Write the default config")
    parser_config.set_defaults(func=cmd_config)

    parser_demo = subparsers.add_parser("demo", help="Deliver a canned response")
    parser_demo.add_argument("--channel", default="C0DEMO", help="Channel id")
    parser_demo.add_argument("--message-ts", default="1700000000.000100", help="Triggering message ts")
    parser_demo.add_argument("--thread-ts", default=None, help="Incoming thread ts")
    parser_demo.add_argument("--reply-to-mode", choices=[m.value for m in ReplyToMode],
                             help="Override slack.reply_to_mode")
    stream_group = parser_demo.add_mutually_exclusive_group()
    stream_group.add_argument("--streaming", dest="streaming", action="store_true", default=None,
                              help="Force native streaming on")
    stream_group.add_argument("--no-streaming", dest="streaming", action="store_false", default=None,
                              help="Force native streaming off")
    parser_demo.add_argument("--block", action="append", help="Block reply text (repeatable)")
    parser_demo.add_argument("--final", default="", help="Final reply text")
    parser_demo.add_argument("--delay", type=float, default=0.2, help="Seconds between events")
    parser_demo.add_argument("--slack", action="store_true", help="Use the Slack Web API")
    parser_demo.set_defaults(func=cmd_demo)

    args = parser.parse_args()
    _configure_logging(args.log_level)

    if not args.command:
        parser.print_help()
        return

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
