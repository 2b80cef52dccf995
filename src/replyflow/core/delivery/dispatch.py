"""Response dispatch loop for one incoming message.

Drives the reply generator, hands each event to the :class:`DeliveryRouter`
and performs post-reply bookkeeping:

generator → ReplyDispatcher → DeliveryRouter → (StreamSession | send_message)

The live stream is always torn down before this coroutine returns or raises,
including on cancellation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, AsyncIterator, Callable

from ..channel.ack import remove_ack_after_reply
from ..channel.history import ChannelHistory
from .dispatcher import ReplyDispatcher
from .models import DispatchResult, PreparedMessage, ReplyDispatchKind, ReplyEvent, ReplyOptions, ReplyState
from .router import DeliveryRouter
from .thread_plan import ReplyDeliveryPlan, resolve_thread_targets
from .typing_status import TypingCallbacks

if TYPE_CHECKING:
    from ...infra.config import DeliveryConfig
    from ..channel.protocol import ChatTransport

logger = logging.getLogger(__name__)

ReplyGenerator = Callable[[ReplyOptions], AsyncIterator[ReplyEvent]]


async def dispatch_prepared_message(
    prepared: PreparedMessage,
    *,
    transport: "ChatTransport",
    config: "DeliveryConfig",
    generate: ReplyGenerator,
    histories: ChannelHistory,
) -> DispatchResult:
    """Run one response end to end and return what was delivered.

    Generator exceptions propagate after the stream has been stopped.
    """
    targets = resolve_thread_targets(
        config.reply_to_mode,
        prepared.message_ts,
        prepared.thread_ts,
        prepared.parent_user_id,
    )

    reply_state = ReplyState()
    plan = ReplyDeliveryPlan(
        config.reply_to_mode,
        incoming_thread_ts=prepared.thread_ts,
        message_ts=prepared.message_ts,
        state=reply_state,
    )
    router = DeliveryRouter(
        transport,
        plan,
        channel=prepared.channel,
        reply_target=prepared.reply_target,
        streaming_enabled=config.streaming,
        silent_reply_token=config.silent_reply_token,
        block_streaming=config.block_streaming,
        stream_buffer_size=config.stream_buffer_size,
    )
    typing_callbacks = TypingCallbacks(transport, prepared.channel, targets.status_thread_ts)
    dispatcher = ReplyDispatcher(
        router.deliver,
        on_reply_start=typing_callbacks.on_reply_start,
        on_idle=typing_callbacks.on_idle,
        silent_reply_token=config.silent_reply_token,
    )
    options = ReplyOptions(
        reply_state=reply_state,
        disable_block_streaming=router.disable_block_streaming,
    )

    try:
        async for event in generate(options):
            await dispatcher.dispatch(event)
    finally:
        try:
            await dispatcher.mark_idle()
        finally:
            await router.teardown()

    result = dispatcher.result

    if not result.any_delivered:
        if prepared.is_roomish:
            histories.clear_if_enabled(prepared.history_key, config.history_limit)
        return result

    final_count = result.counts.get(ReplyDispatchKind.FINAL, 0)
    logger.info(
        "slack: delivered %d repl%s to %s",
        final_count, "y" if final_count == 1 else "ies", prepared.reply_target,
    )

    await remove_ack_after_reply(transport, prepared, config.remove_ack_after_reply)

    if prepared.is_roomish:
        histories.clear_if_enabled(prepared.history_key, config.history_limit)

    return result
