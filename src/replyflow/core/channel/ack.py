"""Acknowledgement reaction cleanup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..delivery.models import PreparedMessage
    from .protocol import ChatTransport

logger = logging.getLogger(__name__)


async def remove_ack_after_reply(
    transport: "ChatTransport",
    prepared: "PreparedMessage",
    remove_after_reply: bool,
) -> bool:
    """Remove the ack reaction placed on the triggering message.

    Best effort: returns False when nothing was removed, never raises.
    """
    if not remove_after_reply:
        return False
    if not prepared.ack_reaction_placed or not prepared.ack_reaction_value:
        return False
    message_ts = prepared.ack_reaction_message_ts or prepared.message_ts
    if not message_ts:
        return False
    try:
        await transport.remove_ack_marker(
            prepared.channel, message_ts, prepared.ack_reaction_value,
        )
        return True
    except Exception as exc:
        logger.debug(
            "slack: failed to remove ack reaction on %s/%s: %s",
            prepared.channel, message_ts, exc,
        )
        return False
