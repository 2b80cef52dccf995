"""
replyflow - threaded reply delivery for chat agents

Delivers agent replies to a threaded conversation either as discrete
messages or as one live-updating streamed message, with silent fallback.
"""

__version__ = "0.1.0"

from .core.delivery.dispatch import dispatch_prepared_message
from .core.delivery.models import (
    DispatchResult,
    PreparedMessage,
    ReplyDispatchKind,
    ReplyEvent,
    ReplyPayload,
)
from .core.delivery.router import DeliveryRouter
from .core.delivery.thread_plan import ReplyDeliveryPlan, ReplyToMode
from .core.channel.history import ChannelHistory
from .infra.config import DeliveryConfig, get_config
from .channels.slack_transport import SlackTransport

__all__ = [
    "ChannelHistory",
    "DeliveryConfig",
    "DeliveryRouter",
    "DispatchResult",
    "PreparedMessage",
    "ReplyDeliveryPlan",
    "ReplyDispatchKind",
    "ReplyEvent",
    "ReplyPayload",
    "ReplyToMode",
    "SlackTransport",
    "dispatch_prepared_message",
    "get_config",
]
