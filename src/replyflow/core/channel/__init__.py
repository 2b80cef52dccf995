"""Channel-side collaborators: transport protocol, history, ack cleanup."""

from .ack import remove_ack_after_reply
from .history import ChannelHistory, HistoryEntry, resolve_history_key
from .protocol import ChatTransport, StreamHandle

__all__ = [
    "ChannelHistory",
    "ChatTransport",
    "HistoryEntry",
    "StreamHandle",
    "remove_ack_after_reply",
    "resolve_history_key",
]
