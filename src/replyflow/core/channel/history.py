"""Pending channel history.

Messages seen in a room while the bot was not addressed are kept per history
key so they can be given to the next reply as context. The inbound message
handler records entries with ``append``; the dispatch loop only clears them
once a reply for the room finishes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


def resolve_history_key(channel: str, thread_ts: Optional[str] = None) -> str:
    """History is tracked per thread when the message is in one."""
    return f"{channel}:{thread_ts}" if thread_ts else channel


@dataclass
class HistoryEntry:
    sender: str
    body: str
    timestamp: Optional[str] = None
    message_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class ChannelHistory:
    """In-memory history map keyed by :func:`resolve_history_key`."""

    def __init__(self) -> None:
        self._entries: Dict[str, List[HistoryEntry]] = {}

    def entries(self, key: str) -> List[HistoryEntry]:
        return list(self._entries.get(key, []))

    def append(self, key: str, entry: HistoryEntry, limit: int) -> List[HistoryEntry]:
        """Record *entry*, keeping at most *limit* entries (0 disables history)."""
        if limit <= 0:
            return []
        history = self._entries.setdefault(key, [])
        history.append(entry)
        if len(history) > limit:
            del history[: len(history) - limit]
        return list(history)

    def clear(self, key: str) -> None:
        self._entries[key] = []

    def clear_if_enabled(self, key: str, limit: int) -> bool:
        """Clear pending entries for *key* when history is enabled."""
        if limit <= 0 or not key:
            return False
        self.clear(key)
        logger.debug("Cleared pending history for %s", key)
        return True
