"""Reply payloads, dispatch kinds and per-response bookkeeping types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ReplyDispatchKind(str, Enum):
    """Category of a reply event. Tool output is never streamed."""

    TOOL = "tool"
    BLOCK = "block"
    FINAL = "final"


@dataclass(frozen=True)
class ReplyPayload:
    """One unit of reply output: text plus optional media references."""

    text: str = ""
    media_url: Optional[str] = None
    media_urls: Tuple[str, ...] = ()

    def media_list(self) -> List[str]:
        """All media references, ``media_url`` first, de-duplicated."""
        seen: set[str] = set()
        result: List[str] = []
        for url in (self.media_url, *self.media_urls):
            if url and url not in seen:
                seen.add(url)
                result.append(url)
        return result

    def has_media(self) -> bool:
        return bool(self.media_list())


@dataclass(frozen=True)
class ReplyEvent:
    """A payload emitted by the reply generator together with its kind."""

    payload: ReplyPayload
    kind: ReplyDispatchKind = ReplyDispatchKind.BLOCK

    @property
    def is_final(self) -> bool:
        return self.kind == ReplyDispatchKind.FINAL


@dataclass
class ReplyState:
    """Whether any reply has gone out for the current response.

    Shared by reference between the streaming and discrete branches (and
    handed to the generator) so that ``first`` threading is decided once.
    """

    has_replied: bool = False

    def mark_replied(self) -> None:
        self.has_replied = True


@dataclass
class ReplyOptions:
    """Per-response options passed to the reply generator."""

    reply_state: ReplyState
    disable_block_streaming: Optional[bool] = None


@dataclass
class DispatchResult:
    """Aggregate outcome of one response."""

    queued_final: bool = False
    counts: Dict[ReplyDispatchKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in ReplyDispatchKind}
    )

    @property
    def any_delivered(self) -> bool:
        return (
            self.queued_final
            or self.counts.get(ReplyDispatchKind.BLOCK, 0) > 0
            or self.counts.get(ReplyDispatchKind.FINAL, 0) > 0
        )


@dataclass
class PreparedMessage:
    """An incoming chat message, already authorised and routed."""

    channel: str
    message_ts: str
    reply_target: str
    thread_ts: Optional[str] = None
    parent_user_id: Optional[str] = None
    history_key: str = ""
    is_roomish: bool = False
    ack_reaction_value: str = ""
    ack_reaction_message_ts: Optional[str] = None
    ack_reaction_placed: bool = False
