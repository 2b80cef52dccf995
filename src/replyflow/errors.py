"""Exception types raised by the delivery core and its transports."""

from __future__ import annotations

from typing import Optional


class ReplyflowError(Exception):
    """Base exception for replyflow."""


class TransportError(ReplyflowError):
    """A chat transport call failed."""


class SlackApiError(TransportError):
    """Slack Web API returned ``ok: false`` (or a non-JSON/HTTP error)."""

    def __init__(self, method: str, error: str) -> None:
        super().__init__(f"{method} failed: {error}")
        self.method = method
        self.error = error


class SlackRateLimitedError(SlackApiError):
    """Slack rejected the call with HTTP 429 / ``ratelimited``."""

    def __init__(self, method: str, retry_after: Optional[float] = None) -> None:
        super().__init__(method, "ratelimited")
        self.retry_after = retry_after


class StreamStateError(ReplyflowError):
    """A stream session was driven through an invalid state transition."""
