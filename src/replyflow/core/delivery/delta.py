"""Incremental text for append-only live streams."""

from __future__ import annotations


def resolve_delta(previous: str, next_text: str) -> str:
    """Return the text to append when a snapshot grows from *previous* to *next_text*.

    Appended streams cannot retract, so a shrinking snapshot yields nothing.
    Text that no longer shares a prefix starts a new paragraph.
    """
    if not previous:
        return next_text
    if next_text == previous:
        return ""
    if next_text.startswith(previous):
        return next_text[len(previous):]
    if previous.startswith(next_text):
        return ""
    return f"\n{next_text}"
