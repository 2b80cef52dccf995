"""Silent-reply sentinel handling."""

from __future__ import annotations

import re
from typing import Optional

SILENT_REPLY_TOKEN = "NO_REPLY"


def is_silent_reply_text(text: Optional[str], token: str = SILENT_REPLY_TOKEN) -> bool:
    """True when *text* is (or opens/closes with) the silent sentinel.

    The token must stand alone as a word: ``NO_REPLY`` and ``NO_REPLY.`` are
    silent, ``NO_REPLY_X`` is not.
    """
    if not text or not token:
        return False
    escaped = re.escape(token)
    if re.match(rf"^\s*{escaped}(?=$|\W)", text):
        return True
    return re.search(rf"\b{escaped}\b\W*$", text) is not None
