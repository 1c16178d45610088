"""Cosmetic cleanup for suggested reply text."""

from __future__ import annotations

import re

# "1. ", "2) ", "10.foo"
_ENUMERATION = re.compile(r"^\d+[.)]\s*")

_QUOTE_PAIRS = {
    '"': '"',
    "'": "'",
    "“": "”",
    "‘": "’",
}


def _strip_quote_pair(text: str) -> str:
    if len(text) >= 2 and _QUOTE_PAIRS.get(text[0]) == text[-1]:
        return text[1:-1]
    return text


def sanitize_reply_text(text: str) -> str:
    """Drop a leading list marker and one pair of wrapping quotes.

    Repeats until nothing changes, so sanitizing clean text is a no-op.
    """
    cleaned = text.strip()
    while True:
        previous = cleaned
        cleaned = _ENUMERATION.sub("", cleaned, count=1).strip()
        cleaned = _strip_quote_pair(cleaned).strip()
        if cleaned == previous:
            return cleaned
