"""Text helpers shared by similarity scoring."""

from __future__ import annotations
from typing import Set


def whitespace_tokens(text: str) -> Set[str]:
    """Lower-cased whitespace tokens. Punctuation is kept attached to words."""
    if not text:
        return set()
    return set(text.lower().split())
