"""Text normalization shared by classification and duplicate detection."""

from __future__ import annotations

import re
from collections.abc import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9 ]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Lowercase, blank out anything outside ``[a-z0-9 ]`` and collapse spaces.

    Examples
    --------
    >>> normalize_text("  Short-circuit!! in Room #12 ")
    'short circuit in room 12'
    >>> normalize_text(None)
    ''
    """
    if not text:
        return ""
    lowered = str(text).lower()
    spaced = _NON_ALNUM.sub(" ", lowered)
    return _WHITESPACE.sub(" ", spaced).strip()


def includes_any(text: str, keywords: Iterable[str]) -> bool:
    """Plain substring containment against already-normalized text."""
    return any(kw in text for kw in keywords)


def word_set(text: str | None) -> set[str]:
    normalized = normalize_text(text)
    if not normalized:
        return set()
    return set(normalized.split(" "))
