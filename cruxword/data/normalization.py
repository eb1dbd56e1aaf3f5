"""Shared helpers for word and pattern normalization."""

from __future__ import annotations

import re
import unicodedata

from ..core.constants import PATTERN_WILDCARD

WORD_RE = re.compile(r"[^a-z]")
PATTERN_RE = re.compile(r"[^a-z?]")


def _fold(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def clean_word(text: str) -> str:
    """Return a normalized lowercase ASCII representation of ``text``."""

    if not text:
        return ""
    return WORD_RE.sub("", _fold(text.strip()).lower())


def clean_pattern(pattern: str) -> str:
    """Lowercase a slot pattern, keeping letters and the wildcard marker.

    Board renderers sometimes use ``.`` or ``_`` for unknown cells; both are
    read as the wildcard.
    """

    if not pattern:
        return ""
    folded = _fold(pattern.strip()).lower().replace(".", PATTERN_WILDCARD).replace("_", PATTERN_WILDCARD)
    return PATTERN_RE.sub("", folded)


def matches_pattern(word: str, pattern: str) -> bool:
    """Naive wildcard comparison used as the reference for index lookups."""

    if len(word) != len(pattern):
        return False
    return all(p == PATTERN_WILDCARD or p == w for w, p in zip(word, pattern))


__all__ = ["clean_pattern", "clean_word", "matches_pattern"]
