"""Text processing utilities for tokenizing, cleaning and date parsing."""

import re
import unicodedata
from datetime import datetime
from typing import Optional

from dateutil import parser as dtparser

STOP_WORDS = frozenset(
    {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
)

# Tokens of this length or shorter are never considered important
MIN_WORD_LENGTH = 3

_FRAGMENT_SEPARATORS_RE = re.compile(r"[,;]")


def _strip_punctuation(text: str) -> str:
    """Replace every Unicode punctuation character (category P*) with a space."""
    return "".join(
        " " if unicodedata.category(ch).startswith("P") else ch for ch in text
    )


def important_words_in_order(text: str) -> list[str]:
    """Like :func:`extract_important_words` but ordered by first appearance."""
    if not text:
        return []
    words = _strip_punctuation(text.lower()).split()
    kept = (w for w in words if len(w) > MIN_WORD_LENGTH and w not in STOP_WORDS)
    return list(dict.fromkeys(kept))


def extract_important_words(text: str) -> set[str]:
    """Extract the distinct significant words of *text*.

    Lowercases, treats punctuation as separators, splits on whitespace and
    drops stop words and tokens of three characters or fewer.

    Args:
        text: Arbitrary free text (title, abstract, query)

    Returns:
        Set of lowercase tokens; empty for empty input
    """
    return set(important_words_in_order(text))


def normalize_whitespace(text: str) -> str:
    """Collapse all whitespace runs (including newlines) to single spaces."""
    return " ".join(text.split())


def split_fragments(text: str) -> list[str]:
    """Split on commas/semicolons and trim each fragment (empties kept)."""
    return [part.strip() for part in _FRAGMENT_SEPARATORS_RE.split(text)]


def truncate(text: str, length: int, trailing: str = "...") -> str:
    """Cut *text* to *length* characters, appending *trailing* when cut."""
    if len(text) <= length:
        return text
    return text[:length] + trailing


def parse_iso_date(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp such as ``2024-03-05T18:00:01Z``.

    Returns:
        Parsed datetime, or None if the string is not valid ISO-8601
    """
    try:
        return dtparser.isoparse(value.strip())
    except (ValueError, OverflowError):
        return None
