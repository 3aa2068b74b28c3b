"""Utility functions."""

from sciletter.utils.text import (
    STOP_WORDS,
    extract_important_words,
    important_words_in_order,
    normalize_whitespace,
    parse_iso_date,
    split_fragments,
    truncate,
)

__all__ = [
    "STOP_WORDS",
    "extract_important_words",
    "important_words_in_order",
    "normalize_whitespace",
    "parse_iso_date",
    "split_fragments",
    "truncate",
]
