"""Tests for the text utilities."""

import pytest

from sciletter.utils.text import (
    STOP_WORDS,
    extract_important_words,
    important_words_in_order,
    normalize_whitespace,
    parse_iso_date,
    split_fragments,
    truncate,
)

SAMPLES = [
    "",
    "The cat sat on the mat",
    "Attention Is All You Need",
    "Self-supervised learning, with contrastive losses (SimCLR); a survey!",
    "Über die Quantenmechanik: eine Einführung",
    "  multiple   spaces\tand\nnewlines  ",
    "with with with withheld",
]


@pytest.mark.parametrize("text", SAMPLES)
def test_no_short_tokens_or_stop_words(text):
    words = extract_important_words(text)
    assert all(len(w) > 3 for w in words)
    assert not words & STOP_WORDS


@pytest.mark.parametrize("text", SAMPLES)
def test_idempotent_on_joined_output(text):
    words = extract_important_words(text)
    assert extract_important_words(" ".join(sorted(words))) == words


def test_punctuation_separates_words():
    assert extract_important_words("self-supervised,contrastive.learning") == {
        "self", "supervised", "contrastive", "learning",
    }


def test_lowercases_and_deduplicates():
    assert extract_important_words("Neural NEURAL neural networks") == {"neural", "networks"}


def test_empty_input():
    assert extract_important_words("") == set()
    assert important_words_in_order("") == []


def test_ordered_variant_keeps_first_appearance():
    assert important_words_in_order("Zebra fish and zebra stripes") == ["zebra", "fish", "stripes"]


def test_normalize_whitespace():
    assert normalize_whitespace("  Graph neural\n   networks ") == "Graph neural networks"


def test_split_fragments():
    assert split_fragments(" a, b ;c,") == ["a", "b", "c", ""]


def test_truncate():
    assert truncate("abcdef", 10) == "abcdef"
    assert truncate("abcdef", 3) == "abc..."


def test_parse_iso_date():
    parsed = parse_iso_date("2024-03-05T18:00:01Z")
    assert (parsed.year, parsed.month, parsed.day) == (2024, 3, 5)
    assert parsed.utcoffset().total_seconds() == 0
    assert parse_iso_date("yesterday") is None
    assert parse_iso_date("") is None
