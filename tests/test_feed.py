"""Tests for the Atom feed parser."""

import pytest

from sciletter.errors import ParsingError
from sciletter.services.feed_service import parse_search_feed
from tests.conftest import make_feed


def test_single_entry_round_trip():
    raw = make_feed(
        "<entry>"
        "<id>http://arxiv.org/abs/2401.00001v1</id>"
        "<published>2024-01-02T03:04:05Z</published>"
        "<title>T</title>"
        "<summary>S</summary>"
        "<author><name>A</name></author>"
        '<link href="http://arxiv.org/pdf/2401.00001v1" type="application/pdf"/>'
        "</entry>"
    )
    papers = parse_search_feed(raw)

    assert len(papers) == 1
    paper = papers[0]
    assert paper.title == "T"
    assert paper.authors == ("A",)
    assert paper.abstract == "S"
    assert paper.pdf_url == "http://arxiv.org/pdf/2401.00001v1"
    assert paper.publication_date is not None
    assert paper.arxiv_id == "2401.00001v1"
    assert paper.keywords == ()
    assert paper.is_user_uploaded is False
    assert paper.relevance_score is None


def test_arxiv_feed(atom_feed):
    first, second = parse_search_feed(atom_feed)

    assert first.title == "Graph Neural Networks for Protein Folding"
    assert first.abstract == (
        "We train graph neural networks to predict protein structures from sequence data."
    )
    assert first.authors == ("Ada Lovelace", "Alan Turing")
    assert first.arxiv_id == "2403.01234v1"
    assert first.pdf_url == "http://arxiv.org/pdf/2403.01234v1"
    assert first.publication_date.year == 2024

    assert second.arxiv_id == "2403.05678v2"
    assert second.publication_date is None
    assert second.pdf_url is None


def test_feed_level_title_and_id_are_ignored(atom_feed):
    titles = [p.title for p in parse_search_feed(atom_feed)]
    assert not any(t.startswith("arXiv Query") for t in titles)


def test_missing_fields_degrade_to_none():
    papers = parse_search_feed(make_feed("<entry><title>Only a title</title></entry>"))
    assert len(papers) == 1
    paper = papers[0]
    assert paper.title == "Only a title"
    assert paper.authors == ()
    assert paper.abstract is None
    assert paper.publication_date is None
    assert paper.arxiv_id is None
    assert paper.pdf_url is None


def test_empty_feed():
    assert parse_search_feed(make_feed()) == []


def test_accepts_text():
    raw = make_feed("<entry><title>Text input</title></entry>").decode("utf-8")
    assert parse_search_feed(raw)[0].title == "Text input"


def test_each_paper_gets_its_own_id():
    raw = make_feed(
        "<entry><title>One</title></entry>",
        "<entry><title>Two</title></entry>",
    )
    first, second = parse_search_feed(raw)
    assert first.id != second.id


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"<feed><entry><title>Unclosed</entry></feed>",
        b"not xml at all",
        b"<feed><entry>",
    ],
)
def test_broken_documents_raise(raw):
    with pytest.raises(ParsingError):
        parse_search_feed(raw)
