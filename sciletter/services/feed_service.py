"""Atom search-feed parsing service.

The arXiv API answers queries with an Atom document::

    <feed>
      <entry>
        <id>http://arxiv.org/abs/2401.01234v1</id>
        <published>2024-01-02T18:59:59Z</published>
        <title>...</title>
        <summary>...</summary>
        <author><name>...</name></author>
        <link href="..." type="application/pdf"/>
      </entry>
      ...
    </feed>

The document is read as a stream of start/end events which are folded
into a :class:`FeedState`. Each call to :func:`parse_search_feed` owns its
own state, so concurrent parses never share an accumulator.
"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from sciletter.errors import ParsingError
from sciletter.models.paper import Paper
from sciletter.utils.text import normalize_whitespace, parse_iso_date

PDF_MIME_TYPE = "application/pdf"


def _local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


@dataclass
class EntryAccumulator:
    """Fields collected for the ``<entry>`` currently being read."""

    title: list[str] = field(default_factory=list)
    summary: list[str] = field(default_factory=list)
    authors: list[str] = field(default_factory=list)
    published: list[str] = field(default_factory=list)
    id: list[str] = field(default_factory=list)
    pdf_url: Optional[str] = None

    def to_paper(self) -> Paper:
        """Build a search-result paper from the collected fields."""
        entry_id = normalize_whitespace(" ".join(self.id))
        arxiv_id = entry_id.rstrip("/").rsplit("/", 1)[-1] if entry_id else None
        published = normalize_whitespace(" ".join(self.published))
        summary = normalize_whitespace(" ".join(self.summary))

        return Paper(
            title=normalize_whitespace(" ".join(self.title)),
            authors=tuple(self.authors),
            abstract=summary or None,
            publication_date=parse_iso_date(published) if published else None,
            arxiv_id=arxiv_id or None,
            pdf_url=self.pdf_url,
            keywords=(),
            is_user_uploaded=False,
        )


@dataclass
class FeedState:
    """Fold state: finished papers, the open entry and the element path."""

    papers: list[Paper] = field(default_factory=list)
    entry: Optional[EntryAccumulator] = None
    path: list[str] = field(default_factory=list)


# Leaf elements read directly under <entry>
_ENTRY_TEXT_FIELDS = {
    "title": "title",
    "summary": "summary",
    "published": "published",
    "id": "id",
}


def _element_text(elem: ET.Element) -> str:
    return "".join(elem.itertext())


def apply_event(state: FeedState, event: str, elem: ET.Element) -> FeedState:
    """Advance *state* by one parser event and return it."""
    name = _local_name(elem.tag)

    if event == "start":
        state.path.append(name)
        parent = state.path[-2] if len(state.path) > 1 else None
        if name == "entry":
            state.entry = EntryAccumulator()
        elif name == "link" and parent == "entry" and state.entry is not None:
            if elem.get("type") == PDF_MIME_TYPE and elem.get("href") and not state.entry.pdf_url:
                state.entry.pdf_url = elem.get("href")
        return state

    # end event
    parent = state.path[-2] if len(state.path) > 1 else None
    entry = state.entry
    if entry is not None:
        if name == "entry":
            state.papers.append(entry.to_paper())
            state.entry = None
            elem.clear()
        elif parent == "entry" and name in _ENTRY_TEXT_FIELDS:
            getattr(entry, _ENTRY_TEXT_FIELDS[name]).append(_element_text(elem))
        elif name == "name" and parent == "author":
            author = normalize_whitespace(_element_text(elem))
            if author:
                entry.authors.append(author)
    state.path.pop()
    return state


def _iter_events(raw: bytes) -> Iterator[tuple[str, ET.Element]]:
    parser = ET.XMLPullParser(events=("start", "end"))
    parser.feed(raw)
    yield from parser.read_events()
    parser.close()
    yield from parser.read_events()


def parse_search_feed(raw: Union[bytes, str]) -> list[Paper]:
    """Parse an Atom search response into papers, in document order.

    Missing or malformed sub-fields degrade to None (no date, no PDF link,
    no abstract) instead of failing the whole parse.

    Args:
        raw: Response body

    Returns:
        One search-result Paper per ``<entry>``

    Raises:
        ParsingError: If the document is not well-formed XML
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")

    state = FeedState()
    try:
        for event, elem in _iter_events(raw):
            state = apply_event(state, event, elem)
    except ET.ParseError as e:
        raise ParsingError(f"Failed to parse search results: {e}") from e
    return state.papers
