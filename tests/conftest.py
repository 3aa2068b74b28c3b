"""Shared fixtures."""

from typing import Callable

import httpx
import pytest

from sciletter.config import Settings
from sciletter.models.paper import Paper

ATOM_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:arxiv="http://arxiv.org/schemas/atom">
  <id>https://arxiv.org/api/query</id>
  <title>arXiv Query: search_query=all:neural</title>
  <updated>2024-03-06T00:00:00-05:00</updated>
  <entry>
    <id>http://arxiv.org/abs/2403.01234v1</id>
    <updated>2024-03-05T18:00:01Z</updated>
    <published>2024-03-05T18:00:01Z</published>
    <title>Graph Neural Networks for
      Protein Folding</title>
    <summary>  We train graph neural networks to predict protein
  structures from sequence data.
</summary>
    <author>
      <name>Ada Lovelace</name>
      <arxiv:affiliation>Analytical Engine Lab</arxiv:affiliation>
    </author>
    <author>
      <name>Alan Turing</name>
    </author>
    <link href="http://arxiv.org/abs/2403.01234v1" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2403.01234v1" rel="related" type="application/pdf"/>
    <arxiv:primary_category term="cs.LG" scheme="http://arxiv.org/schemas/atom"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/2403.05678v2</id>
    <published>not a date</published>
    <title>Quantum Error Correction Benchmarks</title>
    <summary>Surface codes under realistic noise.</summary>
    <author><name>Grace Hopper</name></author>
    <link href="http://arxiv.org/abs/2403.05678v2" rel="alternate" type="text/html"/>
  </entry>
</feed>
"""


def make_feed(*entries: str) -> bytes:
    """Wrap raw ``<entry>`` snippets in an Atom feed."""
    body = "".join(entries)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<feed xmlns="http://www.w3.org/2005/Atom">{body}</feed>'
    ).encode("utf-8")


def make_entry(arxiv_id: str, title: str, summary: str = "") -> str:
    return (
        f"<entry><id>http://arxiv.org/abs/{arxiv_id}</id>"
        f"<published>2024-01-01T00:00:00Z</published>"
        f"<title>{title}</title><summary>{summary}</summary>"
        f"<author><name>Someone</name></author></entry>"
    )


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED


@pytest.fixture
def reference_paper() -> Paper:
    return Paper(
        title="Graph neural networks for protein structure prediction",
        authors=("Ada Lovelace",),
        abstract="We apply graph neural networks to protein structure prediction.",
        keywords=("Deep Learning", "proteins"),
        is_user_uploaded=True,
    )


@pytest.fixture
def feed_transport() -> Callable[..., httpx.MockTransport]:
    """Build a mock transport that answers every request with *content*.

    Requests are recorded on the returned transport's ``requests`` list.
    """

    def factory(content: bytes = ATOM_FEED, status_code: int = 200) -> httpx.MockTransport:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(status_code, content=content)

        transport = httpx.MockTransport(handler)
        transport.requests = seen  # type: ignore[attr-defined]
        return transport

    return factory


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        metadata_dir=tmp_path / ".metadata",
        papers_dir=tmp_path / "papers",
        newsletters_dir=tmp_path / "newsletters",
    )


@pytest.fixture(autouse=True)
def _reset_settings():
    Settings.reset()
    yield
    Settings.reset()
