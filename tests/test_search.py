"""Tests for the literature search service."""

import asyncio

import httpx
import pytest

from sciletter.errors import InvalidURLError, NetworkError, ParsingError
from sciletter.models.paper import Paper
from sciletter.models.research_field import get_field
from sciletter.services.search_service import LiteratureSearchService
from tests.conftest import make_entry, make_feed

PHYSICS = get_field("Physics")


def _service(transport, **kwargs) -> LiteratureSearchService:
    return LiteratureSearchService(client=httpx.AsyncClient(transport=transport), **kwargs)


def test_build_query_format():
    query = LiteratureSearchService.build_query(["dark matter", "halo"], PHYSICS, 10)
    assert query == (
        "search_query=all:dark%20matter+OR+halo+OR+physics+OR+quantum+OR+mechanics"
        "+OR+astrophysics+OR+particle%20physics"
        "&start=0&max_results=10&sortBy=submittedDate&sortOrder=descending"
    )


def test_search_by_keywords_sends_query(feed_transport):
    transport = feed_transport()
    service = _service(transport, contact_email="me@example.org")

    papers = asyncio.run(service.search_by_keywords(["halo"], PHYSICS, 5))

    assert [p.arxiv_id for p in papers] == ["2403.01234v1", "2403.05678v2"]
    (request,) = transport.requests
    assert request.url.host == "export.arxiv.org"
    assert request.url.path == "/api/query"
    raw_query = request.url.query.decode()
    assert raw_query.startswith("search_query=all:halo+OR+physics")
    assert "max_results=5" in raw_query
    assert "sortBy=submittedDate" in raw_query
    assert "mailto:me@example.org" in request.headers["User-Agent"]


def test_http_404_raises_network_error(feed_transport):
    service = _service(feed_transport(content=b"not found", status_code=404))
    with pytest.raises(NetworkError) as excinfo:
        asyncio.run(service.search_by_keywords(["halo"], PHYSICS))
    assert excinfo.value.status_code == 404


def test_transport_failure_raises_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(httpx.MockTransport(handler))
    with pytest.raises(NetworkError):
        asyncio.run(service.search_by_keywords(["halo"], PHYSICS))


def test_broken_feed_raises_parsing_error(feed_transport):
    service = _service(feed_transport(content=b"<feed><entry>"))
    with pytest.raises(ParsingError):
        asyncio.run(service.search_by_keywords(["halo"], PHYSICS))


@pytest.mark.parametrize("base_url", ["not a url", "ftp://example.org/query", "http://"])
def test_invalid_endpoint_raises_invalid_url(feed_transport, base_url):
    service = _service(feed_transport(), base_url=base_url)
    with pytest.raises(InvalidURLError):
        asyncio.run(service.search_by_keywords(["halo"], PHYSICS))


def test_max_results_must_be_positive(feed_transport):
    service = _service(feed_transport())
    with pytest.raises(ValueError):
        asyncio.run(service.search_by_keywords(["halo"], PHYSICS, 0))


def test_collect_search_keywords():
    paper = Paper(
        title="Sparse attention for long documents",
        abstract="Transformers struggle with long inputs because attention is quadratic in length.",
        keywords=("transformers", "attention"),
    )
    assert LiteratureSearchService.collect_search_keywords(paper) == [
        "transformers",
        "attention",
        "sparse",
        "long",
        "documents",
        "struggle",
        "inputs",
        "because",
    ]


def test_classify_uses_paper_keywords(reference_paper):
    assert LiteratureSearchService.classify(reference_paper).name == "Artificial Intelligence"


def test_search_related_to_sorts_by_relevance(feed_transport, reference_paper):
    raw = make_feed(
        make_entry("2401.00001v1", "Stellar winds", "Winds of massive stars."),
        make_entry(
            "2401.00002v1",
            "Graph neural networks for protein structure prediction",
            "We apply graph neural networks to protein structure prediction.",
        ),
        make_entry("2401.00003v1", "Protein docking", "Docking of protein complexes."),
        make_entry("2401.00004v1", "Galaxy surveys", "Survey design."),
    )
    service = _service(feed_transport(content=raw))

    papers = asyncio.run(service.search_related_to(reference_paper, max_results=4))

    scores = [p.relevance_score for p in papers]
    assert all(s is not None for s in scores)
    assert scores == sorted(scores, reverse=True)
    assert papers[0].arxiv_id == "2401.00002v1"
    # ties keep endpoint order
    assert [p.arxiv_id for p in papers[-2:]] == ["2401.00001v1", "2401.00004v1"]
    assert all(not p.is_user_uploaded for p in papers)


def test_search_with_free_text_falls_back_to_keywords(feed_transport):
    transport = feed_transport()
    service = _service(transport)

    papers = asyncio.run(
        service.search_with_free_text("What is new in quantum error correction?", context="ctx")
    )

    assert len(papers) == 2
    raw_query = transport.requests[0].url.query.decode()
    assert raw_query.startswith("search_query=all:what+OR+quantum+OR+error+OR+correction")
    # classified as Physics, so its keywords widen the query
    assert "astrophysics" in raw_query
    assert "max_results=20" in raw_query


def test_cancelling_one_search_leaves_others_intact():
    async def handler(request: httpx.Request) -> httpx.Response:
        if "slow" in request.url.query.decode():
            await asyncio.sleep(30)
        return httpx.Response(200, content=make_feed(make_entry("2401.1v1", "Fast result")))

    async def scenario():
        service = _service(httpx.MockTransport(handler))
        slow = asyncio.create_task(service.search_by_keywords(["slow"], PHYSICS))
        fast = asyncio.create_task(service.search_by_keywords(["fast"], PHYSICS))
        await asyncio.sleep(0.05)
        slow.cancel()
        papers = await fast
        with pytest.raises(asyncio.CancelledError):
            await slow
        await service.aclose()
        return papers

    papers = asyncio.run(scenario())
    assert [p.title for p in papers] == ["Fast result"]


def test_owned_client_is_closed():
    async def scenario():
        async with LiteratureSearchService() as service:
            client = service._client
        return client

    client = asyncio.run(scenario())
    assert client.is_closed


def test_shared_client_is_left_open(feed_transport):
    async def scenario():
        client = httpx.AsyncClient(transport=feed_transport())
        async with LiteratureSearchService(client=client):
            pass
        closed = client.is_closed
        await client.aclose()
        return closed

    assert asyncio.run(scenario()) is False
