"""arXiv literature search service."""

import logging
from typing import Iterable, Optional
from urllib.parse import quote

import httpx

from sciletter import __version__
from sciletter.errors import InvalidURLError, NetworkError
from sciletter.models.paper import Paper
from sciletter.models.research_field import ResearchField
from sciletter.services.classifier import determine_field
from sciletter.services.feed_service import parse_search_feed
from sciletter.services.ranking_service import rank_by_relevance
from sciletter.utils.text import important_words_in_order

logger = logging.getLogger(__name__)

ARXIV_API_BASE = "https://export.arxiv.org/api/query"
DEFAULT_TIMEOUT = 30.0

DEFAULT_KEYWORD_RESULTS = 20
DEFAULT_RELATED_RESULTS = 15
# Abstract tokens added to a related-paper query
MAX_ABSTRACT_TERMS = 5


class LiteratureSearchService:
    """Service for querying the arXiv API and ranking what it returns.

    The HTTP client is injected: pass a shared ``httpx.AsyncClient`` to
    reuse connections across services, or let the service create (and
    own) one. Every call keeps its own parse state, so one instance can
    serve concurrent searches, and cancelling a search task aborts only
    that task's request.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = ARXIV_API_BASE,
        timeout: float = DEFAULT_TIMEOUT,
        contact_email: Optional[str] = None,
    ):
        """Initialize search service.

        Args:
            client: Shared async HTTP client (a private one is created if None)
            base_url: Search endpoint
            timeout: Request timeout in seconds
            contact_email: Contact address sent in the User-Agent (recommended by arXiv)
        """
        self.base_url = base_url
        self.timeout = timeout
        self.contact_email = contact_email
        self._headers = self._build_headers()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _build_headers(self) -> dict[str, str]:
        """Build HTTP headers with user agent."""
        agent = f"sciletter/{__version__}"
        if self.contact_email:
            agent += f" (mailto:{self.contact_email})"
        return {"User-Agent": agent}

    async def aclose(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LiteratureSearchService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ── Query construction ────────────────────────────────────────────

    @staticmethod
    def build_query(
        keywords: Iterable[str],
        field: ResearchField,
        max_results: int,
        start: int = 0,
    ) -> str:
        """Build the percent-encoded query string for a keyword search.

        Search keywords and the field's keywords are OR-ed together, newest
        submissions first.
        """
        terms = [quote(term, safe="") for term in [*keywords, *field.keywords] if term]
        search_terms = "+OR+".join(terms)
        return (
            f"search_query=all:{search_terms}"
            f"&start={start}"
            f"&max_results={max_results}"
            "&sortBy=submittedDate&sortOrder=descending"
        )

    def _build_url(self, query: str) -> str:
        """Join the endpoint and *query*, rejecting malformed endpoints."""
        try:
            url = httpx.URL(self.base_url)
        except httpx.InvalidURL as e:
            raise InvalidURLError(f"Invalid search URL: {self.base_url!r}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise InvalidURLError(f"Invalid search URL: {self.base_url!r}")
        return f"{self.base_url}?{query}"

    # ── Searches ──────────────────────────────────────────────────────

    async def search_by_keywords(
        self,
        keywords: Iterable[str],
        field: ResearchField,
        max_results: int = DEFAULT_KEYWORD_RESULTS,
    ) -> list[Paper]:
        """Search arXiv for papers matching any keyword or field keyword.

        Args:
            keywords: Search keywords
            field: Research field whose keywords widen the query
            max_results: Maximum number of results

        Returns:
            Papers in the order the endpoint returned them

        Raises:
            ValueError: If max_results is not positive
            InvalidURLError: If the endpoint URL is malformed
            NetworkError: On transport failure or a non-200 response
            ParsingError: If the response is not a well-formed feed
        """
        if max_results < 1:
            raise ValueError(f"max_results must be positive, got {max_results}")

        url = self._build_url(self.build_query(keywords, field, max_results))
        logger.debug("arXiv query: %s", url)

        try:
            response = await self._client.get(
                url, headers=self._headers, timeout=self.timeout
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            raise InvalidURLError(f"Invalid search URL: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Network request failed: {e}") from e

        if response.status_code != 200:
            raise NetworkError(
                f"Search endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        papers = parse_search_feed(response.content)
        logger.info("arXiv returned %d papers for field %s", len(papers), field.name)
        return papers

    async def search_field(
        self,
        field: ResearchField,
        max_results: int = DEFAULT_KEYWORD_RESULTS,
    ) -> list[Paper]:
        """Search the latest papers of a field using only its own keywords."""
        return await self.search_by_keywords(field.keywords, field, max_results)

    @staticmethod
    def collect_search_keywords(paper: Paper) -> list[str]:
        """Collect query keywords describing *paper*.

        Explicit keywords come first, then the important title words, then
        the first few important abstract words. Duplicates are dropped,
        keeping the first occurrence.
        """
        keywords = list(paper.keywords)
        keywords.extend(important_words_in_order(paper.title))
        if paper.abstract is not None:
            keywords.extend(important_words_in_order(paper.abstract)[:MAX_ABSTRACT_TERMS])
        return list(dict.fromkeys(keywords))

    @classmethod
    def classify(cls, paper: Paper) -> ResearchField:
        """Determine the research field of *paper* from its search keywords."""
        return determine_field(cls.collect_search_keywords(paper))

    async def search_related_to(
        self,
        paper: Paper,
        max_results: int = DEFAULT_RELATED_RESULTS,
    ) -> list[Paper]:
        """Find papers related to *paper*, most relevant first.

        Args:
            paper: Reference paper (usually user-uploaded)
            max_results: Maximum number of results

        Returns:
            Search results carrying their relevance score against *paper*,
            sorted by descending score (ties keep endpoint order)
        """
        keywords = self.collect_search_keywords(paper)
        field = determine_field(keywords)
        results = await self.search_by_keywords(keywords, field, max_results)
        return rank_by_relevance(paper, results)

    async def search_with_free_text(
        self,
        query: str,
        context: Optional[str] = None,
    ) -> list[Paper]:
        """Search with a natural-language query.

        Placeholder for an agent-driven search: no agent is wired in, so
        the query is reduced to its important words and run as a keyword
        search. *context* (e.g. the abstract of the user's paper) is
        accepted for that future integration and currently unused.
        """
        logger.info("No search agent configured; falling back to keyword search")
        if context:
            logger.debug("Ignoring %d characters of agent context", len(context))
        keywords = important_words_in_order(query)
        field = determine_field(keywords)
        return await self.search_by_keywords(keywords, field, DEFAULT_KEYWORD_RESULTS)
