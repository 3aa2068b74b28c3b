"""FastAPI JSON API for SciLetter."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse

from sciletter import __version__
from sciletter.api.schemas import (
    ExtractIn,
    FieldOut,
    FreeTextSearchIn,
    NewsletterIn,
    NewsletterOut,
    PaperOut,
    RelatedSearchIn,
    RelatedSearchOut,
)
from sciletter.config import Settings
from sciletter.errors import (
    InvalidURLError,
    NetworkError,
    NewsletterCorruptError,
    NewsletterNotFoundError,
    NoResultsError,
    ParsingError,
    PDFError,
    SciLetterError,
)
from sciletter.models.research_field import PREDEFINED_FIELDS, ResearchField, get_field
from sciletter.services.classifier import determine_field
from sciletter.services.newsletter_service import NewsletterService
from sciletter.services.pdf_service import extract_metadata
from sciletter.services.search_service import LiteratureSearchService

logger = logging.getLogger(__name__)

# Exception type → HTTP status, most specific first
_ERROR_STATUS: list[tuple[type[SciLetterError], int]] = [
    (NoResultsError, 404),
    (NewsletterNotFoundError, 404),
    (NewsletterCorruptError, 422),
    (NetworkError, 502),
    (ParsingError, 502),
    (InvalidURLError, 500),
    (PDFError, 422),
]


def _status_for(error: SciLetterError) -> int:
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def _field_or_404(name: str) -> ResearchField:
    try:
        return get_field(name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown research field: {name}")


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the API application.

    Args:
        settings: Application settings (``Settings.load()`` at startup if None)
        transport: HTTP transport for the search client (tests pass a mock)
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create one shared HTTP client and the services on startup."""
        app_settings = settings or Settings.load()
        client = httpx.AsyncClient(timeout=app_settings.search_timeout, transport=transport)
        app.state.settings = app_settings
        app.state.search_service = LiteratureSearchService(
            client=client,
            base_url=app_settings.arxiv_base_url,
            timeout=app_settings.search_timeout,
            contact_email=app_settings.contact_email,
        )
        app.state.newsletter_service = NewsletterService(app_settings.newsletters_dir)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(title="SciLetter", version=__version__, lifespan=lifespan)

    @app.exception_handler(SciLetterError)
    async def sciletter_error_handler(request: Request, exc: SciLetterError):
        status = _status_for(exc)
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content={"detail": str(exc)})

    def _cap(request: Request, max_results: int) -> int:
        return min(max_results, request.app.state.settings.max_search_results)

    # ========================================================================
    # Fields
    # ========================================================================

    @app.get("/fields", response_model=list[FieldOut])
    async def list_fields():
        return [FieldOut.from_field(f) for f in PREDEFINED_FIELDS]

    # ========================================================================
    # Search
    # ========================================================================

    @app.get("/search", response_model=list[PaperOut])
    async def search(
        request: Request,
        keywords: list[str] = Query(...),
        field: Optional[str] = None,
        max_results: int = Query(default=20, ge=1),
    ):
        """Keyword search; the field is classified from the keywords if not given."""
        research_field = _field_or_404(field) if field else determine_field(keywords)
        papers = await request.app.state.search_service.search_by_keywords(
            keywords, research_field, _cap(request, max_results)
        )
        return [PaperOut.from_paper(p) for p in papers]

    @app.post("/search/free-text", response_model=list[PaperOut])
    async def search_free_text(request: Request, body: FreeTextSearchIn):
        papers = await request.app.state.search_service.search_with_free_text(
            body.query, context=body.context
        )
        return [PaperOut.from_paper(p) for p in papers]

    # ========================================================================
    # Papers
    # ========================================================================

    @app.post("/papers/extract", response_model=PaperOut)
    async def extract_paper(body: ExtractIn):
        """Guess paper metadata from text extracted from a PDF."""
        return PaperOut.from_paper(extract_metadata(body.text))

    @app.post("/papers/related", response_model=RelatedSearchOut)
    async def related_papers(request: Request, body: RelatedSearchIn):
        paper = body.paper.to_paper()
        service: LiteratureSearchService = request.app.state.search_service
        papers = await service.search_related_to(paper, _cap(request, body.max_results))
        return RelatedSearchOut(
            field=FieldOut.from_field(service.classify(paper)),
            papers=[PaperOut.from_paper(p) for p in papers],
        )

    # ========================================================================
    # Newsletters
    # ========================================================================

    @app.post("/newsletters", response_model=NewsletterOut, status_code=201)
    async def create_newsletter(request: Request, body: NewsletterIn):
        """Search, build and save a newsletter."""
        state = request.app.state
        service: LiteratureSearchService = state.search_service
        max_results = _cap(request, body.max_results or state.settings.related_papers_count)
        user_paper = body.paper.to_paper() if body.paper else None

        if user_paper is not None:
            research_field = _field_or_404(body.field) if body.field else service.classify(user_paper)
            papers = await service.search_related_to(user_paper, max_results)
        elif body.field:
            research_field = _field_or_404(body.field)
            papers = await service.search_field(research_field, max_results)
        else:
            raise HTTPException(status_code=422, detail="Provide a paper or a field")

        if not papers:
            raise NoResultsError()

        newsletter_service: NewsletterService = state.newsletter_service
        newsletter = newsletter_service.generate_newsletter(
            research_field, papers, user_paper=user_paper, markdown=body.markdown
        )
        newsletter_service.save(newsletter)
        return NewsletterOut.from_newsletter(newsletter)

    @app.get("/newsletters", response_model=list[NewsletterOut])
    async def list_newsletters(request: Request):
        newsletters = request.app.state.newsletter_service.load_all()
        return [NewsletterOut.from_newsletter(n) for n in newsletters]

    @app.get("/newsletters/{newsletter_id}", response_model=NewsletterOut)
    async def get_newsletter(request: Request, newsletter_id: str):
        newsletter = request.app.state.newsletter_service.load(newsletter_id)
        return NewsletterOut.from_newsletter(newsletter)

    @app.delete("/newsletters/{newsletter_id}", status_code=204)
    async def delete_newsletter(request: Request, newsletter_id: str):
        request.app.state.newsletter_service.delete(newsletter_id)
        return Response(status_code=204)

    return app


app = create_app()
