"""Command-line interface handlers."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
from rich.progress import Progress, SpinnerColumn, TextColumn

from sciletter.config import CONFIG_FILENAME, Settings, save_config
from sciletter.console import ConsoleUI
from sciletter.errors import NoResultsError, PDFError, SciLetterError
from sciletter.models.paper import Paper
from sciletter.models.research_field import PREDEFINED_FIELDS, ResearchField, get_field
from sciletter.services.classifier import determine_field
from sciletter.services.newsletter_service import NewsletterService
from sciletter.services.pdf_service import PDFService
from sciletter.services.search_service import LiteratureSearchService

T = TypeVar("T")


class SciLetterCLI:
    """CLI application for SciLetter."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        ui: Optional[ConsoleUI] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loaded from .metadata if not provided)
            ui: Console UI (a default Rich console if not provided)
            transport: HTTP transport for searches (tests pass a mock)
        """
        self.settings = settings or Settings.load()
        self.ui = ui or ConsoleUI()
        self.transport = transport
        self.pdf_service = PDFService(
            self.settings.papers_dir,
            max_pdf_size=self.settings.max_pdf_size,
        )
        self._newsletter_service: Optional[NewsletterService] = None

    @property
    def newsletter_service(self) -> NewsletterService:
        """Created on first use so read-only commands don't touch the disk."""
        if self._newsletter_service is None:
            self._newsletter_service = NewsletterService(self.settings.newsletters_dir)
        return self._newsletter_service

    # -- helpers -------------------------------------------------------------

    def _search_service(self, client: httpx.AsyncClient) -> LiteratureSearchService:
        return LiteratureSearchService(
            client=client,
            base_url=self.settings.arxiv_base_url,
            timeout=self.settings.search_timeout,
            contact_email=self.settings.contact_email,
        )

    def _cap(self, max_results: int) -> int:
        return min(max_results, self.settings.max_search_results)

    def _run_search(
        self,
        description: str,
        search: Callable[[LiteratureSearchService], Awaitable[T]],
    ) -> T:
        """Run one search coroutine with a spinner, closing the client afterwards."""

        async def runner() -> T:
            async with httpx.AsyncClient(
                timeout=self.settings.search_timeout, transport=self.transport
            ) as client:
                return await search(self._search_service(client))

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            return asyncio.run(runner())

    # -- commands ------------------------------------------------------------

    def cmd_fields(self) -> None:
        """List the predefined research fields."""
        self.ui.display_fields(PREDEFINED_FIELDS)

    def cmd_search(
        self,
        keywords: list[str],
        field_name: Optional[str] = None,
        max_results: int = 20,
    ) -> list[Paper]:
        """Keyword search, in the given field or the one the keywords suggest."""
        field = get_field(field_name) if field_name else determine_field(keywords)
        self.ui.field_detected(field)
        papers = self._run_search(
            "Searching arXiv...",
            lambda s: s.search_by_keywords(keywords, field, self._cap(max_results)),
        )
        self.ui.display_papers(papers, title=f"Latest papers ({field.name})")
        return papers

    def cmd_ask(self, query: str, context: Optional[str] = None) -> list[Paper]:
        """Free-text search."""
        papers = self._run_search(
            "Searching arXiv...",
            lambda s: s.search_with_free_text(query, context=context),
        )
        self.ui.display_papers(papers, title=f"Results for '{query}'")
        return papers

    def cmd_extract(self, pdf_path: Path) -> Paper:
        """Show the metadata guessed from a PDF."""
        paper = self.pdf_service.extract_metadata(pdf_path)
        self.ui.display_paper(paper)
        return paper

    def cmd_related(self, pdf_path: Path, max_results: int = 15) -> list[Paper]:
        """Rank recent arXiv papers against the paper in *pdf_path*."""
        paper = self.pdf_service.extract_metadata(pdf_path)
        self.ui.info(f"Reference: [bold]{paper.title}[/bold]")
        self.ui.field_detected(LiteratureSearchService.classify(paper))
        papers = self._run_search(
            "Finding related papers...",
            lambda s: s.search_related_to(paper, self._cap(max_results)),
        )
        self.ui.display_papers(papers, title="Related papers")
        return papers

    def cmd_newsletter(
        self,
        pdf_path: Optional[Path] = None,
        field_name: Optional[str] = None,
        max_results: Optional[int] = None,
        markdown: bool = False,
    ) -> None:
        """Search, build and save a newsletter.

        With a PDF the papers are ranked against it; otherwise the latest
        papers of *field_name* are used.
        """
        max_results = self._cap(max_results or self.settings.related_papers_count)
        user_paper: Optional[Paper] = None
        field: ResearchField

        if pdf_path is not None:
            stored = self.pdf_service.import_pdf(pdf_path)
            try:
                user_paper = self.pdf_service.extract_metadata(stored)
            except PDFError:
                stored.unlink(missing_ok=True)
                raise
            field = (
                get_field(field_name) if field_name
                else LiteratureSearchService.classify(user_paper)
            )
            self.ui.searching(f"papers related to '{user_paper.title}'")
            papers = self._run_search(
                "Finding related papers...",
                lambda s: s.search_related_to(user_paper, max_results),
            )
        elif field_name:
            field = get_field(field_name)
            self.ui.searching(f"{field.name} literature")
            papers = self._run_search(
                "Searching arXiv...",
                lambda s: s.search_field(field, max_results),
            )
        else:
            raise SciLetterError("Pass a PDF or --field to build a newsletter")

        if not papers:
            raise NoResultsError("No papers found. Try another field or paper.")

        newsletter = self.newsletter_service.generate_newsletter(
            field, papers, user_paper=user_paper, markdown=markdown
        )
        self.newsletter_service.save(newsletter)
        self.ui.newsletter_created(newsletter)

    def cmd_list(self) -> None:
        """List saved newsletters."""
        self.ui.display_newsletters(self.newsletter_service.load_all())

    def cmd_delete(self, newsletter_id: str) -> None:
        """Delete a saved newsletter."""
        self.newsletter_service.delete(newsletter_id)
        self.ui.success(f"Deleted newsletter {newsletter_id}")

    def cmd_config(self, contact_email: Optional[str] = None) -> None:
        """Show settings, or update the contact email."""
        if contact_email is not None:
            self.settings.update(contact_email=contact_email or None)
            save_config(self.settings.metadata_dir / CONFIG_FILENAME, self.settings)
            self.ui.success("Saved configuration")
        self.ui.info(f"Contact email: {self.settings.contact_email or '-'}")
        self.ui.info(f"Search endpoint: {self.settings.arxiv_base_url}")
        self.ui.info(f"Papers: {self.settings.papers_dir}")
        self.ui.info(f"Newsletters: {self.settings.newsletters_dir}")


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="sciletter",
        description="arXiv search → relevance ranking → newsletter",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("fields", help="List research fields")

    # search command
    search_parser = subparsers.add_parser("search", help="Search arXiv by keywords")
    search_parser.add_argument("keywords", nargs="+", help="Search keywords")
    search_parser.add_argument("--field", dest="field_name", help="Research field name")
    search_parser.add_argument(
        "--max", type=int, default=20, dest="max_results",
        help="Maximum results (default: 20)",
    )

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Search arXiv with a free-text question")
    ask_parser.add_argument("query", help="Natural-language query")
    ask_parser.add_argument("--context", help="Extra context, e.g. your abstract")

    # extract command
    extract_parser = subparsers.add_parser("extract", help="Show metadata extracted from a PDF")
    extract_parser.add_argument("pdf", type=Path, help="PDF file")

    # related command
    related_parser = subparsers.add_parser("related", help="Find papers related to a PDF")
    related_parser.add_argument("pdf", type=Path, help="PDF file")
    related_parser.add_argument(
        "--max", type=int, default=15, dest="max_results",
        help="Maximum results (default: 15)",
    )

    # newsletter command
    newsletter_parser = subparsers.add_parser("newsletter", help="Build and save a newsletter")
    newsletter_parser.add_argument("pdf", type=Path, nargs="?", help="Reference paper PDF")
    newsletter_parser.add_argument("--field", dest="field_name", help="Research field name")
    newsletter_parser.add_argument("--max", type=int, dest="max_results", help="Maximum papers")
    newsletter_parser.add_argument(
        "--markdown", action="store_true", help="Also write a Markdown copy"
    )

    subparsers.add_parser("list", help="List saved newsletters")

    delete_parser = subparsers.add_parser("delete", help="Delete a saved newsletter")
    delete_parser.add_argument("newsletter_id", help="Newsletter ID")

    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_parser.add_argument("--email", dest="contact_email", help="Contact email for arXiv")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def run_cli(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI. Returns the process exit code."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        import uvicorn

        uvicorn.run("sciletter.api.app:app", host=args.host, port=args.port)
        return 0

    cli = SciLetterCLI()
    try:
        if args.command == "fields":
            cli.cmd_fields()
        elif args.command == "search":
            cli.cmd_search(args.keywords, args.field_name, args.max_results)
        elif args.command == "ask":
            cli.cmd_ask(args.query, args.context)
        elif args.command == "extract":
            cli.cmd_extract(args.pdf)
        elif args.command == "related":
            cli.cmd_related(args.pdf, args.max_results)
        elif args.command == "newsletter":
            cli.cmd_newsletter(args.pdf, args.field_name, args.max_results, args.markdown)
        elif args.command == "list":
            cli.cmd_list()
        elif args.command == "delete":
            cli.cmd_delete(args.newsletter_id)
        elif args.command == "config":
            cli.cmd_config(args.contact_email)
    except (SciLetterError, KeyError, ValueError) as e:
        cli.ui.error(str(e.args[0]) if isinstance(e, KeyError) else str(e))
        return 1
    return 0


def main() -> None:
    sys.exit(run_cli())
