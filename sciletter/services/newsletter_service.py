"""Newsletter generation and storage service."""

import json
import logging
import re
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Sequence

from sciletter.errors import (
    NewsletterCorruptError,
    NewsletterGenerationError,
    NewsletterNotFoundError,
    NewsletterSaveError,
)
from sciletter.models.newsletter import Newsletter, NewsletterStatus
from sciletter.models.paper import Paper
from sciletter.models.research_field import ResearchField
from sciletter.services.export_service import NewsletterExporter
from sciletter.utils.text import important_words_in_order

logger = logging.getLogger(__name__)

SUMMARY_TOPIC_COUNT = 5

_NEWSLETTER_ID_RE = re.compile(r"[0-9a-f]{32}")


def summary_topics(papers: Sequence[Paper], count: int = SUMMARY_TOPIC_COUNT) -> list[str]:
    """Most common keywords among *papers*.

    Search results carry no keywords, so when none of the papers has any
    the most common important title words are used instead.
    """
    counts = Counter(kw for paper in papers for kw in paper.keywords)
    if not counts:
        counts = Counter(
            word for paper in papers for word in important_words_in_order(paper.title)
        )
    return [topic for topic, _ in counts.most_common(count)]


class NewsletterService:
    """Builds newsletters and keeps them as JSON files on disk."""

    def __init__(
        self,
        newsletters_dir: Path,
        exporter: Optional[NewsletterExporter] = None,
    ):
        """Initialize newsletter service.

        Args:
            newsletters_dir: Directory holding ``<id>.json`` files and exports
            exporter: Exporter for HTML/Markdown output (defaults to one
                writing into *newsletters_dir*)
        """
        self.newsletters_dir = newsletters_dir
        self.newsletters_dir.mkdir(parents=True, exist_ok=True)
        self.exporter = exporter or NewsletterExporter(newsletters_dir)

    # ── Generation ────────────────────────────────────────────────────

    @staticmethod
    def generate_title(
        field: ResearchField,
        user_paper: Optional[Paper] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """E.g. ``"Physics Newsletter - March 2024 - Related to 'My Paper'"``."""
        now = now or datetime.now(timezone.utc)
        title = f"{field.name} Newsletter - {now.strftime('%B %Y')}"
        if user_paper is not None:
            title += f" - Related to '{user_paper.title}'"
        return title

    @staticmethod
    def basic_summary(
        field: ResearchField,
        related_papers: Sequence[Paper],
        user_paper: Optional[Paper] = None,
    ) -> str:
        """Template summary built from counts and common topics."""
        summary = f"This newsletter curates recent research in {field.name}. "
        if user_paper is not None:
            summary += (
                f"Based on your paper '{user_paper.title}', we've identified "
                f"{len(related_papers)} related publications. "
            )
        else:
            summary += (
                f"We've identified {len(related_papers)} recent publications in this field. "
            )

        topics = summary_topics(related_papers)
        if topics:
            summary += f"The papers cover topics including: {', '.join(topics)}. "

        summary += (
            "These papers represent cutting-edge research and may provide "
            "valuable insights for your work."
        )
        return summary

    def generate_summary(
        self,
        field: ResearchField,
        related_papers: Sequence[Paper],
        user_paper: Optional[Paper] = None,
    ) -> str:
        """Summarise the newsletter's papers.

        Placeholder for an agent-written summary (overview, key findings,
        reading order). No agent is wired in, so the template summary is
        returned.
        """
        logger.info("No summary agent configured; using template summary")
        return self.basic_summary(field, related_papers, user_paper)

    def generate_newsletter(
        self,
        field: ResearchField,
        related_papers: Sequence[Paper],
        user_paper: Optional[Paper] = None,
        markdown: bool = False,
    ) -> Newsletter:
        """Build a completed newsletter and write its HTML page.

        Args:
            field: Research field of the newsletter
            related_papers: Ranked papers to include
            user_paper: Reference paper the papers were ranked against
            markdown: Also write a Markdown copy

        Raises:
            NewsletterGenerationError: If the exports cannot be written
        """
        newsletter = Newsletter(
            title=self.generate_title(field, user_paper),
            research_field=field,
            user_paper=user_paper,
            related_papers=list(related_papers),
            summary=self.generate_summary(field, related_papers, user_paper),
            status=NewsletterStatus.GENERATING,
        )

        try:
            newsletter.html_path = str(self.exporter.export_html(newsletter))
            if markdown:
                newsletter.markdown_path = str(self.exporter.export_markdown(newsletter))
        except OSError as e:
            newsletter.status = NewsletterStatus.FAILED
            raise NewsletterGenerationError(f"Failed to write newsletter: {e}") from e

        newsletter.status = NewsletterStatus.COMPLETED
        return newsletter

    # ── Storage ───────────────────────────────────────────────────────

    def _json_path(self, newsletter_id: str) -> Path:
        """Path of ``<id>.json``; ids other than uuid hex are never on disk."""
        if not _NEWSLETTER_ID_RE.fullmatch(newsletter_id):
            raise NewsletterNotFoundError(f"Newsletter not found: {newsletter_id!r}")
        return self.newsletters_dir / f"{newsletter_id}.json"

    def save(self, newsletter: Newsletter) -> Path:
        """Write the newsletter to ``<id>.json``.

        Raises:
            NewsletterSaveError: If the id is not uuid hex or the file cannot be written
        """
        if not _NEWSLETTER_ID_RE.fullmatch(newsletter.id):
            raise NewsletterSaveError(f"Invalid newsletter id: {newsletter.id!r}")
        filepath = self._json_path(newsletter.id)
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(newsletter.to_dict(), f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise NewsletterSaveError(f"Failed to save newsletter: {e}") from e
        logger.info("Saved newsletter %s to %s", newsletter.id, filepath)
        return filepath

    def load(self, newsletter_id: str) -> Newsletter:
        """Load one saved newsletter.

        Raises:
            NewsletterNotFoundError: If no newsletter has that id
            NewsletterCorruptError: If its file cannot be decoded
        """
        filepath = self._json_path(newsletter_id)
        if not filepath.exists():
            raise NewsletterNotFoundError(f"Newsletter not found: {newsletter_id}")
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return Newsletter.from_dict(json.load(f))
        except (ValueError, KeyError, TypeError) as e:
            raise NewsletterCorruptError(
                f"Saved newsletter {newsletter_id} is unreadable: {e}"
            ) from e

    def load_all(self) -> list[Newsletter]:
        """Load every saved newsletter, newest first.

        Files that cannot be read or decoded are logged and skipped.
        """
        newsletters: list[Newsletter] = []
        for filepath in sorted(self.newsletters_dir.glob("*.json")):
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    newsletters.append(Newsletter.from_dict(json.load(f)))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable newsletter %s: %s", filepath.name, e)
        return sorted(newsletters, key=lambda n: n.generated_date, reverse=True)

    def _default_exports(self, newsletter_id: str) -> list[Path]:
        stem = f"newsletter_{newsletter_id}"
        return [self.exporter.export_dir / f"{stem}.html", self.exporter.export_dir / f"{stem}.md"]

    def _is_export(self, path: Path) -> bool:
        return path.resolve().parent == self.exporter.export_dir.resolve()

    def delete(self, newsletter_id: str) -> None:
        """Delete a saved newsletter together with its exports.

        An unreadable ``<id>.json`` is still removed, along with the
        exports at their default names. Only files inside the export
        directory are ever unlinked.

        Raises:
            NewsletterNotFoundError: If no newsletter has that id
        """
        try:
            newsletter = self.load(newsletter_id)
        except NewsletterCorruptError as e:
            logger.warning("Deleting unreadable newsletter %s: %s", newsletter_id, e)
            exports = self._default_exports(newsletter_id)
        else:
            exports = [
                Path(export) for export in (newsletter.html_path, newsletter.markdown_path)
                if export
            ]
        self._json_path(newsletter_id).unlink()
        for export in exports:
            if self._is_export(export):
                export.unlink(missing_ok=True)
            else:
                logger.warning("Not deleting %s: outside %s", export, self.exporter.export_dir)
        logger.info("Deleted newsletter %s", newsletter_id)
