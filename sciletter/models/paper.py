"""Paper data model."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from sciletter.utils.text import parse_iso_date, truncate

ABSTRACT_PREVIEW_LENGTH = 150


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Paper:
    """A scientific paper, either uploaded by the user or found by search.

    Instances are immutable. Scoring a paper against a reference paper
    produces a new record through :meth:`with_relevance`.
    """

    title: str
    authors: tuple[str, ...] = ()
    abstract: Optional[str] = None
    publication_date: Optional[datetime] = None
    arxiv_id: Optional[str] = None
    pdf_url: Optional[str] = None
    local_pdf_path: Optional[str] = None
    keywords: tuple[str, ...] = ()
    research_field: Optional[str] = None
    is_user_uploaded: bool = False
    relevance_score: Optional[float] = None
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples
        object.__setattr__(self, "authors", tuple(self.authors))
        object.__setattr__(self, "keywords", tuple(self.keywords))

        if self.relevance_score is not None:
            if self.is_user_uploaded:
                raise ValueError("User-uploaded papers cannot carry a relevance score")
            if not 0.0 <= self.relevance_score <= 1.0:
                raise ValueError(
                    f"relevance_score must be within [0, 1], got {self.relevance_score}"
                )

    # ── Derived records ───────────────────────────────────────────────

    def with_relevance(self, score: float) -> "Paper":
        """Return a copy of this search result carrying *score*."""
        return replace(self, relevance_score=score)

    # ── Display helpers ───────────────────────────────────────────────

    @property
    def formatted_authors(self) -> str:
        """Short author line, e.g. ``"Smith et al."`` or ``"Smith and Jones"``."""
        if not self.authors:
            return "Unknown authors"
        if len(self.authors) == 1:
            return self.authors[0]
        if len(self.authors) == 2:
            return f"{self.authors[0]} and {self.authors[1]}"
        return f"{self.authors[0]} et al."

    @property
    def formatted_date(self) -> str:
        if self.publication_date is None:
            return "Date unknown"
        return self.publication_date.strftime("%b %d, %Y")

    @property
    def abstract_preview(self) -> str:
        if not self.abstract:
            return "No abstract available"
        return truncate(self.abstract, ABSTRACT_PREVIEW_LENGTH)

    # ── Serialisation ─────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "authors": list(self.authors),
            "abstract": self.abstract,
            "publication_date": (
                self.publication_date.isoformat() if self.publication_date else None
            ),
            "arxiv_id": self.arxiv_id,
            "pdf_url": self.pdf_url,
            "local_pdf_path": self.local_pdf_path,
            "keywords": list(self.keywords),
            "research_field": self.research_field,
            "is_user_uploaded": self.is_user_uploaded,
            "relevance_score": self.relevance_score,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Paper":
        """Rebuild a paper from :meth:`to_dict` output."""
        published = data.get("publication_date")
        return cls(
            id=data.get("id") or _new_id(),
            title=data.get("title", ""),
            authors=tuple(data.get("authors") or ()),
            abstract=data.get("abstract"),
            publication_date=parse_iso_date(published) if published else None,
            arxiv_id=data.get("arxiv_id"),
            pdf_url=data.get("pdf_url"),
            local_pdf_path=data.get("local_pdf_path"),
            keywords=tuple(data.get("keywords") or ()),
            research_field=data.get("research_field"),
            is_user_uploaded=bool(data.get("is_user_uploaded", False)),
            relevance_score=data.get("relevance_score"),
        )
