"""Newsletter data model."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from sciletter.models.paper import Paper
from sciletter.models.research_field import ResearchField
from sciletter.utils.text import parse_iso_date, truncate

PREVIEW_LENGTH = 200


class NewsletterStatus(str, Enum):
    DRAFT = "draft"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Newsletter:
    """A generated newsletter of papers ranked against an optional reference paper."""

    title: str
    research_field: ResearchField
    user_paper: Optional[Paper] = None
    related_papers: list[Paper] = field(default_factory=list)
    summary: str = ""
    generated_date: datetime = field(default_factory=_utcnow)
    html_path: Optional[str] = None
    markdown_path: Optional[str] = None
    status: NewsletterStatus = NewsletterStatus.DRAFT
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def total_papers(self) -> int:
        return len(self.related_papers) + (1 if self.user_paper is not None else 0)

    @property
    def preview_text(self) -> str:
        return truncate(self.summary, PREVIEW_LENGTH)

    @property
    def formatted_date(self) -> str:
        return self.generated_date.strftime("%B %d, %Y %H:%M")

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "generated_date": self.generated_date.isoformat(),
            "research_field": {
                "name": self.research_field.name,
                "description": self.research_field.description,
                "keywords": list(self.research_field.keywords),
            },
            "user_paper": self.user_paper.to_dict() if self.user_paper else None,
            "related_papers": [p.to_dict() for p in self.related_papers],
            "summary": self.summary,
            "html_path": self.html_path,
            "markdown_path": self.markdown_path,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Newsletter":
        """Rebuild a newsletter from :meth:`to_dict` output.

        Raises:
            KeyError / ValueError: On missing or malformed fields
        """
        field_data = data["research_field"]
        user_paper = data.get("user_paper")
        generated = parse_iso_date(data["generated_date"])
        if generated is None:
            raise ValueError(f"Invalid generated_date: {data['generated_date']!r}")
        return cls(
            id=data["id"],
            title=data["title"],
            generated_date=generated,
            research_field=ResearchField(
                name=field_data["name"],
                description=field_data.get("description", ""),
                keywords=tuple(field_data.get("keywords") or ()),
            ),
            user_paper=Paper.from_dict(user_paper) if user_paper else None,
            related_papers=[Paper.from_dict(p) for p in data.get("related_papers") or []],
            summary=data.get("summary", ""),
            html_path=data.get("html_path"),
            markdown_path=data.get("markdown_path"),
            status=NewsletterStatus(data.get("status", NewsletterStatus.DRAFT.value)),
        )
