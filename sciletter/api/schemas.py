"""Request and response bodies of the HTTP API."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from sciletter.models.newsletter import Newsletter
from sciletter.models.paper import Paper
from sciletter.models.research_field import ResearchField


class FieldOut(BaseModel):
    name: str
    description: str
    keywords: list[str]

    @classmethod
    def from_field(cls, field: ResearchField) -> "FieldOut":
        return cls(name=field.name, description=field.description, keywords=list(field.keywords))


class PaperIn(BaseModel):
    """A reference paper supplied by the caller (e.g. from ``/papers/extract``)."""

    title: str
    authors: list[str] = Field(default_factory=list)
    abstract: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)
    arxiv_id: Optional[str] = None
    local_pdf_path: Optional[str] = None

    def to_paper(self) -> Paper:
        return Paper(
            title=self.title,
            authors=tuple(self.authors),
            abstract=self.abstract,
            keywords=tuple(self.keywords),
            arxiv_id=self.arxiv_id,
            local_pdf_path=self.local_pdf_path,
            is_user_uploaded=True,
        )


class PaperOut(BaseModel):
    id: str
    title: str
    authors: list[str]
    abstract: Optional[str] = None
    publication_date: Optional[datetime] = None
    arxiv_id: Optional[str] = None
    pdf_url: Optional[str] = None
    local_pdf_path: Optional[str] = None
    keywords: list[str]
    research_field: Optional[str] = None
    is_user_uploaded: bool
    relevance_score: Optional[float] = None

    @classmethod
    def from_paper(cls, paper: Paper) -> "PaperOut":
        return cls.model_validate(paper.to_dict())


class FreeTextSearchIn(BaseModel):
    query: str
    context: Optional[str] = None


class ExtractIn(BaseModel):
    text: str


class RelatedSearchIn(BaseModel):
    paper: PaperIn
    max_results: int = Field(default=15, ge=1)


class RelatedSearchOut(BaseModel):
    field: FieldOut
    papers: list[PaperOut]


class NewsletterIn(BaseModel):
    """Build a newsletter around a reference paper, a field, or both."""

    field: Optional[str] = None
    paper: Optional[PaperIn] = None
    max_results: Optional[int] = Field(default=None, ge=1)
    markdown: bool = False


class NewsletterOut(BaseModel):
    id: str
    title: str
    generated_date: datetime
    research_field: FieldOut
    user_paper: Optional[PaperOut] = None
    related_papers: list[PaperOut]
    summary: str
    html_path: Optional[str] = None
    markdown_path: Optional[str] = None
    status: str
    total_papers: int

    @classmethod
    def from_newsletter(cls, newsletter: Newsletter) -> "NewsletterOut":
        return cls(
            id=newsletter.id,
            title=newsletter.title,
            generated_date=newsletter.generated_date,
            research_field=FieldOut.from_field(newsletter.research_field),
            user_paper=(
                PaperOut.from_paper(newsletter.user_paper) if newsletter.user_paper else None
            ),
            related_papers=[PaperOut.from_paper(p) for p in newsletter.related_papers],
            summary=newsletter.summary,
            html_path=newsletter.html_path,
            markdown_path=newsletter.markdown_path,
            status=newsletter.status.value,
            total_papers=newsletter.total_papers,
        )
