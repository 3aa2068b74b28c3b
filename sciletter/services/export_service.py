"""Newsletter export service (HTML and Markdown)."""

from pathlib import Path

from jinja2 import Environment, PackageLoader, select_autoescape

from sciletter.models.newsletter import Newsletter


def format_percent(score: float) -> str:
    """Format a 0–1 relevance score as ``"42%"``."""
    return f"{round(score * 100)}%"


class NewsletterExporter:
    """Service for writing newsletters to HTML and Markdown files."""

    def __init__(self, export_dir: Path):
        """Initialize exporter.

        Args:
            export_dir: Directory to save exported files
        """
        self.export_dir = export_dir
        self.export_dir.mkdir(parents=True, exist_ok=True)
        self._env = Environment(
            loader=PackageLoader("sciletter", "templates"),
            autoescape=select_autoescape(["html"]),
        )
        self._env.filters["percent"] = format_percent

    def render_html(self, newsletter: Newsletter) -> str:
        """Render the newsletter as a standalone HTML page."""
        template = self._env.get_template("newsletter.html")
        return template.render(newsletter=newsletter)

    def export_html(self, newsletter: Newsletter) -> Path:
        """Write ``newsletter_<id>.html`` and return its path."""
        filepath = self.export_dir / f"newsletter_{newsletter.id}.html"
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.render_html(newsletter))
        return filepath

    def render_markdown(self, newsletter: Newsletter) -> str:
        """Render the newsletter as Markdown."""
        lines = [f"# {newsletter.title}", ""]
        lines.append(
            f"_Generated on {newsletter.formatted_date} · "
            f"Field: {newsletter.research_field.name}_"
        )
        lines.append("")
        lines.append("## Summary\n")
        lines.append(newsletter.summary)
        lines.append("")

        if newsletter.user_paper:
            paper = newsletter.user_paper
            lines.append("## Your Paper\n")
            lines.append(f"### {paper.title}")
            lines.append(f"- Authors: {paper.formatted_authors}")
            if paper.abstract:
                lines.append(f"- Abstract: {paper.abstract}")
            lines.append("")

        if newsletter.related_papers:
            lines.append(f"## Related Research ({len(newsletter.related_papers)} papers)\n")
            for paper in newsletter.related_papers:
                lines.append(f"### {paper.title}")
                lines.append(f"- Authors: {paper.formatted_authors}")
                lines.append(f"- Published: {paper.formatted_date}")
                if paper.relevance_score is not None:
                    lines.append(f"- Relevance: {format_percent(paper.relevance_score)}")
                if paper.arxiv_id:
                    lines.append(f"- arXiv: {paper.arxiv_id}")
                if paper.pdf_url:
                    lines.append(f"- PDF: {paper.pdf_url}")
                lines.append(f"\n{paper.abstract_preview}")
                lines.append("")

        return "\n".join(lines)

    def export_markdown(self, newsletter: Newsletter) -> Path:
        """Write ``newsletter_<id>.md`` and return its path."""
        filepath = self.export_dir / f"newsletter_{newsletter.id}.md"
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.render_markdown(newsletter))
        return filepath
