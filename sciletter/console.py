"""Console UI for terminal output using Rich."""

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from sciletter.models.newsletter import Newsletter
from sciletter.models.paper import Paper
from sciletter.models.research_field import ResearchField


class ConsoleUI:
    """Rich-based console UI for paper display and notifications."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self.console = console or Console()

    def info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(message)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        self.console.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self.console.print(f"[red]Error:[/red] {message}")

    def searching(self, description: str) -> None:
        self.console.print(f"[bold]Searching:[/bold] {description}")

    def field_detected(self, field: ResearchField) -> None:
        self.console.print(f"[bold]Field:[/bold] {field.name}")

    def display_fields(self, fields: Sequence[ResearchField]) -> None:
        """Display the research field catalog."""
        table = Table(title="Research fields")
        table.add_column("Name")
        table.add_column("Description", overflow="fold")
        table.add_column("Keywords", overflow="fold")
        for field in fields:
            table.add_row(field.name, field.description, ", ".join(field.keywords))
        self.console.print(table)

    def display_paper(self, paper: Paper) -> None:
        """Display the metadata of a single paper."""
        self.console.print(f"[bold]{paper.title}[/bold]")
        self.console.print(f"[italic]{', '.join(paper.authors) or 'Unknown authors'}[/italic]")
        if paper.keywords:
            self.console.print(f"Keywords: {', '.join(paper.keywords)}")
        self.console.print(paper.abstract or "No abstract available")

    def display_papers(self, papers: Sequence[Paper], title: str = "Papers") -> None:
        """Display papers in a formatted table.

        A relevance column is shown when any paper carries a score.
        """
        scored = any(p.relevance_score is not None for p in papers)

        table = Table(title=title)
        table.add_column("#", justify="right")
        if scored:
            table.add_column("Score", justify="right")
        table.add_column("Date", width=12)
        table.add_column("arXiv", overflow="fold")
        table.add_column("Title", overflow="fold")
        table.add_column("Authors", overflow="fold")

        for index, paper in enumerate(papers, start=1):
            row = [str(index)]
            if scored:
                score = paper.relevance_score
                row.append(f"{score:.2f}" if score is not None else "-")
            row.extend([
                paper.publication_date.date().isoformat() if paper.publication_date else "-",
                paper.arxiv_id or "-",
                paper.title,
                paper.formatted_authors,
            ])
            table.add_row(*row)

        if papers:
            self.console.print(table)
        else:
            self.console.print("No papers found.")

    def display_newsletters(self, newsletters: Sequence[Newsletter]) -> None:
        """Display saved newsletters, newest first."""
        if not newsletters:
            self.console.print("No newsletters saved.")
            return
        table = Table(title="Newsletters")
        table.add_column("ID", overflow="fold")
        table.add_column("Date")
        table.add_column("Field")
        table.add_column("Papers", justify="right")
        table.add_column("Title", overflow="fold")
        for newsletter in newsletters:
            table.add_row(
                newsletter.id,
                newsletter.formatted_date,
                newsletter.research_field.name,
                str(newsletter.total_papers),
                newsletter.title,
            )
        self.console.print(table)

    def newsletter_created(self, newsletter: Newsletter) -> None:
        self.console.print(
            f"\n[green]Done.[/green] Newsletter [bold]{newsletter.id}[/bold] "
            f"with {len(newsletter.related_papers)} papers"
        )
        if newsletter.html_path:
            self.console.print(f"HTML: {newsletter.html_path}")
        if newsletter.markdown_path:
            self.console.print(f"Markdown: {newsletter.markdown_path}")
