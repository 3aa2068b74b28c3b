"""PDF import, text extraction and heuristic metadata extraction.

The metadata heuristics work on plain extracted text, not on the PDF
layout, so they are best-effort: a title, author list or abstract may
be wrong for papers with unusual front matter.
"""

import logging
import re
import shutil
import uuid
from pathlib import Path
from typing import Optional, Union

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from sciletter.errors import (
    CannotOpenDocumentError,
    InvalidFormatError,
    NoTextContentError,
    PermissionDeniedError,
)
from sciletter.models.paper import Paper
from sciletter.utils.text import split_fragments

logger = logging.getLogger(__name__)

MAX_PDF_SIZE = 10 * 1024 * 1024

UNTITLED = "Untitled Paper"
UNKNOWN_AUTHOR = "Unknown Author"
MIN_TITLE_LENGTH = 10
AUTHOR_SCAN_LINES = 6
MIN_AUTHOR_LENGTH = 3
MAX_AUTHOR_LENGTH = 50
MAX_AUTHORS = 5
MAX_ABSTRACT_LENGTH = 2000

_ABSTRACT_RE = re.compile(r"abstract", re.IGNORECASE)
# Leftmost match wins, so "1. introduction" is cut before its number
_ABSTRACT_END_RE = re.compile(r"1\. introduction|introduction|keywords", re.IGNORECASE)
_KEYWORDS_RE = re.compile(r"keywords:", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Heuristics
# ---------------------------------------------------------------------------

def _non_empty_lines(text: str) -> list[str]:
    stripped = (line.strip() for line in text.splitlines())
    return [line for line in stripped if line]


def extract_title(text: str) -> str:
    """First non-blank line longer than ten characters."""
    for line in _non_empty_lines(text):
        if len(line) > MIN_TITLE_LENGTH:
            return line
    return UNTITLED


def extract_authors(text: str) -> list[str]:
    """Author names from comma / "and" separated lines near the top."""
    authors: list[str] = []
    for line in _non_empty_lines(text)[:AUTHOR_SCAN_LINES]:
        if "," not in line and " and " not in line:
            continue
        authors.extend(
            part for part in split_fragments(line)
            if MIN_AUTHOR_LENGTH < len(part) < MAX_AUTHOR_LENGTH
        )
    return authors[:MAX_AUTHORS] or [UNKNOWN_AUTHOR]


def extract_abstract(text: str) -> Optional[str]:
    """Text between "Abstract" and the introduction or keyword list."""
    match = _ABSTRACT_RE.search(text)
    if match is None:
        return None
    remaining = text[match.end():]
    end = _ABSTRACT_END_RE.search(remaining)
    if end is not None:
        remaining = remaining[:end.start()]
    return remaining.strip()[:MAX_ABSTRACT_LENGTH]


def extract_keywords(text: str) -> list[str]:
    """Comma / semicolon separated list on the "Keywords:" line.

    Unlike a strict line scanner, a "Keywords:" line that ends the text
    without a newline still counts: the list runs to the end of the text.
    """
    match = _KEYWORDS_RE.search(text)
    if match is None:
        return []
    line = text[match.end():].split("\n", 1)[0]
    return [kw for kw in split_fragments(line) if kw]


def extract_metadata(page_text: str, local_pdf_path: Optional[str] = None) -> Paper:
    """Build a user-uploaded Paper from the extracted text of a PDF.

    Args:
        page_text: Page texts joined with newlines
        local_pdf_path: Where the PDF is stored, if known

    Returns:
        Paper with title, authors, abstract and keywords filled in

    Raises:
        NoTextContentError: If there is no text to analyse
    """
    if not page_text or not page_text.strip():
        raise NoTextContentError()

    return Paper(
        title=extract_title(page_text),
        authors=tuple(extract_authors(page_text)),
        abstract=extract_abstract(page_text),
        local_pdf_path=local_pdf_path,
        keywords=tuple(extract_keywords(page_text)),
        is_user_uploaded=True,
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class PDFService:
    """Service for storing uploaded PDFs and reading their text."""

    def __init__(self, papers_dir: Path, max_pdf_size: int = MAX_PDF_SIZE):
        """Initialize PDF service.

        Args:
            papers_dir: Directory where imported PDFs are stored
            max_pdf_size: Largest accepted file, in bytes
        """
        self.papers_dir = papers_dir
        self.max_pdf_size = max_pdf_size

    def import_pdf(self, source: Union[str, Path]) -> Path:
        """Copy a PDF into the papers directory under a unique name.

        Returns:
            Path of the stored copy

        Raises:
            CannotOpenDocumentError: If the file does not exist
            InvalidFormatError: If it is not a PDF or is too large
            PermissionDeniedError: If it cannot be read
        """
        source = Path(source)
        if not source.is_file():
            raise CannotOpenDocumentError(f"No such PDF file: {source}")
        if source.suffix.lower() != ".pdf":
            raise InvalidFormatError(f"Not a PDF file: {source.name}")
        size = source.stat().st_size
        if size > self.max_pdf_size:
            raise InvalidFormatError(
                f"{source.name} is {size} bytes; the limit is {self.max_pdf_size}"
            )

        self.papers_dir.mkdir(parents=True, exist_ok=True)
        destination = self.papers_dir / f"{uuid.uuid4().hex}.pdf"
        try:
            shutil.copyfile(source, destination)
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied: {source}") from e
        logger.info("Imported %s as %s", source.name, destination.name)
        return destination

    def extract_text(self, path: Union[str, Path]) -> str:
        """Extract the text of every page, pages separated by blank lines.

        Raises:
            CannotOpenDocumentError: If pypdf cannot read the file
            PermissionDeniedError: If the file is unreadable or encrypted
            NoTextContentError: If no page yields any text
        """
        try:
            reader = PdfReader(str(path))
            if reader.is_encrypted and not reader.decrypt(""):
                raise PermissionDeniedError(f"{Path(path).name} is password protected")
            pages = [page.extract_text() or "" for page in reader.pages]
        except PermissionError as e:
            raise PermissionDeniedError(f"Permission denied: {path}") from e
        except (PdfReadError, OSError, ValueError) as e:
            raise CannotOpenDocumentError(f"Unable to open PDF document {path}: {e}") from e

        full_text = "\n\n".join(text for text in pages if text)
        if not full_text.strip():
            raise NoTextContentError()
        return full_text

    def extract_metadata(self, path: Union[str, Path]) -> Paper:
        """Extract text from the PDF at *path* and guess its metadata."""
        return extract_metadata(self.extract_text(path), local_pdf_path=str(path))
