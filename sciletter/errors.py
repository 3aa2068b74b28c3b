"""Exception hierarchy for search, PDF and newsletter failures."""

from typing import Optional


class SciLetterError(Exception):
    """Base class for all errors raised by sciletter."""

    default_message = "Unexpected error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------

class SearchError(SciLetterError):
    default_message = "Literature search failed"


class InvalidURLError(SearchError):
    default_message = "Invalid search URL"


class NetworkError(SearchError):
    """Non-success HTTP status or transport failure."""

    default_message = "Network request failed"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParsingError(SearchError):
    default_message = "Failed to parse search results"


class NoResultsError(SearchError):
    """Search succeeded but found nothing. Raised by callers, not the core."""

    default_message = "No results found"


# ---------------------------------------------------------------------------
# PDF
# ---------------------------------------------------------------------------

class PDFError(SciLetterError):
    default_message = "PDF processing failed"


class CannotOpenDocumentError(PDFError):
    default_message = "Unable to open PDF document"


class NoTextContentError(PDFError):
    default_message = "PDF contains no extractable text"


class InvalidFormatError(PDFError):
    default_message = "Invalid PDF format"


class PermissionDeniedError(PDFError):
    default_message = "Permission denied to access file"


# ---------------------------------------------------------------------------
# Newsletter
# ---------------------------------------------------------------------------

class NewsletterError(SciLetterError):
    default_message = "Newsletter operation failed"


class NewsletterGenerationError(NewsletterError):
    default_message = "Failed to generate newsletter"


class NewsletterSaveError(NewsletterError):
    default_message = "Failed to save newsletter"


class NewsletterNotFoundError(NewsletterError):
    default_message = "Newsletter not found"


class NewsletterCorruptError(NewsletterError):
    """A saved newsletter file exists but cannot be decoded."""

    default_message = "Saved newsletter is unreadable"
