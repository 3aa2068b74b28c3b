"""Service layer."""

from sciletter.services.classifier import determine_field
from sciletter.services.export_service import NewsletterExporter
from sciletter.services.feed_service import parse_search_feed
from sciletter.services.newsletter_service import NewsletterService
from sciletter.services.pdf_service import PDFService, extract_metadata
from sciletter.services.ranking_service import calculate_relevance, rank_by_relevance
from sciletter.services.search_service import LiteratureSearchService

__all__ = [
    "LiteratureSearchService",
    "NewsletterExporter",
    "NewsletterService",
    "PDFService",
    "calculate_relevance",
    "determine_field",
    "extract_metadata",
    "parse_search_feed",
    "rank_by_relevance",
]
