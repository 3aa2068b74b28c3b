"""Data models."""

from sciletter.models.newsletter import Newsletter, NewsletterStatus
from sciletter.models.paper import Paper
from sciletter.models.research_field import PREDEFINED_FIELDS, ResearchField, get_field

__all__ = [
    "PREDEFINED_FIELDS",
    "Newsletter",
    "NewsletterStatus",
    "Paper",
    "ResearchField",
    "get_field",
]
