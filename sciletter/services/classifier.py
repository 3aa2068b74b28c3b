"""Keyword-overlap research field classifier."""

from typing import Iterable, Sequence

from sciletter.models.research_field import (
    DEFAULT_FIELD_NAME,
    PREDEFINED_FIELDS,
    ResearchField,
    get_field,
)


def _match_count(terms: list[str], research_field: ResearchField) -> int:
    """Count terms contained in any of the field's keyword strings."""
    field_keywords = [k.lower() for k in research_field.keywords]
    return sum(1 for term in terms if any(term in fk for fk in field_keywords))


def determine_field(
    keywords: Iterable[str],
    fields: Sequence[ResearchField] = PREDEFINED_FIELDS,
) -> ResearchField:
    """Pick the research field that best describes *keywords*.

    Walks *fields* in order and returns the first one for which at least
    one keyword is a (case-insensitive) substring of a field keyword, so
    ``"neural"`` matches ``"neural networks"``. Catalog order decides ties.

    Args:
        keywords: Search keywords or extracted tokens
        fields: Field catalog, in priority order

    Returns:
        The first matching field, or Computer Science when nothing matches
    """
    terms = [k.lower() for k in keywords if k]
    for research_field in fields:
        if _match_count(terms, research_field) > 0:
            return research_field

    for research_field in fields:
        if research_field.name == DEFAULT_FIELD_NAME:
            return research_field
    return get_field(DEFAULT_FIELD_NAME)
