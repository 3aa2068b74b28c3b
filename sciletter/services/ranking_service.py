"""Heuristic relevance ranking.

Scores a candidate paper against a reference paper as a weighted sum
of three overlap ratios::

    score = W_KEYWORDS × |ref.keywords ∩ cand.keywords| / |ref.keywords|
          + W_TITLE    × |ref.title ∩ cand.title|       / |ref.title|
          + W_ABSTRACT × |ref.abstract ∩ cand.abstract| / |ref.abstract|

Title and abstract sets are the important words of each text. Every
ratio is divided by the *reference* side only, so the score is
asymmetric: ``calculate_relevance(a, b)`` and ``calculate_relevance(b, a)``
generally differ. A term whose reference set is empty contributes
nothing, and the abstract term needs both abstracts. The total is
clamped to 1.0.
"""

from typing import Iterable

from sciletter.models.paper import Paper
from sciletter.utils.text import extract_important_words

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
W_KEYWORDS = 0.5
W_TITLE = 0.3
W_ABSTRACT = 0.2
MAX_SCORE = 1.0


def _overlap(reference: set[str], candidate: set[str]) -> float:
    """Share of *reference* also present in *candidate* (0 when reference is empty)."""
    if not reference:
        return 0.0
    return len(reference & candidate) / len(reference)


def calculate_relevance(reference: Paper, candidate: Paper) -> float:
    """Score how related *candidate* is to *reference*, in [0.0, 1.0]."""
    score = 0.0

    ref_keywords = {k.lower() for k in reference.keywords}
    cand_keywords = {k.lower() for k in candidate.keywords}
    score += _overlap(ref_keywords, cand_keywords) * W_KEYWORDS

    score += _overlap(
        extract_important_words(reference.title),
        extract_important_words(candidate.title),
    ) * W_TITLE

    if reference.abstract is not None and candidate.abstract is not None:
        score += _overlap(
            extract_important_words(reference.abstract),
            extract_important_words(candidate.abstract),
        ) * W_ABSTRACT

    return min(score, MAX_SCORE)


def rank_by_relevance(reference: Paper, candidates: Iterable[Paper]) -> list[Paper]:
    """Score every candidate against *reference* and sort best first.

    Returns new records carrying their score; the inputs are untouched.
    The sort is stable, so equal scores keep their original order.
    """
    scored = [
        c.with_relevance(calculate_relevance(reference, c)) for c in candidates
    ]
    return sorted(scored, key=lambda p: p.relevance_score or 0.0, reverse=True)
