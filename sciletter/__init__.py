"""SciLetter - arXiv literature discovery and newsletter builder.

A tool for searching arXiv, ranking related papers against a
reference paper, extracting metadata from uploaded PDFs and
bundling the results into a newsletter.
"""

__version__ = "1.0.0"

from sciletter.config import Settings
from sciletter.models.paper import Paper
from sciletter.models.research_field import PREDEFINED_FIELDS, ResearchField

__all__ = ["PREDEFINED_FIELDS", "Paper", "ResearchField", "Settings", "__version__"]
