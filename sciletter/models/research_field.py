"""Research field catalog."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResearchField:
    """A topical research category with representative keywords."""

    name: str
    description: str
    keywords: tuple[str, ...]


# Catalog order is the classifier's tie-break; do not reorder.
PREDEFINED_FIELDS: tuple[ResearchField, ...] = (
    ResearchField(
        name="Artificial Intelligence",
        description="Machine learning, deep learning, neural networks, and AI applications",
        keywords=("AI", "machine learning", "deep learning", "neural networks", "NLP", "computer vision"),
    ),
    ResearchField(
        name="Physics",
        description="Theoretical and experimental physics, quantum mechanics, astrophysics",
        keywords=("physics", "quantum", "mechanics", "astrophysics", "particle physics"),
    ),
    ResearchField(
        name="Biology",
        description="Molecular biology, genetics, biochemistry, and life sciences",
        keywords=("biology", "genetics", "molecular", "biochemistry", "genomics"),
    ),
    ResearchField(
        name="Computer Science",
        description="Algorithms, systems, software engineering, and theoretical CS",
        keywords=("computer science", "algorithms", "programming", "software", "systems"),
    ),
    ResearchField(
        name="Mathematics",
        description="Pure and applied mathematics, statistics, and mathematical modeling",
        keywords=("mathematics", "statistics", "algebra", "calculus", "topology"),
    ),
    ResearchField(
        name="Chemistry",
        description="Organic, inorganic, physical, and analytical chemistry",
        keywords=("chemistry", "organic", "inorganic", "catalysis", "synthesis"),
    ),
    ResearchField(
        name="Neuroscience",
        description="Brain science, cognitive neuroscience, and neuroimaging",
        keywords=("neuroscience", "brain", "cognitive", "neuroimaging", "neural"),
    ),
    ResearchField(
        name="Materials Science",
        description="Material properties, nanotechnology, and material design",
        keywords=("materials", "nanotechnology", "polymers", "composites", "crystals"),
    ),
)

DEFAULT_FIELD_NAME = "Computer Science"


def get_field(name: str) -> ResearchField:
    """Look up a predefined field by name (case-insensitive).

    Raises:
        KeyError: If no predefined field has that name
    """
    wanted = name.strip().lower()
    for research_field in PREDEFINED_FIELDS:
        if research_field.name.lower() == wanted:
            return research_field
    raise KeyError(f"Unknown research field: {name!r}")
