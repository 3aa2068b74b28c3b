"""Configuration management.

``Settings`` is loaded once per process: the first call to
``Settings.load()`` reads the configuration and caches the instance;
every later call returns the same object. Use ``update()`` to change
values at runtime, or ``reload()`` to re-read everything from disk.

Services never read ``Settings`` themselves; the CLI and API pass the
values they need into each service's constructor.

User-editable configuration lives in ``.metadata/config.yaml``. On
first run, missing files are copied from ``.metadata.example/``.
"""

import logging
import shutil
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, ClassVar, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.yaml"


@dataclass
class Settings:
    """Application settings, cached per process.

    Usage::

        settings = Settings.load()                # first call → read from disk
        settings = Settings.load()                # later → same object
        settings.update(search_timeout=10.0)      # runtime change
        settings = Settings.reload()              # re-read from disk
    """

    contact_email: Optional[str] = None
    arxiv_base_url: str = "https://export.arxiv.org/api/query"
    search_timeout: float = 30.0
    max_search_results: int = 50
    related_papers_count: int = 15
    max_pdf_size: int = 10 * 1024 * 1024
    metadata_dir: Path = Path(".metadata")
    papers_dir: Path = Path("data/papers")
    newsletters_dir: Path = Path("data/newsletters")

    _instance: ClassVar[Optional["Settings"]] = None

    # ── Runtime helpers ───────────────────────────────────────────────

    def update(self, **kwargs: Any) -> None:
        """Mutate settings fields at runtime.

        >>> Settings.load().update(search_timeout=5.0)
        """
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no field '{key}'")
            setattr(self, key, value)

    # ── Factory / lifecycle ───────────────────────────────────────────

    @classmethod
    def load(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Load or return the cached Settings instance.

        Pass *base_dir* to override the project root (defaults to the
        current working directory). Relative paths in the config file
        are resolved against it.
        """
        if cls._instance is not None:
            return cls._instance

        base_dir = base_dir or Path.cwd()
        metadata_dir = base_dir / ".metadata"
        _ensure_default_files(base_dir, metadata_dir)

        values = _load_config(metadata_dir / CONFIG_FILENAME)
        settings = cls(metadata_dir=metadata_dir, **values)
        settings.papers_dir = _resolve(base_dir, settings.papers_dir)
        settings.newsletters_dir = _resolve(base_dir, settings.newsletters_dir)

        cls._instance = settings
        return settings

    @classmethod
    def reload(cls, base_dir: Optional[Path] = None) -> "Settings":
        """Discard the cached instance and re-load from disk."""
        cls.reset()
        return cls.load(base_dir)

    @classmethod
    def reset(cls) -> None:
        """Discard the cached instance so the next ``load()`` re-creates it."""
        cls._instance = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _resolve(base_dir: Path, path: Path) -> Path:
    path = Path(path).expanduser()
    return path if path.is_absolute() else base_dir / path


def _ensure_default_files(base_dir: Path, metadata_dir: Path) -> None:
    """Copy ``.metadata.example/`` templates when real files are missing."""
    example_dir = base_dir / ".metadata.example"
    if not example_dir.exists():
        return

    metadata_dir.mkdir(parents=True, exist_ok=True)
    for example_file in example_dir.iterdir():
        if example_file.is_file():
            target = metadata_dir / example_file.name
            if not target.exists():
                shutil.copy2(example_file, target)
                logger.info("Created .metadata/%s from template", example_file.name)


_CONVERTERS = {
    "contact_email": lambda v: str(v) if v else None,
    "arxiv_base_url": str,
    "search_timeout": float,
    "max_search_results": int,
    "related_papers_count": int,
    "max_pdf_size": int,
    "papers_dir": Path,
    "newsletters_dir": Path,
}


def _load_config(path: Path) -> dict[str, Any]:
    """Load known settings from ``config.yaml``.

    Unknown keys are ignored and values that cannot be converted are
    logged and left at their defaults.
    """
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}

    known = {f.name for f in fields(Settings)}
    values: dict[str, Any] = {}
    for key, raw in data.items():
        if key not in known or key not in _CONVERTERS:
            continue
        if raw is None and key != "contact_email":
            continue
        try:
            values[key] = _CONVERTERS[key](raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid value for %s in %s: %r", key, path, raw)
    return values


def save_config(path: Path, settings: Settings) -> None:
    """Persist the user-editable settings to ``config.yaml``."""
    data: dict[str, Any] = {
        "contact_email": settings.contact_email or "",
        "arxiv_base_url": settings.arxiv_base_url,
        "search_timeout": settings.search_timeout,
        "max_search_results": settings.max_search_results,
        "related_papers_count": settings.related_papers_count,
        "max_pdf_size": settings.max_pdf_size,
        "papers_dir": str(settings.papers_dir),
        "newsletters_dir": str(settings.newsletters_dir),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# SciLetter configuration\n")
        f.write("# contact_email: sent to arXiv in the User-Agent header\n\n")
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
        )
