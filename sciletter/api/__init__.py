"""JSON HTTP API for SciLetter."""

from sciletter.api.app import create_app

__all__ = ["create_app"]
