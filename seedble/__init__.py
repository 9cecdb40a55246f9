"""Seedble: skills assessment, peer reviews and AI-assisted team building."""

from .errors import NotFoundError, PersistenceError, SeedbleError, ValidationError

__all__ = [
    "NotFoundError",
    "PersistenceError",
    "SeedbleError",
    "ValidationError",
]
