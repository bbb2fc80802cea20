"""Repository layer for typed document access."""

from .base import DocumentRepository

__all__ = [
    "DocumentRepository",
]
