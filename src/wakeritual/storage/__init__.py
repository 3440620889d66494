"""Storage layer for blooms."""

from .base import KnowledgeStore
from .bloom_store import BloomStore

__all__ = [
    "KnowledgeStore",
    "BloomStore",
]
