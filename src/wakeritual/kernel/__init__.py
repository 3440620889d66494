"""Kernel module holding the bloom data model."""

from .bloom import Bloom

__all__ = [
    "Bloom",
]
