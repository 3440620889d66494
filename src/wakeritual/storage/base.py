"""
Knowledge store contract required by the ritual engine.

The engine reads candidate blooms and may append a wake phrase; everything
else about persistence belongs to the store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..kernel.bloom import Bloom


class KnowledgeStore(ABC):
    """Abstract interface for bloom storage backends."""

    @abstractmethod
    def fetch_candidates(self, limit: int, activate: bool = True) -> List[Bloom]:
        """
        Return up to ``limit`` candidate blooms for a ritual.

        The engine re-sorts the result, so store order is not significant.
        With ``activate`` the returned blooms are marked as woken.
        """

    @abstractmethod
    def append_phrase(self, bloom_id: str, phrase: str) -> bool:
        """
        Persist an additional wake phrase for a bloom.

        Returns:
            True on success, False if the phrase could not be saved
        """

    @abstractmethod
    def get(self, bloom_id: str) -> Optional[Bloom]:
        """Retrieve a bloom by id."""
