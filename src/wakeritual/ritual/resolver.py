"""Selects the wake phrase a bloom is tested against."""

import random
from typing import Dict, Optional

from ..kernel.bloom import Bloom


class PhraseResolver:
    """
    Picks one phrase per bloom, uniformly at random.

    One resolver lives for one ritual pass. The choice for a bloom is cached
    so every retry within that bloom tests the same phrase.

    Attributes:
        rng: Random source; pass ``random.Random(seed)`` for determinism
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self._chosen: Dict[str, int] = {}

    def select_index(self, bloom: Bloom) -> Optional[int]:
        """Return the index of the chosen phrase, or None if the bloom has none."""
        if not bloom.wake_phrases:
            return None

        index = self._chosen.get(bloom.id)
        if index is None or index >= len(bloom.wake_phrases):
            index = self.rng.randrange(len(bloom.wake_phrases))
            self._chosen[bloom.id] = index
        return index

    def resolve(self, bloom: Bloom) -> Optional[str]:
        """Return the phrase to test for ``bloom``, or None if it has no phrases."""
        index = self.select_index(bloom)
        if index is None:
            return None
        return bloom.wake_phrases[index]

    def forget(self, bloom_id: str) -> None:
        """Drop a cached choice so the next resolve picks again."""
        self._chosen.pop(bloom_id, None)
