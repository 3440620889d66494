"""
Bloom ordering policy for a ritual session.

Curated blooms (those with an explicit wake order) come first in ascending
wake order. Everything else follows, strongest resonance first. Ties are
broken by bloom id so the order is deterministic.
"""

from typing import Iterable, List

from ..kernel.bloom import Bloom


class BloomSelector:
    """Orders candidate blooms for a session."""

    def order(self, blooms: Iterable[Bloom]) -> List[Bloom]:
        blooms = list(blooms)
        ordered = [b for b in blooms if b.wake_order is not None]
        unordered = [b for b in blooms if b.wake_order is None]

        ordered.sort(key=lambda b: (b.wake_order, b.id))
        unordered.sort(key=lambda b: (-b.resonance, b.id))

        return ordered + unordered


def order(blooms: Iterable[Bloom]) -> List[Bloom]:
    """Module-level shortcut for BloomSelector().order."""
    return BloomSelector().order(blooms)
