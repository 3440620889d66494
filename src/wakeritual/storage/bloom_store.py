"""
Bloom Storage Layer

File-based JSON storage for blooms. Each bloom lives in its own file under
``<storage_dir>/blooms`` and a small index keeps resonance and wake order
so candidates can be chosen without reading every file.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Dict, Any, Iterator

from ..errors import PersistenceFailure
from ..kernel.bloom import Bloom
from .base import KnowledgeStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"title", "body", "resonance", "resonance_type", "wake_order"})


class BloomStore(KnowledgeStore):
    """
    Persistent storage for blooms.

    Attributes:
        storage_dir: Directory path for storing bloom data
        primary_index: Mapping of bloom IDs to index metadata
    """

    def __init__(self, storage_dir: str = "./data"):
        """
        Initialize the bloom store.

        Args:
            storage_dir: Directory path for storing bloom data
        """
        self.storage_dir = Path(storage_dir)
        self.blooms_dir = self.storage_dir / "blooms"
        self.index_file = self.storage_dir / "index.json"

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.blooms_dir.mkdir(parents=True, exist_ok=True)

        self._load_index()

    def _load_index(self) -> None:
        """Load or initialize the storage index."""
        self.primary_index: Dict[str, Dict[str, Any]] = {}

        if self.index_file.exists():
            try:
                with open(self.index_file, "r") as f:
                    self.primary_index = json.load(f).get("primary_index", {})
            except (json.JSONDecodeError, KeyError):
                logger.warning("Bloom index %s is corrupted, rebuilding", self.index_file)
                self._rebuild_index()

    def _rebuild_index(self) -> None:
        self.primary_index = {}
        for bloom_file in self.blooms_dir.glob("*.json"):
            try:
                with open(bloom_file, "r") as f:
                    bloom = Bloom.from_dict(json.load(f))
            except (json.JSONDecodeError, KeyError, ValueError):
                logger.warning("Skipping unreadable bloom file %s", bloom_file)
                continue
            self.primary_index[bloom.id] = self._index_entry(bloom)
        self._save_index()

    def _save_index(self) -> None:
        """Persist the index to disk."""
        data = {
            "primary_index": self.primary_index,
            "last_updated": datetime.utcnow().isoformat(),
        }
        with open(self.index_file, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _index_entry(bloom: Bloom) -> Dict[str, Any]:
        return {
            "file": f"{bloom.id}.json",
            "resonance": bloom.resonance,
            "wake_order": bloom.wake_order,
            "has_wake_phrase": bloom.has_wake_phrase,
        }

    def store(self, bloom: Bloom) -> bool:
        """
        Store a bloom and update the index.

        Returns:
            True if storage was successful, False otherwise
        """
        try:
            bloom_file = self.blooms_dir / f"{bloom.id}.json"
            with open(bloom_file, "w") as f:
                json.dump(bloom.to_dict(), f, indent=2)

            self.primary_index[bloom.id] = self._index_entry(bloom)
            self._save_index()
            return True

        except (IOError, OSError) as e:
            logger.error("Failed to store bloom %s: %s", bloom.id, e)
            return False

    def get(self, bloom_id: str) -> Optional[Bloom]:
        """
        Retrieve a bloom by ID.

        Returns:
            The bloom if found, None otherwise
        """
        if bloom_id not in self.primary_index:
            return None

        bloom_file = self.blooms_dir / f"{bloom_id}.json"
        if not bloom_file.exists():
            return None

        try:
            with open(bloom_file, "r") as f:
                return Bloom.from_dict(json.load(f))
        except (json.JSONDecodeError, KeyError, ValueError):
            logger.warning("Bloom file %s could not be parsed", bloom_file)
            return None

    def fetch_candidates(self, limit: int, activate: bool = True) -> List[Bloom]:
        """
        Return up to ``limit`` blooms, curated ones first then by resonance.

        Args:
            limit: Maximum number of blooms
            activate: Increment activation counts of the returned blooms

        Raises:
            ValueError: limit is below 1
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        def rank(item):
            bloom_id, entry = item
            wake_order = entry.get("wake_order")
            if wake_order is not None:
                return (0, wake_order, bloom_id)
            return (1, -entry.get("resonance", 0.0), bloom_id)

        chosen = sorted(self.primary_index.items(), key=rank)[:limit]
        blooms = [b for b in (self.get(bloom_id) for bloom_id, _ in chosen) if b is not None]

        if activate and blooms:
            self.update_activations(blooms)

        return blooms

    def update_activations(self, blooms: List[Bloom]) -> None:
        """Mark blooms as woken and persist them."""
        for bloom in blooms:
            bloom.mark_activated()
            self.store(bloom)
        logger.debug("Updated activations for %d blooms", len(blooms))

    def append_phrase(self, bloom_id: str, phrase: str) -> bool:
        """
        Append a wake phrase to a stored bloom.

        Returns:
            True if the phrase is stored on the bloom afterwards
        """
        bloom = self.get(bloom_id)
        if bloom is None:
            logger.warning("Cannot append phrase: bloom %s not found", bloom_id)
            return False

        if not bloom.add_wake_phrase(phrase):
            return phrase.strip() in bloom.wake_phrases

        return self.store(bloom)

    def update(self, bloom_id: str, **changes: Any) -> Optional[Bloom]:
        """
        Apply field changes to a stored bloom.

        Accepts the fields in EDITABLE_FIELDS plus ``add_phrase`` and
        ``remove_phrase``. A ``wake_order`` of None clears the explicit
        position so the bloom falls back to resonance ordering.

        Returns:
            The updated bloom, or None if it does not exist

        Raises:
            ValueError: unknown field or invalid value
            PersistenceFailure: the updated bloom could not be written
        """
        add_phrase = changes.pop("add_phrase", None)
        remove_phrase = changes.pop("remove_phrase", None)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        bloom = self.get(bloom_id)
        if bloom is None:
            return None

        data = bloom.to_dict()
        data.update(changes)
        # Rebuilding revalidates title, resonance and wake order
        updated = Bloom.from_dict(data)
        if remove_phrase is not None:
            updated.remove_wake_phrase(remove_phrase)
        if add_phrase is not None:
            updated.add_wake_phrase(add_phrase)
        updated.updated_at = datetime.utcnow()

        if not self.store(updated):
            raise PersistenceFailure(bloom_id, "write failed")
        logger.info("Updated bloom %s: %s", bloom_id, ", ".join(sorted(changes)) or "phrases")
        return updated

    def delete(self, bloom_id: str) -> bool:
        """
        Delete a bloom.

        Returns:
            True if deletion was successful, False otherwise
        """
        if bloom_id not in self.primary_index:
            return False

        del self.primary_index[bloom_id]

        bloom_file = self.blooms_dir / f"{bloom_id}.json"
        if bloom_file.exists():
            bloom_file.unlink()

        self._save_index()
        return True

    def count(self) -> int:
        """Return the total number of stored blooms."""
        return len(self.primary_index)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get storage statistics.

        Returns:
            Dictionary with storage statistics
        """
        with_phrase = sum(1 for e in self.primary_index.values() if e.get("has_wake_phrase"))
        return {
            "total_blooms": self.count(),
            "with_wake_phrase": with_phrase,
            "missing_wake_phrase": self.count() - with_phrase,
            "storage_dir": str(self.storage_dir),
        }

    def iter_all(self) -> Iterator[Bloom]:
        """Iterate over all stored blooms."""
        for bloom_id in list(self.primary_index):
            bloom = self.get(bloom_id)
            if bloom:
                yield bloom
