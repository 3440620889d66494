"""
Wake Ritual - Core Data Structures

This module defines the Bloom, the knowledge entry that the recall ritual
operates on. A bloom carries its own wake phrases; the ritual engine reads
blooms and may ask the store to append a phrase, but never owns their
lifecycle.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any
import uuid


@dataclass
class Bloom:
    """
    A knowledge entry subject to the recall ritual.

    Attributes:
        id: Opaque unique identifier
        title: Short human-readable title
        body: Content revealed once the ritual for this bloom resolves
        resonance: Importance/strength in [0.0, 1.0], default ordering key
        wake_phrases: Ordered secret phrases used to verify recall
        wake_order: Optional explicit position overriding resonance ordering
        resonance_type: Optional label shown next to the resonance bar
        activation_count: How many times the bloom has been woken
        last_activated: When the bloom was last woken
    """
    title: str
    body: Optional[str] = None
    resonance: float = 0.5
    wake_phrases: List[str] = field(default_factory=list)
    wake_order: Optional[int] = None
    resonance_type: Optional[str] = None
    activation_count: int = 0
    last_activated: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: f"bl-{uuid.uuid4().hex[:8]}")

    def __post_init__(self):
        """Validate the bloom after initialization."""
        if not self.title or not self.title.strip():
            raise ValueError("Bloom must have a non-empty title")

        if not 0.0 <= self.resonance <= 1.0:
            raise ValueError("Resonance must be between 0.0 and 1.0")

        if self.wake_order is not None and not isinstance(self.wake_order, int):
            raise ValueError("Wake order must be an integer")

        # Blank phrases can never be recalled
        self.wake_phrases = [p.strip() for p in self.wake_phrases if p and p.strip()]

    def to_dict(self) -> Dict[str, Any]:
        """Convert bloom to dictionary representation for storage."""
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "resonance": self.resonance,
            "resonance_type": self.resonance_type,
            "wake_phrases": list(self.wake_phrases),
            "wake_order": self.wake_order,
            "activation_count": self.activation_count,
            "last_activated": self.last_activated.isoformat() if self.last_activated else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_summary(self) -> Dict[str, Any]:
        """
        Create a summary representation without the secret phrases.

        Used wherever a bloom is shown before its ritual resolves.
        """
        return {
            "id": self.id,
            "title": self.title,
            "resonance": self.resonance,
            "resonance_type": self.resonance_type,
            "wake_order": self.wake_order,
            "has_wake_phrase": self.has_wake_phrase,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bloom":
        """Create a bloom from its stored dictionary representation."""
        # Older entries carry a single phrase field
        phrases = list(data.get("wake_phrases") or [])
        if not phrases and data.get("wake_phrase"):
            phrases = [data["wake_phrase"]]

        return cls(
            id=data.get("id", f"bl-{uuid.uuid4().hex[:8]}"),
            title=data["title"],
            body=data.get("body"),
            resonance=float(data.get("resonance", 0.5)),
            resonance_type=data.get("resonance_type"),
            wake_phrases=phrases,
            wake_order=data.get("wake_order"),
            activation_count=data.get("activation_count", 0),
            last_activated=_parse_time(data.get("last_activated")),
            created_at=_parse_time(data.get("created_at")) or datetime.utcnow(),
            updated_at=_parse_time(data.get("updated_at")),
        )

    def add_wake_phrase(self, phrase: str) -> bool:
        """
        Append a wake phrase if it is not already present.

        Returns:
            True if the phrase was added
        """
        phrase = (phrase or "").strip()
        if not phrase or phrase in self.wake_phrases:
            return False
        self.wake_phrases.append(phrase)
        self.updated_at = datetime.utcnow()
        return True

    def remove_wake_phrase(self, phrase: str) -> bool:
        """Remove a wake phrase; returns False if it was not present."""
        phrase = (phrase or "").strip()
        if phrase not in self.wake_phrases:
            return False
        self.wake_phrases.remove(phrase)
        self.updated_at = datetime.utcnow()
        return True

    def mark_activated(self) -> None:
        """Record that the bloom has been woken."""
        self.activation_count += 1
        self.last_activated = datetime.utcnow()

    @property
    def has_wake_phrase(self) -> bool:
        """Check if this bloom has at least one wake phrase."""
        return len(self.wake_phrases) > 0

    @property
    def content(self) -> str:
        """Return the body, or an empty string when the bloom has none."""
        return self.body or ""

    def __repr__(self) -> str:
        return (
            f"Bloom(id={self.id}, title={self.title!r}, "
            f"resonance={self.resonance}, wake_order={self.wake_order})"
        )


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)
