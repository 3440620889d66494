"""
Session aggregation for the wake ritual.

Tallies exactly one terminal outcome per bloom that resolves and renders
the end-of-session report, including partial reports after cancellation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any


class SessionOutcome(str, Enum):
    """
    Terminal classification of one bloom.

    - REMEMBERED: resolved by an EXACT or CLOSE verdict
    - NEEDED_HELP: attempts exhausted, phrase revealed
    - SKIPPED: no phrase to test, or the operator declined to set one
    """
    REMEMBERED = "remembered"
    NEEDED_HELP = "needed_help"
    SKIPPED = "skipped"


BAR_WIDTH = 10
RULE = "─" * 65


@dataclass
class SessionSummary:
    """
    Outcome counts for one session.

    Attributes:
        counts: Mapping from outcome to number of blooms
        finalized: Whether the session has ended; a finalized summary is read-only
        cancelled: Whether the session ended by operator interrupt
    """
    counts: Dict[SessionOutcome, int] = field(
        default_factory=lambda: {outcome: 0 for outcome in SessionOutcome}
    )
    finalized: bool = False
    cancelled: bool = False

    def record(self, outcome: SessionOutcome) -> None:
        """Count one resolved bloom."""
        if self.finalized:
            raise RuntimeError("Cannot record outcomes on a finalized session summary")
        self.counts[outcome] += 1

    def finalize(self, cancelled: bool = False) -> "SessionSummary":
        """Freeze the summary at session end."""
        self.finalized = True
        self.cancelled = cancelled
        return self

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def remembered(self) -> int:
        return self.counts[SessionOutcome.REMEMBERED]

    @property
    def needed_help(self) -> int:
        return self.counts[SessionOutcome.NEEDED_HELP]

    @property
    def skipped(self) -> int:
        return self.counts[SessionOutcome.SKIPPED]

    def remembered_bar(self, width: int = BAR_WIDTH) -> str:
        """Proportional bar of remembered blooms over the total."""
        filled = (self.remembered * width) // self.total if self.total else 0
        return "●" * filled + "○" * (width - filled)

    def render(self) -> str:
        """Render the report shown at the end of a session."""
        total = self.total
        heading = "wake interrupted" if self.cancelled else "wake complete"
        lines = [
            RULE,
            f"  {heading}",
            "",
            f"  remembered:   {self.remembered}/{total}  {self.remembered_bar()}",
            f"  needed help:  {self.needed_help}/{total}",
            f"  skipped:      {self.skipped}/{total}",
            RULE,
        ]
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "total": self.total,
            "remembered": self.remembered,
            "needed_help": self.needed_help,
            "skipped": self.skipped,
            "cancelled": self.cancelled,
        }
