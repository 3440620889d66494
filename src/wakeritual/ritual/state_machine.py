"""
Ritual State Machine

Drives a single bloom through the recall ritual:

    PRESENTED -> WAITING_FOR_INPUT -> CLASSIFIED -> RESOLVED
                        ^                  |
                        +---- hint --------+

Each state has one handler returning the next state. The machine always
ends in RESOLVED with exactly one SessionOutcome, unless the operator
interrupts the input wait, in which case ``run`` raises RitualCancelled and
no outcome is produced.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, TextIO

from ..errors import PersistenceFailure, RitualCancelled
from ..kernel.bloom import Bloom
from ..matching.classifier import MatchClassifier, MatchVerdict
from ..storage.base import KnowledgeStore
from .display import bloom_content, bloom_header
from .hints import HintGenerator
from .input_source import InputSource
from .resolver import PhraseResolver
from .session import SessionOutcome

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3

VERDICT_MESSAGES = {
    MatchVerdict.EXACT: "✓ remembered",
    MatchVerdict.CLOSE: "✓ close enough",
    MatchVerdict.PARTIAL: "...almost. try again",
    MatchVerdict.WRONG: "...not quite",
}


class RitualState(Enum):
    """States of the per-bloom ritual."""
    PRESENTED = "presented"
    WAITING_FOR_INPUT = "waiting_for_input"
    CLASSIFIED = "classified"
    RESOLVED = "resolved"


@dataclass
class RitualAttempt:
    """
    Transient state of one bloom's traversal.

    Attributes:
        bloom: The bloom being woken
        attempts: Failed attempts so far
        history: Verdict for every attempt, in order
        target: Phrase resolved once for this bloom
        outcome: Terminal outcome once RESOLVED
        phrase_revealed: Whether the target was shown to the operator
    """
    bloom: Bloom
    attempts: int = 0
    history: List[MatchVerdict] = field(default_factory=list)
    target: Optional[str] = None
    outcome: Optional[SessionOutcome] = None
    phrase_revealed: bool = False


class BloomRitual:
    """
    One instance per bloom.

    Attributes:
        attempt: The RitualAttempt tracking this bloom
        state: Current RitualState
    """

    def __init__(
        self,
        bloom: Bloom,
        input_source: InputSource,
        resolver: Optional[PhraseResolver] = None,
        classifier: Optional[MatchClassifier] = None,
        hints: Optional[HintGenerator] = None,
        store: Optional[KnowledgeStore] = None,
        set_missing: bool = False,
        max_attempts: int = MAX_ATTEMPTS,
        output: Optional[TextIO] = None,
        position: Optional[int] = None,
        total: Optional[int] = None,
    ):
        self.input_source = input_source
        self.resolver = resolver or PhraseResolver()
        self.classifier = classifier or MatchClassifier()
        self.hints = hints or HintGenerator()
        self.store = store
        self.set_missing = set_missing
        self.max_attempts = max_attempts
        self.output = output or sys.stdout
        self.position = position
        self.total = total

        self.attempt = RitualAttempt(bloom=bloom)
        self.state = RitualState.PRESENTED
        self._handlers: Dict[RitualState, Callable[[], RitualState]] = {
            RitualState.PRESENTED: self._on_presented,
            RitualState.WAITING_FOR_INPUT: self._on_waiting_for_input,
            RitualState.CLASSIFIED: self._on_classified,
        }

    def run(self) -> SessionOutcome:
        """
        Drive the bloom to RESOLVED.

        Returns:
            The bloom's SessionOutcome

        Raises:
            RitualCancelled: the operator interrupted an input wait
        """
        while self.state is not RitualState.RESOLVED:
            self.state = self._handlers[self.state]()
        return self.attempt.outcome

    # State handlers

    def _on_presented(self) -> RitualState:
        bloom = self.attempt.bloom
        self._say(bloom_header(bloom, self.position, self.total))

        self.attempt.target = self.resolver.resolve(bloom)
        if self.attempt.target is not None:
            return RitualState.WAITING_FOR_INPUT

        if not self.set_missing:
            self._say("  (no wake phrase set - showing directly)")
            return self._resolve(SessionOutcome.SKIPPED)

        phrase = self._read("  no wake phrase set.\n  enter wake phrase (or blank to skip): ").strip()
        if not phrase:
            self._say("  (skipped)")
            return self._resolve(SessionOutcome.SKIPPED)

        self._persist_phrase(phrase)
        bloom.add_wake_phrase(phrase)
        self.attempt.target = phrase
        return RitualState.WAITING_FOR_INPUT

    def _on_waiting_for_input(self) -> RitualState:
        line = self._read("  > ")
        verdict = self.classifier.classify(line, self.attempt.target)
        self.attempt.history.append(verdict)
        return RitualState.CLASSIFIED

    def _on_classified(self) -> RitualState:
        verdict = self.attempt.history[-1]
        self._say(f"  {VERDICT_MESSAGES[verdict]}")

        if verdict.is_recalled:
            return self._resolve(SessionOutcome.REMEMBERED)

        self.attempt.attempts += 1
        if self.attempt.attempts >= self.max_attempts:
            self._say("  ...the memory stirs anyway")
            self._say(f"  wake phrase: {self.attempt.target}")
            self.attempt.phrase_revealed = True
            return self._resolve(SessionOutcome.NEEDED_HELP)

        next_attempt = min(self.attempt.attempts + 1, HintGenerator.LAST_HINT_ATTEMPT)
        self._say(f"  hint: {self.hints.hint(self.attempt.target, next_attempt)}")
        return RitualState.WAITING_FOR_INPUT

    # Helpers

    def _resolve(self, outcome: SessionOutcome) -> RitualState:
        self.attempt.outcome = outcome
        self._say(bloom_content(self.attempt.bloom))
        return RitualState.RESOLVED

    def _read(self, prompt: str) -> str:
        try:
            return self.input_source.read_line(prompt)
        except (KeyboardInterrupt, EOFError) as e:
            raise RitualCancelled(
                f"ritual interrupted while waking bloom {self.attempt.bloom.id}"
            ) from e

    def _persist_phrase(self, phrase: str) -> None:
        bloom_id = self.attempt.bloom.id
        try:
            if self.store is None:
                raise PersistenceFailure(bloom_id, "no knowledge store configured")
            if not self.store.append_phrase(bloom_id, phrase):
                raise PersistenceFailure(bloom_id, "store rejected the write")
        except (PersistenceFailure, OSError) as e:
            logger.warning("Wake phrase kept in memory only: %s", e)
            self._say("  wake phrase not saved (kept for this session)")
            return
        self._say("  wake phrase saved")

    def _say(self, text: str) -> None:
        print(text, file=self.output)
