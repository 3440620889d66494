"""
Interactive engage ritual.

Runs the recall ritual over a set of blooms, one bloom at a time, and
returns the session summary. The operator presses enter between blooms.
An interrupt while waiting for input, including that pause, ends the
session gracefully with a partial summary.
"""

import logging
import random
import sys
from typing import Iterable, Optional, TextIO

from ..config import RitualConfig, default_config
from ..errors import NonInteractiveInputError, RitualCancelled
from ..kernel.bloom import Bloom
from ..matching.classifier import MatchClassifier
from ..storage.base import KnowledgeStore
from .hints import HintGenerator
from .input_source import InputSource
from .resolver import PhraseResolver
from .selector import BloomSelector
from .session import RULE, SessionSummary
from .state_machine import BloomRitual

logger = logging.getLogger(__name__)

PAUSE_PROMPT = "  press enter to continue..."


def run_engage_ritual(
    blooms: Iterable[Bloom],
    store: Optional[KnowledgeStore],
    input_source: InputSource,
    config: Optional[RitualConfig] = None,
    output: Optional[TextIO] = None,
    rng: Optional[random.Random] = None,
) -> SessionSummary:
    """
    Run the interactive ritual over ``blooms``.

    Args:
        blooms: Candidate blooms, in any order
        store: Store receiving phrases entered in set-missing mode
        input_source: Operator input; must be interactive
        config: Ritual configuration (defaults if omitted)
        output: Stream for ritual text (stdout if omitted)
        rng: Random source for phrase selection

    Returns:
        The finalized SessionSummary, partial if the session was cancelled

    Raises:
        NonInteractiveInputError: input is not a live terminal
    """
    config = config or default_config
    output = output or sys.stdout

    if not input_source.is_interactive():
        raise NonInteractiveInputError()

    ordered = BloomSelector().order(blooms)
    summary = SessionSummary()

    if not ordered:
        print("nothing to wake", file=output)
        summary.finalize()
        print(summary.render(), file=output)
        return summary

    resolver = PhraseResolver(rng)
    classifier = MatchClassifier(**config.to_classifier_kwargs())
    hints = HintGenerator()
    total = len(ordered)

    print(RULE, file=output)
    print("  wake ritual - interactive engage", file=output)
    print(RULE, file=output)

    cancelled = False
    for position, bloom in enumerate(ordered, start=1):
        ritual = BloomRitual(
            bloom,
            input_source,
            resolver=resolver,
            classifier=classifier,
            hints=hints,
            store=store,
            set_missing=config.set_missing,
            max_attempts=config.max_attempts,
            output=output,
            position=position,
            total=total,
        )
        try:
            outcome = ritual.run()
        except (RitualCancelled, KeyboardInterrupt) as e:
            logger.info("Ritual cancelled at bloom %s (%d/%d): %s", bloom.id, position, total, e)
            cancelled = True
            break

        summary.record(outcome)
        logger.debug("Bloom %s resolved as %s", bloom.id, outcome.value)

        if position < total:
            try:
                input_source.read_line(PAUSE_PROMPT)
            except (KeyboardInterrupt, EOFError):
                logger.info("Ritual cancelled after bloom %s (%d/%d)", bloom.id, position, total)
                cancelled = True
                break
            print(file=output)

    summary.finalize(cancelled=cancelled)
    print(summary.render(), file=output)
    return summary
