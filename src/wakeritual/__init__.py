"""
Wake Ritual - Recall Ritual over a Personal Knowledge Store

For each selected bloom the operator reproduces a wake phrase from memory;
attempts are fuzzy-matched, progressively hinted, and the bloom's content
is revealed once the ritual for it resolves.
"""

__version__ = "0.1.0"

from .config import RitualConfig
from .errors import (
    WakeRitualError,
    NonInteractiveInputError,
    PersistenceFailure,
    RitualCancelled,
    RitualError,
    BloomNotFoundError,
    InvalidTokenError,
)
from .kernel.bloom import Bloom
from .matching import MatchVerdict, MatchClassifier, classify, normalize, levenshtein
from .storage import KnowledgeStore, BloomStore
from .ritual import (
    BloomSelector,
    PhraseResolver,
    HintGenerator,
    BloomRitual,
    RitualState,
    SessionOutcome,
    SessionSummary,
    InputSource,
    TerminalInputSource,
    run_engage_ritual,
)

__all__ = [
    "RitualConfig",
    "WakeRitualError",
    "NonInteractiveInputError",
    "PersistenceFailure",
    "RitualCancelled",
    "RitualError",
    "BloomNotFoundError",
    "InvalidTokenError",
    "Bloom",
    "MatchVerdict",
    "MatchClassifier",
    "classify",
    "normalize",
    "levenshtein",
    "KnowledgeStore",
    "BloomStore",
    "BloomSelector",
    "PhraseResolver",
    "HintGenerator",
    "BloomRitual",
    "RitualState",
    "SessionOutcome",
    "SessionSummary",
    "InputSource",
    "TerminalInputSource",
    "run_engage_ritual",
]
