"""
Wake Ritual Engine

This module provides the recall ritual itself:
- Bloom ordering and phrase selection
- Progressive hints
- The per-bloom state machine
- Session aggregation
- Interactive and token-based ritual drivers
"""

from .hints import HintGenerator
from .resolver import PhraseResolver
from .selector import BloomSelector
from .session import SessionOutcome, SessionSummary
from .input_source import InputSource, TerminalInputSource
from .state_machine import BloomRitual, RitualAttempt, RitualState
from .engage import run_engage_ritual
from .token import WakeSessionToken
from .remote import begin_ritual, respond_ritual, skip_ritual

__all__ = [
    "HintGenerator",
    "PhraseResolver",
    "BloomSelector",
    "SessionOutcome",
    "SessionSummary",
    "InputSource",
    "TerminalInputSource",
    "BloomRitual",
    "RitualAttempt",
    "RitualState",
    "run_engage_ritual",
    "WakeSessionToken",
    "begin_ritual",
    "respond_ritual",
    "skip_ritual",
]
