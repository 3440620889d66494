"""
Token-based remote ritual.

A stateless variant of the engage ritual for clients that cannot hold an
interactive terminal (agents, HTTP callers). Each call verifies the signed
session token, advances it, and returns a new one alongside the next prompt.
"""

import logging
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from ..errors import BloomNotFoundError, RitualError
from ..kernel.bloom import Bloom
from ..matching.classifier import MatchClassifier
from ..storage.base import KnowledgeStore
from .hints import HintGenerator
from .resolver import PhraseResolver
from .selector import BloomSelector
from .session import SessionOutcome
from .state_machine import MAX_ATTEMPTS
from .token import WakeSessionToken

logger = logging.getLogger(__name__)


class BloomPrompt(BaseModel):
    """What the client sees before recalling a bloom's phrase."""
    id: str
    title: str
    resonance: float
    resonance_type: Optional[str] = None
    has_wake_phrase: bool

    @classmethod
    def from_bloom(cls, bloom: Bloom) -> "BloomPrompt":
        return cls(
            id=bloom.id,
            title=bloom.title,
            resonance=bloom.resonance,
            resonance_type=bloom.resonance_type,
            has_wake_phrase=bloom.has_wake_phrase,
        )


class BloomFull(BaseModel):
    """A resolved bloom with its content revealed."""
    id: str
    title: str
    body: Optional[str] = None
    resonance: float
    matched_phrase: Optional[str] = None

    @classmethod
    def from_bloom(cls, bloom: Bloom, matched_phrase: Optional[str] = None) -> "BloomFull":
        return cls(
            id=bloom.id,
            title=bloom.title,
            body=bloom.body,
            resonance=bloom.resonance,
            matched_phrase=matched_phrase,
        )


class Progress(BaseModel):
    current: int
    total: int
    remembered: Optional[int] = None
    needed_help: Optional[int] = None
    skipped: Optional[int] = None


class RitualSummary(BaseModel):
    total: int
    remembered: int
    needed_help: int
    skipped: int


class WakeBeginResponse(BaseModel):
    status: str = "ritual_started"
    session: str
    prompt: BloomPrompt
    progress: Progress


class WakeRespondResponse(BaseModel):
    status: str
    match_type: Optional[str] = None
    bloom: Optional[BloomFull] = None
    attempt: Optional[int] = None
    max_attempts: Optional[int] = None
    hint: Optional[str] = None
    prompt: Optional[BloomPrompt] = None
    session: str
    next: Optional[BloomPrompt] = None
    progress: Optional[Progress] = None
    summary: Optional[RitualSummary] = None


class WakeSkipResponse(BaseModel):
    status: str = "skipped"
    bloom: BloomFull
    session: str
    next: Optional[BloomPrompt] = None
    progress: Progress
    summary: Optional[RitualSummary] = None


class WakeErrorResponse(BaseModel):
    status: str = "error"
    error: str
    message: str
    expected_id: Optional[str] = None


def begin_ritual(
    blooms: Iterable[Bloom],
    secret: str,
    resolver: Optional[PhraseResolver] = None,
) -> WakeBeginResponse:
    """
    Start a remote ritual over ``blooms``.

    Raises:
        RitualError: there are no blooms to wake
    """
    ordered = BloomSelector().order(blooms)
    if not ordered:
        raise RitualError("No blooms to wake")

    resolver = resolver or PhraseResolver()
    token = WakeSessionToken(
        bloom_ids=[b.id for b in ordered],
        phrase_indices=[resolver.select_index(b) for b in ordered],
    )
    logger.info("Started remote ritual %s with %d blooms", token.session_id, token.total())

    return WakeBeginResponse(
        session=token.sign(secret),
        prompt=BloomPrompt.from_bloom(ordered[0]),
        progress=Progress(current=1, total=token.total()),
    )


def respond_ritual(
    store: KnowledgeStore,
    bloom_id: str,
    phrase: str,
    session_token: str,
    secret: str,
    classifier: Optional[MatchClassifier] = None,
    hints: Optional[HintGenerator] = None,
    max_attempts: int = MAX_ATTEMPTS,
):
    """
    Submit a recall attempt for the current bloom.

    Returns:
        WakeRespondResponse, or WakeErrorResponse when ``bloom_id`` is not
        the bloom the session expects

    Raises:
        InvalidTokenError: the session token does not verify
        RitualError: the ritual is complete or the bloom has no phrase
    """
    token = WakeSessionToken.verify(session_token, secret)
    classifier = classifier or MatchClassifier()
    hints = hints or HintGenerator()

    mismatch = _check_current(token, bloom_id)
    if mismatch is not None:
        return mismatch

    bloom = _fetch(store, bloom_id)
    phrase_index = token.current_phrase_index()
    if phrase_index is None or phrase_index >= len(bloom.wake_phrases):
        raise RitualError("This bloom has no wake phrase - use skip instead")
    wake_phrase = bloom.wake_phrases[phrase_index]

    verdict = classifier.classify(phrase, wake_phrase)

    if verdict.is_recalled:
        token.advance(SessionOutcome.REMEMBERED)
        return WakeRespondResponse(
            status="remembered",
            match_type=verdict.value,
            bloom=BloomFull.from_bloom(bloom, wake_phrase),
            session=token.sign(secret),
            **_next_and_progress(store, token),
        )

    attempt = token.increment_attempt()
    if attempt >= max_attempts:
        token.advance(SessionOutcome.NEEDED_HELP)
        return WakeRespondResponse(
            status="revealed",
            bloom=BloomFull.from_bloom(bloom, wake_phrase),
            session=token.sign(secret),
            **_next_and_progress(store, token),
        )

    next_attempt = min(attempt + 1, HintGenerator.LAST_HINT_ATTEMPT)
    return WakeRespondResponse(
        status="incorrect",
        match_type=verdict.value,
        attempt=attempt,
        max_attempts=max_attempts,
        hint=hints.hint(wake_phrase, next_attempt),
        prompt=BloomPrompt.from_bloom(bloom),
        session=token.sign(secret),
    )


def skip_ritual(store: KnowledgeStore, bloom_id: str, session_token: str, secret: str):
    """
    Skip the current bloom, revealing its content.

    Returns:
        WakeSkipResponse, or WakeErrorResponse on a bloom id mismatch
    """
    token = WakeSessionToken.verify(session_token, secret)

    mismatch = _check_current(token, bloom_id)
    if mismatch is not None:
        return mismatch

    bloom = _fetch(store, bloom_id)
    token.advance(SessionOutcome.SKIPPED)

    return WakeSkipResponse(
        bloom=BloomFull.from_bloom(bloom),
        session=token.sign(secret),
        **_next_and_progress(store, token),
    )


def _check_current(token: WakeSessionToken, bloom_id: str) -> Optional[WakeErrorResponse]:
    expected_id = token.current_bloom_id()
    if expected_id is None:
        raise RitualError("Ritual already complete")
    if bloom_id != expected_id:
        return WakeErrorResponse(
            error="invalid_bloom_id",
            message=f"Expected bloom {expected_id}, got {bloom_id}",
            expected_id=expected_id,
        )
    return None


def _fetch(store: KnowledgeStore, bloom_id: str) -> Bloom:
    bloom = store.get(bloom_id)
    if bloom is None:
        raise BloomNotFoundError(bloom_id)
    return bloom


def _next_and_progress(store: KnowledgeStore, token: WakeSessionToken) -> Dict[str, object]:
    progress = Progress(
        current=token.current_position(),
        total=token.total(),
        remembered=token.remembered_count,
        needed_help=token.needed_help_count,
        skipped=token.skipped_count,
    )

    if token.is_complete():
        summary = RitualSummary(
            total=token.total(),
            remembered=token.remembered_count,
            needed_help=token.needed_help_count,
            skipped=token.skipped_count,
        )
        return {"next": None, "progress": progress, "summary": summary}

    next_bloom = _fetch(store, token.current_bloom_id())
    return {"next": BloomPrompt.from_bloom(next_bloom), "progress": progress, "summary": None}
