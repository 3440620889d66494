"""
Match Classifier for wake phrase attempts.

Tiers evidence of recall from strict equality, through structural
similarity (typos), to keyword similarity (rewordings). First rule wins:

1. normalized strings equal                        -> EXACT
2. edit distance / target length <= close threshold -> CLOSE
3. keyword overlap >= partial threshold             -> PARTIAL
4. otherwise                                        -> WRONG
"""

from enum import Enum
from typing import Iterable, Optional

from .normalizer import normalize
from .scorers import DEFAULT_STOP_WORDS, keyword_overlap, levenshtein


class MatchVerdict(str, Enum):
    """Outcome of one comparison, ordered from strongest to weakest."""
    EXACT = "exact"
    CLOSE = "close"
    PARTIAL = "partial"
    WRONG = "wrong"

    @property
    def is_recalled(self) -> bool:
        """EXACT and CLOSE both count as remembering the phrase."""
        return self in (MatchVerdict.EXACT, MatchVerdict.CLOSE)


class MatchClassifier:
    """
    Classifies an attempt against a target wake phrase.

    Attributes:
        close_threshold: Maximum edit distance relative to the normalized
            target length for a CLOSE verdict
        partial_threshold: Minimum keyword overlap ratio for PARTIAL
        stop_words: Tokens ignored by the keyword overlap scorer
    """

    DEFAULT_CLOSE_THRESHOLD = 0.20
    DEFAULT_PARTIAL_THRESHOLD = 0.50

    def __init__(
        self,
        close_threshold: float = DEFAULT_CLOSE_THRESHOLD,
        partial_threshold: float = DEFAULT_PARTIAL_THRESHOLD,
        stop_words: Optional[Iterable[str]] = None,
    ):
        self.close_threshold = close_threshold
        self.partial_threshold = partial_threshold
        self.stop_words = frozenset(stop_words) if stop_words is not None else DEFAULT_STOP_WORDS

    def classify(self, attempt: str, target: str) -> MatchVerdict:
        """Return the verdict for ``attempt`` against ``target``."""
        normalized_attempt = normalize(attempt)
        normalized_target = normalize(target)

        if normalized_attempt == normalized_target:
            return MatchVerdict.EXACT

        if not normalized_attempt:
            return MatchVerdict.WRONG

        if self.edit_ratio(normalized_attempt, normalized_target) <= self.close_threshold:
            return MatchVerdict.CLOSE

        if keyword_overlap(attempt, target, self.stop_words) >= self.partial_threshold:
            return MatchVerdict.PARTIAL

        return MatchVerdict.WRONG

    @staticmethod
    def edit_ratio(normalized_attempt: str, normalized_target: str) -> float:
        """Edit distance relative to the target length."""
        distance = levenshtein(normalized_attempt, normalized_target)
        return distance / max(len(normalized_target), 1)


_default_classifier = MatchClassifier()


def classify(attempt: str, target: str) -> MatchVerdict:
    """Classify with the default thresholds and stop words."""
    return _default_classifier.classify(attempt, target)
