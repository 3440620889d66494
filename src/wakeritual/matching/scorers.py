"""
Scorers for the match classifier.

Two independent measures of how close an attempt is to a wake phrase:
- Levenshtein edit distance between normalized strings (structural)
- Keyword overlap after stop-word removal (semantic)
"""

from typing import FrozenSet, Iterable, Optional, Set

from .normalizer import normalize, tokenize


# Articles, common prepositions, copulas and pronouns.
DEFAULT_STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the",
    "at", "by", "for", "from", "in", "into", "of", "on", "to", "with",
    "and", "or",
    "am", "is", "are", "was", "were", "be", "been", "being",
    "i", "you", "we", "it",
})


def levenshtein(a: str, b: str) -> int:
    """
    Compute the Levenshtein distance between two strings.

    The minimum number of single-character insertions, deletions and
    substitutions turning ``a`` into ``b``. Callers pass normalized text.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Keep the shorter string on the inner loop
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current

    return previous[-1]


def extract_keywords(text: str, stop_words: Optional[Iterable[str]] = None) -> Set[str]:
    """Return the set of non-stop-word tokens of the normalized text."""
    stops = DEFAULT_STOP_WORDS if stop_words is None else stop_words
    return {token for token in tokenize(text) if token not in stops}


def keyword_overlap(
    attempt: str,
    target: str,
    stop_words: Optional[Iterable[str]] = None,
) -> float:
    """
    Fraction of the target's keywords that also appear in the attempt.

    A target made entirely of stop words has no keywords to compare; any
    non-empty attempt then scores 1.0 and an empty one 0.0.
    """
    target_keywords = extract_keywords(target, stop_words)
    if not target_keywords:
        return 1.0 if normalize(attempt) else 0.0

    attempt_keywords = extract_keywords(attempt, stop_words)
    shared = attempt_keywords & target_keywords
    return len(shared) / max(len(target_keywords), 1)
