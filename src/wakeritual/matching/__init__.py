"""
Fuzzy matching of wake phrase attempts.

This module provides:
- Text normalization
- Edit distance and keyword overlap scoring
- Tiered verdict classification
"""

from .normalizer import normalize, tokenize
from .scorers import DEFAULT_STOP_WORDS, levenshtein, extract_keywords, keyword_overlap
from .classifier import MatchVerdict, MatchClassifier, classify

__all__ = [
    "normalize",
    "tokenize",
    "DEFAULT_STOP_WORDS",
    "levenshtein",
    "extract_keywords",
    "keyword_overlap",
    "MatchVerdict",
    "MatchClassifier",
    "classify",
]
