"""Text canonicalization shared by every comparison in the ritual."""

import re
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def normalize(text: Optional[str]) -> str:
    """
    Fold case, trim, and collapse internal whitespace runs to one space.

    Empty or missing input normalizes to the empty string.
    """
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text.casefold()).strip()


def tokenize(text: Optional[str]) -> list:
    """Split normalized text into whitespace-delimited tokens."""
    normalized = normalize(text)
    return normalized.split(" ") if normalized else []
