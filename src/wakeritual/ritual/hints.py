"""
Progressive hints for wake phrase attempts.

Attempt 1 gets no hint. Attempt 2 reveals the first word, attempt 3 keeps
the first and last words and blanks every word in between.
"""

from ..matching.normalizer import tokenize

ELLIPSIS = "…"
BLANK = "▯"
FALLBACK_HINT = f"think carefully{ELLIPSIS}"


class HintGenerator:
    """Derives a hint from a target phrase and the upcoming attempt number."""

    FIRST_HINT_ATTEMPT = 2
    LAST_HINT_ATTEMPT = 3

    def hint(self, target: str, attempt_number: int) -> str:
        """
        Build the hint shown before ``attempt_number``.

        Args:
            target: The resolved wake phrase
            attempt_number: 2 or 3

        Returns:
            Hint text; never raises for any target string
        """
        if attempt_number not in (self.FIRST_HINT_ATTEMPT, self.LAST_HINT_ATTEMPT):
            raise ValueError(f"No hint for attempt {attempt_number}; hints cover attempts 2 and 3")

        tokens = tokenize(target)
        if not tokens:
            return FALLBACK_HINT

        if attempt_number == self.LAST_HINT_ATTEMPT and len(tokens) > 2:
            return self._blank_interior(tokens)

        return self._first_word(tokens)

    @staticmethod
    def _first_word(tokens: list) -> str:
        return f"starts with '{tokens[0]}{ELLIPSIS}'"

    @staticmethod
    def _blank_interior(tokens: list) -> str:
        interior = [BLANK] * (len(tokens) - 2)
        return " ".join([tokens[0], *interior, tokens[-1]])


_default_generator = HintGenerator()


def hint(target: str, attempt_number: int) -> str:
    """Module-level shortcut for HintGenerator().hint."""
    return _default_generator.hint(target, attempt_number)
