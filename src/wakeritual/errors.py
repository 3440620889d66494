"""
Error taxonomy for the wake ritual.

Only I/O-adjacent operations raise: reading operator input and writing to
the knowledge store. Classification and hinting are total functions.
"""


class WakeRitualError(Exception):
    """Base class for all wake ritual errors."""


class NonInteractiveInputError(WakeRitualError):
    """The input channel is not a live terminal; no bloom was processed."""

    def __init__(self, message: str = "engage mode requires an interactive terminal"):
        super().__init__(message)


class PersistenceFailure(WakeRitualError):
    """
    Writing a newly supplied wake phrase back to the store failed.

    Recoverable: the ritual continues with the phrase held in memory.
    """

    def __init__(self, bloom_id: str, reason: str = ""):
        self.bloom_id = bloom_id
        self.reason = reason
        message = f"Could not save wake phrase for bloom {bloom_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RitualCancelled(WakeRitualError):
    """The operator interrupted the ritual while it waited for input."""


class RitualError(WakeRitualError):
    """A ritual step was requested that the session state does not allow."""


class BloomNotFoundError(RitualError):
    """A bloom referenced by a ritual session is not in the store."""

    def __init__(self, bloom_id: str):
        self.bloom_id = bloom_id
        super().__init__(f"Bloom not found: {bloom_id}")


class InvalidTokenError(WakeRitualError):
    """A ritual session token is malformed or its signature does not match."""
