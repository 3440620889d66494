"""
Wake Ritual Configuration Module

Provides configuration management for the ritual engine, the bloom store
and the HTTP API.
"""

import os
from dataclasses import dataclass, field
from typing import Optional, FrozenSet

from .matching.scorers import DEFAULT_STOP_WORDS


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


@dataclass
class RitualConfig:
    """
    Configuration for the wake ritual.

    Attributes:
        storage_dir: Directory for bloom storage
        limit: Maximum number of blooms processed per session
        activate: Whether processed blooms are marked as woken in the store
        set_missing: Prompt for a wake phrase when a bloom has none
        max_attempts: Attempts allowed per bloom before the phrase is revealed
        close_threshold: Maximum edit distance relative to the target length
            for a Close verdict
        partial_threshold: Minimum keyword overlap for a Partial verdict
        stop_words: Tokens ignored by the keyword overlap scorer
        session_secret: HMAC secret for remote ritual session tokens
        api_host: Host for the API server
        api_port: Port for the API server
        log_level: Logging level name
    """
    storage_dir: str = "./data"
    limit: int = 20
    activate: bool = True
    set_missing: bool = False
    max_attempts: int = 3
    close_threshold: float = 0.20
    partial_threshold: float = 0.50
    stop_words: FrozenSet[str] = field(default_factory=lambda: DEFAULT_STOP_WORDS)
    session_secret: str = "wake-ritual-dev-secret"
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    log_level: str = "info"

    def __post_init__(self):
        if self.limit < 1:
            raise ValueError("limit must be at least 1")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0.0 <= self.close_threshold <= 1.0:
            raise ValueError("close_threshold must be between 0.0 and 1.0")
        if not 0.0 <= self.partial_threshold <= 1.0:
            raise ValueError("partial_threshold must be between 0.0 and 1.0")
        self.stop_words = frozenset(w.strip().casefold() for w in self.stop_words if w.strip())

    @classmethod
    def from_env(cls) -> "RitualConfig":
        """
        Create configuration from environment variables.

        Environment variables:
        - WAKE_STORAGE_DIR: Storage directory
        - WAKE_LIMIT: Maximum blooms per session
        - WAKE_ACTIVATE: Mark processed blooms as woken
        - WAKE_SET_MISSING: Prompt for missing wake phrases
        - WAKE_MAX_ATTEMPTS: Attempts per bloom
        - WAKE_CLOSE_THRESHOLD: Relative edit distance for Close
        - WAKE_PARTIAL_THRESHOLD: Keyword overlap for Partial
        - WAKE_STOP_WORDS: Comma separated stop words (replaces the default list)
        - WAKE_SESSION_SECRET: Secret used to sign session tokens
        - WAKE_API_HOST / WAKE_API_PORT: API server binding
        - WAKE_LOG_LEVEL: Logging level
        """
        stop_words: Optional[str] = os.getenv("WAKE_STOP_WORDS")

        return cls(
            storage_dir=os.getenv("WAKE_STORAGE_DIR", "./data"),
            limit=int(os.getenv("WAKE_LIMIT", "20")),
            activate=_env_flag("WAKE_ACTIVATE", "true"),
            set_missing=_env_flag("WAKE_SET_MISSING", "false"),
            max_attempts=int(os.getenv("WAKE_MAX_ATTEMPTS", "3")),
            close_threshold=float(os.getenv("WAKE_CLOSE_THRESHOLD", "0.20")),
            partial_threshold=float(os.getenv("WAKE_PARTIAL_THRESHOLD", "0.50")),
            stop_words=frozenset(stop_words.split(",")) if stop_words else DEFAULT_STOP_WORDS,
            session_secret=os.getenv("WAKE_SESSION_SECRET", "wake-ritual-dev-secret"),
            api_host=os.getenv("WAKE_API_HOST", "127.0.0.1"),
            api_port=int(os.getenv("WAKE_API_PORT", "8000")),
            log_level=os.getenv("WAKE_LOG_LEVEL", "info"),
        )

    def to_classifier_kwargs(self) -> dict:
        """
        Convert configuration to keyword arguments for MatchClassifier.

        Returns:
            Dictionary of classifier constructor arguments
        """
        return {
            "close_threshold": self.close_threshold,
            "partial_threshold": self.partial_threshold,
            "stop_words": self.stop_words,
        }


# Default configuration instance
default_config = RitualConfig()
