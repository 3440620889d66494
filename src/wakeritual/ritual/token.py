"""
Signed session tokens for the remote ritual.

The remote ritual keeps no server-side state: the ordered bloom ids, the
phrase chosen for each bloom, the attempt counter and the outcome counts
travel with the client as ``base64(payload).base64(hmac_sha256(payload))``.
"""

import base64
import binascii
import hashlib
import hmac
import logging
import time
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..errors import InvalidTokenError
from .session import SessionOutcome

logger = logging.getLogger(__name__)


class WakeSessionToken(BaseModel):
    """Ritual progress carried by the client between requests."""
    session_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    bloom_ids: List[str]
    phrase_indices: List[Optional[int]]
    current_index: int = 0
    attempts_on_current: int = 0
    remembered_count: int = 0
    needed_help_count: int = 0
    skipped_count: int = 0
    created_at: int = Field(default_factory=lambda: int(time.time()))

    def current_bloom_id(self) -> Optional[str]:
        if self.is_complete():
            return None
        return self.bloom_ids[self.current_index]

    def current_phrase_index(self) -> Optional[int]:
        if self.is_complete():
            return None
        return self.phrase_indices[self.current_index]

    def total(self) -> int:
        return len(self.bloom_ids)

    def current_position(self) -> int:
        """Current position, 1-indexed for display."""
        return self.current_index + 1

    def is_complete(self) -> bool:
        return self.current_index >= len(self.bloom_ids)

    def increment_attempt(self) -> int:
        self.attempts_on_current += 1
        return self.attempts_on_current

    def advance(self, outcome: SessionOutcome) -> None:
        """Record the current bloom's outcome and move to the next bloom."""
        if outcome is SessionOutcome.REMEMBERED:
            self.remembered_count += 1
        elif outcome is SessionOutcome.NEEDED_HELP:
            self.needed_help_count += 1
        else:
            self.skipped_count += 1
        self.current_index += 1
        self.attempts_on_current = 0

    def sign(self, secret: str) -> str:
        """Serialize and sign the token."""
        payload = self.model_dump_json().encode("utf-8")
        signature = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
        return (
            f"{base64.b64encode(payload).decode('ascii')}."
            f"{base64.b64encode(signature).decode('ascii')}"
        )

    @classmethod
    def verify(cls, token: str, secret: str) -> "WakeSessionToken":
        """
        Verify and decode a signed token.

        Raises:
            InvalidTokenError: malformed token or signature mismatch
        """
        parts = token.split(".")
        if len(parts) != 2:
            raise InvalidTokenError("Invalid token format")

        try:
            payload = base64.b64decode(parts[0], validate=True)
            signature = base64.b64decode(parts[1], validate=True)
        except (binascii.Error, ValueError):
            raise InvalidTokenError("Invalid base64 in token")

        expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()
        if not hmac.compare_digest(expected, signature):
            logger.warning("Rejected ritual token with a bad signature")
            raise InvalidTokenError("Token signature mismatch")

        try:
            return cls.model_validate_json(payload)
        except ValidationError as e:
            raise InvalidTokenError(f"Invalid token payload: {e.error_count()} errors")
