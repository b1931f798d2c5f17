"""
Share Core - Share Token Generation.

Tokens are opaque, URL-safe and random; uniqueness is enforced by the
database, and EntryStore asks for a fresh token on a collision.
"""

import secrets

TOKEN_BYTES = 24
MAX_ATTEMPTS = 5


class ShareTokenManager:
    """Generates share tokens and bounds the regeneration budget."""

    def __init__(self, token_bytes: int = TOKEN_BYTES, max_attempts: int = MAX_ATTEMPTS):
        self.token_bytes = token_bytes
        self.max_attempts = max_attempts

    def generate(self) -> str:
        """Returns a new token with token_bytes of entropy."""
        return secrets.token_urlsafe(self.token_bytes)

    @staticmethod
    def is_well_formed(token: str | None) -> bool:
        """Cheap check before a lookup; anything else cannot be a token."""
        if not token or len(token) > 128:
            return False
        return all(c.isalnum() or c in "-_" for c in token)
