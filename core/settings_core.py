"""
Settings Core - Collection Visibility.

The public flag is a singleton database row. Every read goes to the
database; nothing is cached in process memory.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from core.models import Settings
from errors import StorageError, ValidationError
from utils.db import (
    closing_connection,
    ensure_settings_row,
    fetch_settings,
    to_db_timestamp,
    upsert_settings,
)

logger = logging.getLogger(__name__)


class VisibilitySettings:
    """Reads and writes the singleton settings record."""

    def __init__(self, connection_factory=None, clock: Callable[[], datetime] = None):
        self._connect = connection_factory or closing_connection
        self._clock = clock or (lambda: datetime.now(UTC))

    def get(self) -> Settings:
        """
        Returns the current settings.

        Returns:
            Settings (is_public defaults to False)
        """
        try:
            with self._connect() as conn:
                row = fetch_settings(conn)
                if row is None:
                    ensure_settings_row(conn)
                    row = fetch_settings(conn)
        except Exception as e:
            logger.error(f"Failed to read settings: {e}", exc_info=True)
            raise StorageError(f"Failed to read settings: {e}") from e
        return Settings.from_row(row)

    def update(self, is_public: bool) -> Settings:
        """
        Atomically sets the public flag and refreshes updated_at.

        Args:
            is_public: New visibility

        Returns:
            The settings as stored
        """
        if not isinstance(is_public, bool):
            raise ValidationError("is_public must be a boolean")

        now = to_db_timestamp(self._clock())
        try:
            with self._connect() as conn:
                upsert_settings(conn, is_public, now)
                row = fetch_settings(conn)
        except Exception as e:
            logger.error(f"Failed to update settings: {e}", exc_info=True)
            raise StorageError(f"Failed to update settings: {e}") from e

        logger.info(f"Collection visibility set to {'public' if is_public else 'private'}")
        return Settings.from_row(row)

    def is_public(self) -> bool:
        return self.get().is_public
