"""
Entries Core - Entry Store and Lifecycle.

All entry state transitions happen here.

Lifecycle:
    Active --soft_delete--> Deleted(now)
    Deleted --restore (age <= TTL)--> Active
    Deleted --restore (age > TTL)--> Deleted, raises Expired
    Deleted --purge sweep (age > TTL)--> Purged (row gone, see core.purge_core)

Share sub-state (orthogonal):
    Unshared --enable--> Shared(token) --disable--> Unshared
    A token only resolves while the entry is Active.

Races against the purge sweeper are settled by conditional statements on
deleted_at, never by locks.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta

from core.models import Entry
from core.settings_core import VisibilitySettings
from core.share_core import ShareTokenManager
from errors import Conflict, Expired, NotFound, NotPublic, StorageError
from pipeline.interfaces import BlobRef, ClassificationResult
from utils.db import (
    clear_entry_deleted,
    clear_share_token,
    closing_connection,
    fetch_active_entry_by_share_token,
    fetch_entries,
    fetch_entry,
    insert_entry,
    mark_entry_deleted,
    set_share_token_if_absent,
    to_db_timestamp,
)

logger = logging.getLogger(__name__)

RESTORE_TTL = timedelta(hours=1)


def utc_now() -> datetime:
    return datetime.now(UTC)


class EntryStore:
    """Persistence and query layer for entries."""

    def __init__(
        self,
        connection_factory=None,
        token_manager: ShareTokenManager = None,
        visibility: VisibilitySettings = None,
        clock: Callable[[], datetime] = None,
        ttl: timedelta = RESTORE_TTL,
    ):
        self._connect = connection_factory or closing_connection
        self._tokens = token_manager or ShareTokenManager()
        self._clock = clock or utc_now
        self._visibility = visibility or VisibilitySettings(
            connection_factory=self._connect, clock=self._clock
        )
        self.ttl = ttl

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, classification: ClassificationResult, blob_ref: BlobRef) -> Entry:
        """
        Inserts a new entry in one statement. Last step of ingestion.

        Args:
            classification: Normalized provider result
            blob_ref: Already-stored image blob (carries the entry id)

        Returns:
            The stored Entry
        """
        row = {
            "id": blob_ref.entry_id,
            "created_at": to_db_timestamp(self._clock()),
            "image_path": blob_ref.path,
            "image_mime": blob_ref.mime,
            "image_width": blob_ref.width,
            "image_height": blob_ref.height,
            "label": classification.label,
            "description": classification.description,
            "confidence": classification.confidence,
            "tags": json.dumps(list(classification.tags)),
            "raw_json": (
                json.dumps(classification.raw_json)
                if classification.raw_json is not None
                else None
            ),
        }
        with self._storage("create entry"):
            with self._connect() as conn:
                insert_entry(conn, row)
                stored = fetch_entry(conn, row["id"])

        logger.info(f"Created entry {row['id']} ('{classification.label}')")
        return Entry.from_row(stored)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list(self, include_deleted: bool = False) -> list[Entry]:
        """Entries newest first; soft-deleted ones only on internal request."""
        with self._storage("list entries"):
            with self._connect() as conn:
                rows = fetch_entries(conn, include_deleted=include_deleted)
        return [Entry.from_row(row) for row in rows]

    def get(self, entry_id: str) -> Entry:
        """Returns an entry whether or not it is soft-deleted."""
        with self._storage("get entry"):
            with self._connect() as conn:
                row = fetch_entry(conn, entry_id)
        if row is None:
            raise NotFound("Entry not found")
        return Entry.from_row(row)

    def get_by_share_token(self, token: str) -> Entry:
        """Resolves a share token to an active entry."""
        if not ShareTokenManager.is_well_formed(token):
            raise NotFound("Share link not found")
        with self._storage("resolve share token"):
            with self._connect() as conn:
                row = fetch_active_entry_by_share_token(conn, token)
        if row is None:
            raise NotFound("Share link not found")
        return Entry.from_row(row)

    def list_public(self) -> list[Entry]:
        """Active entries, only while the collection is public."""
        if not self._visibility.is_public():
            raise NotPublic()
        return self.list()

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------

    def soft_delete(self, entry_id: str) -> Entry:
        """
        Marks an entry deleted. Repeating the call on a deleted entry is a
        no-op that returns it unchanged.
        """
        now = to_db_timestamp(self._clock())
        with self._storage("soft-delete entry"):
            with self._connect() as conn:
                changed = mark_entry_deleted(conn, entry_id, now)
                row = fetch_entry(conn, entry_id)

        if row is None:
            raise NotFound("Entry not found")
        if changed:
            logger.info(f"Entry {entry_id} moved to trash")
        return Entry.from_row(row)

    def restore(self, entry_id: str) -> Entry:
        """
        Clears deleted_at while the entry is inside the restore window.

        Raises:
            NotFound: Unknown id (or purged meanwhile)
            Conflict: Entry is not deleted
            Expired: Grace period is over
        """
        now = self._clock()
        cutoff = to_db_timestamp(now - self.ttl)

        with self._storage("restore entry"):
            with self._connect() as conn:
                row = fetch_entry(conn, entry_id)
                if row is None:
                    raise NotFound("Entry not found")
                entry = Entry.from_row(row)
                self._check_restorable(entry, now)

                changed = clear_entry_deleted(conn, entry_id, row["deleted_at"], cutoff)
                row = fetch_entry(conn, entry_id)

        if not changed:
            # Lost a race: a sweep purged it or another restore got there first.
            if row is None:
                raise NotFound("Entry not found")
            self._check_restorable(Entry.from_row(row), now)
            raise Conflict("Entry changed during restore")

        logger.info(f"Entry {entry_id} restored from trash")
        return Entry.from_row(row)

    def _check_restorable(self, entry: Entry, now: datetime) -> None:
        if not entry.is_deleted:
            raise Conflict("Entry not deleted")
        if not entry.restorable(now, self.ttl):
            raise Expired()

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    def set_share(self, entry_id: str, enable: bool) -> Entry:
        """
        Enables or disables sharing.

        Enabling keeps an existing token; disabling always clears it.
        """
        if not enable:
            with self._storage("disable share"):
                with self._connect() as conn:
                    clear_share_token(conn, entry_id)
                    row = fetch_entry(conn, entry_id)
            if row is None:
                raise NotFound("Entry not found")
            return Entry.from_row(row)

        for attempt in range(1, self._tokens.max_attempts + 1):
            token = self._tokens.generate()
            try:
                with self._connect() as conn:
                    row = fetch_entry(conn, entry_id)
                    if row is None:
                        raise NotFound("Entry not found")
                    if row["share_token"] is not None:
                        return Entry.from_row(row)
                    set_share_token_if_absent(conn, entry_id, token)
                    row = fetch_entry(conn, entry_id)
            except sqlite3.IntegrityError:
                logger.warning(
                    f"Share token collision for entry {entry_id} "
                    f"(attempt {attempt}/{self._tokens.max_attempts})"
                )
                continue
            except sqlite3.Error as e:
                logger.error(f"Failed to enable share for {entry_id}: {e}", exc_info=True)
                raise StorageError(f"Failed to enable share: {e}") from e

            logger.info(f"Sharing enabled for entry {entry_id}")
            return Entry.from_row(row)

        logger.error(
            f"Could not issue a unique share token for {entry_id} "
            f"after {self._tokens.max_attempts} attempts"
        )
        raise StorageError("Could not issue a unique share token")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    @contextmanager
    def _storage(action: str):
        """Turns database exceptions into StorageError; domain errors pass."""
        try:
            yield
        except (sqlite3.Error, OSError) as e:
            logger.error(f"Failed to {action}: {e}", exc_info=True)
            raise StorageError(f"Failed to {action}: {e}") from e
