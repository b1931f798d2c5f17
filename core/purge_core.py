"""
Purge Core - Background Removal of Expired Trash.

Permanently deletes entries whose soft-delete grace period has elapsed.

MANDATORY ORDER OF OPERATIONS (per candidate):
1. Conditional row delete: deleted_at must still equal the value seen in the
   scan and still be past the cutoff. A restore in between makes it a no-op.
2. Only after the row is gone, delete the blob. A blob failure is logged and
   leaves an orphaned file; the row is never brought back.

The sweeper never raises: failures are logged and the sweep moves on to the
next candidate.
"""

import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from core.entries_core import RESTORE_TTL
from pipeline.interfaces import BlobStoreInterface
from utils.db import (
    closing_connection,
    delete_entry_if_expired,
    fetch_purge_candidates,
    to_db_timestamp,
)

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 600


class PurgeSweeper:
    def __init__(
        self,
        blob_store: BlobStoreInterface,
        connection_factory=None,
        clock: Callable[[], datetime] = None,
        ttl: timedelta = RESTORE_TTL,
    ):
        self._blob_store = blob_store
        self._connect = connection_factory or closing_connection
        self._clock = clock or (lambda: datetime.now(UTC))
        self.ttl = ttl

        self._stop_event = threading.Event()
        self._worker_thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Sweep
    # ------------------------------------------------------------------

    def run_once(self) -> dict[str, Any]:
        """
        Runs a single sweep.

        Returns:
            Summary with candidates, purged, skipped and blob_errors counts
        """
        summary = {"candidates": 0, "purged": 0, "skipped": 0, "blob_errors": 0}
        cutoff = to_db_timestamp(self._clock() - self.ttl)

        try:
            with self._connect() as conn:
                candidates = fetch_purge_candidates(conn, cutoff)
        except Exception as e:
            logger.error(f"Purge scan failed: {e}", exc_info=True)
            return summary

        summary["candidates"] = len(candidates)
        for candidate in candidates:
            try:
                outcome = self._purge_candidate(candidate, cutoff)
            except Exception as e:
                logger.error(
                    f"Purge of entry {candidate['id']} failed: {e}", exc_info=True
                )
                continue

            if outcome == "skipped":
                summary["skipped"] += 1
                continue
            summary["purged"] += 1
            if outcome == "blob_error":
                summary["blob_errors"] += 1

        if summary["candidates"]:
            logger.info(
                f"Purge sweep: {summary['purged']} purged, {summary['skipped']} skipped, "
                f"{summary['blob_errors']} blob errors"
            )
        return summary

    def _purge_candidate(self, candidate: dict[str, Any], cutoff: str) -> str:
        entry_id = candidate["id"]
        with self._connect() as conn:
            removed = delete_entry_if_expired(
                conn, entry_id, candidate["deleted_at"], cutoff
            )

        if not removed:
            logger.debug(f"Entry {entry_id} changed since scan, not purged")
            return "skipped"

        result = self._blob_store.delete(candidate["image_path"])
        if result == "error":
            logger.error(
                f"Entry {entry_id} purged but its image could not be deleted: "
                f"{candidate['image_path']}"
            )
            return "blob_error"

        logger.info(f"Entry {entry_id} purged (image {result})")
        return "purged"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, interval: float = DEFAULT_INTERVAL_SECONDS):
        """Starts the background sweep thread."""
        if self._worker_thread and self._worker_thread.is_alive():
            logger.warning("PurgeSweeper already running")
            return

        self._stop_event.clear()
        self._worker_thread = threading.Thread(
            target=self._worker_loop,
            args=(interval,),
            name="PurgeSweeper",
            daemon=True,
        )
        self._worker_thread.start()
        logger.info(f"PurgeSweeper started (interval {interval}s)")

    def stop(self):
        """Stops the sweep thread gracefully."""
        self._stop_event.set()
        if self._worker_thread:
            self._worker_thread.join(timeout=2.0)
            logger.info("PurgeSweeper stopped")

    def is_running(self) -> bool:
        return bool(self._worker_thread and self._worker_thread.is_alive())

    def _worker_loop(self, interval: float):
        while not self._stop_event.is_set():
            self.run_once()
            # Wait for the next tick, but wake immediately on stop()
            self._stop_event.wait(interval)
