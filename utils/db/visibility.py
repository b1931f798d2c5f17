"""
Visibility Settings Operations.

The settings table holds exactly one row (id = SETTINGS_ROW_ID).
"""

import sqlite3
from typing import Any

from utils.db.connection import SETTINGS_ROW_ID


def fetch_settings(conn: sqlite3.Connection) -> dict[str, Any] | None:
    row = conn.execute(
        "SELECT is_public, created_at, updated_at FROM settings WHERE id = ?",
        (SETTINGS_ROW_ID,),
    ).fetchone()
    return dict(row) if row is not None else None


def upsert_settings(conn: sqlite3.Connection, is_public: bool, now: str) -> None:
    """Atomic upsert of the singleton row; last write wins."""
    conn.execute(
        """
        INSERT INTO settings (id, is_public, created_at, updated_at)
        VALUES (?, ?, ?, ?)
        ON CONFLICT (id) DO UPDATE SET
            is_public = excluded.is_public,
            updated_at = excluded.updated_at;
        """,
        (SETTINGS_ROW_ID, 1 if is_public else 0, now, now),
    )
