"""
Entry CRUD Operations.

This module handles entry-related database operations. Lifecycle rules
(TTL, error mapping) live in core.entries_core; the statements here only
carry the conditions that make each transition atomic.
"""

import sqlite3
from typing import Any

ENTRY_COLUMNS = """
    id, created_at, deleted_at, image_path, image_mime, image_width,
    image_height, label, description, confidence, tags, raw_json, share_token
"""


def _to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    return dict(row) if row is not None else None


def insert_entry(conn: sqlite3.Connection, row: dict[str, Any]) -> None:
    conn.execute(
        """
        INSERT INTO entries (
            id,
            created_at,
            image_path,
            image_mime,
            image_width,
            image_height,
            label,
            description,
            confidence,
            tags,
            raw_json
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
        """,
        (
            row["id"],
            row["created_at"],
            row["image_path"],
            row["image_mime"],
            row.get("image_width"),
            row.get("image_height"),
            row["label"],
            row["description"],
            row.get("confidence"),
            row.get("tags", "[]"),
            row.get("raw_json"),
        ),
    )


def fetch_entry(conn: sqlite3.Connection, entry_id: str) -> dict[str, Any] | None:
    row = conn.execute(
        f"SELECT {ENTRY_COLUMNS} FROM entries WHERE id = ?", (entry_id,)
    ).fetchone()
    return _to_dict(row)


def fetch_entries(
    conn: sqlite3.Connection, include_deleted: bool = False
) -> list[dict[str, Any]]:
    """Entries newest first; soft-deleted ones only when asked for."""
    where = "" if include_deleted else "WHERE deleted_at IS NULL"
    rows = conn.execute(
        f"""
        SELECT {ENTRY_COLUMNS}
        FROM entries
        {where}
        ORDER BY created_at DESC, id DESC
        """
    ).fetchall()
    return [dict(row) for row in rows]


def fetch_active_entry_by_share_token(
    conn: sqlite3.Connection, token: str
) -> dict[str, Any] | None:
    row = conn.execute(
        f"""
        SELECT {ENTRY_COLUMNS}
        FROM entries
        WHERE share_token = ? AND deleted_at IS NULL
        """,
        (token,),
    ).fetchone()
    return _to_dict(row)


def mark_entry_deleted(conn: sqlite3.Connection, entry_id: str, deleted_at: str) -> int:
    """Sets deleted_at only on an active entry. Returns affected row count."""
    cur = conn.execute(
        "UPDATE entries SET deleted_at = ? WHERE id = ? AND deleted_at IS NULL",
        (deleted_at, entry_id),
    )
    return cur.rowcount


def clear_entry_deleted(
    conn: sqlite3.Connection, entry_id: str, observed_deleted_at: str, cutoff: str
) -> int:
    """
    Restores an entry if it is still deleted at the observed moment and that
    moment is not older than cutoff. Returns affected row count.
    """
    cur = conn.execute(
        """
        UPDATE entries
        SET deleted_at = NULL
        WHERE id = ?
          AND deleted_at = ?
          AND deleted_at >= ?
        """,
        (entry_id, observed_deleted_at, cutoff),
    )
    return cur.rowcount


def set_share_token_if_absent(
    conn: sqlite3.Connection, entry_id: str, token: str
) -> int:
    """
    Stores token only when the entry has none yet.
    Raises sqlite3.IntegrityError if another entry already holds the token.
    """
    cur = conn.execute(
        "UPDATE entries SET share_token = ? WHERE id = ? AND share_token IS NULL",
        (token, entry_id),
    )
    return cur.rowcount


def clear_share_token(conn: sqlite3.Connection, entry_id: str) -> int:
    cur = conn.execute(
        "UPDATE entries SET share_token = NULL WHERE id = ?", (entry_id,)
    )
    return cur.rowcount


def fetch_purge_candidates(
    conn: sqlite3.Connection, cutoff: str
) -> list[dict[str, Any]]:
    """Soft-deleted entries whose deleted_at lies strictly before cutoff."""
    rows = conn.execute(
        """
        SELECT id, image_path, deleted_at
        FROM entries
        WHERE deleted_at IS NOT NULL AND deleted_at < ?
        ORDER BY deleted_at ASC
        """,
        (cutoff,),
    ).fetchall()
    return [dict(row) for row in rows]


def delete_entry_if_expired(
    conn: sqlite3.Connection, entry_id: str, observed_deleted_at: str, cutoff: str
) -> int:
    """
    Hard-deletes an entry only if deleted_at still equals the value seen
    during the scan and is still past cutoff. Returns affected row count.
    """
    cur = conn.execute(
        """
        DELETE FROM entries
        WHERE id = ?
          AND deleted_at = ?
          AND deleted_at < ?
        """,
        (entry_id, observed_deleted_at, cutoff),
    )
    return cur.rowcount


def fetch_entry_counts(conn: sqlite3.Connection) -> dict[str, int]:
    """Returns active and soft-deleted entry counts (for health)."""
    row = conn.execute(
        """
        SELECT
            SUM(CASE WHEN deleted_at IS NULL THEN 1 ELSE 0 END) AS active,
            SUM(CASE WHEN deleted_at IS NOT NULL THEN 1 ELSE 0 END) AS deleted
        FROM entries
        """
    ).fetchone()
    return {
        "entries": (row["active"] or 0) if row else 0,
        "deleted": (row["deleted"] or 0) if row else 0,
    }
