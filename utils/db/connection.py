"""
Database Connection and Schema Management.

This module handles SQLite connection creation and schema initialization.
"""

import sqlite3
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from config import get_config

DB_FILENAME = "entries.db"
SETTINGS_ROW_ID = 1

# Module-level cache: initialize schema once per database path.
# Tests patch OUTPUT_DIR, so schema init must be keyed by db path (not process-global).
_schema_initialized_paths: set[Path] = set()


def _get_db_path() -> Path:
    cfg = get_config()
    output_dir = Path(cfg["OUTPUT_DIR"])
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir / cfg.get("DB_FILENAME", DB_FILENAME)


def get_connection(db_path: Path | None = None) -> sqlite3.Connection:
    global _schema_initialized_paths
    db_path = Path(db_path) if db_path is not None else _get_db_path()
    conn = sqlite3.connect(db_path, check_same_thread=False, timeout=10.0)
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA foreign_keys=ON;")
    if db_path not in _schema_initialized_paths:
        _init_schema(conn)
        _schema_initialized_paths.add(db_path)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def closing_connection(db_path: Path | None = None):
    """Context manager that creates a DB connection and guarantees it is closed.

    IMPORTANT: `with sqlite3.Connection as conn:` only manages transactions
    (commit/rollback); it does NOT call conn.close(). This context manager
    ensures the file descriptor is released when the block exits.

    Usage:
        with closing_connection() as conn:
            conn.execute("SELECT ...")
    """
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _init_schema(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS settings (
            id INTEGER PRIMARY KEY,
            is_public INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS entries (
            id TEXT PRIMARY KEY,
            created_at TEXT NOT NULL,
            deleted_at TEXT,
            image_path TEXT NOT NULL,
            image_mime TEXT NOT NULL,
            image_width INTEGER,
            image_height INTEGER,
            label TEXT NOT NULL,
            description TEXT NOT NULL,
            confidence REAL CHECK (
                confidence IS NULL OR (confidence >= 0.0 AND confidence <= 1.0)
            ),
            tags TEXT NOT NULL DEFAULT '[]',
            raw_json TEXT,
            share_token TEXT UNIQUE
        );
        """)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_entries_created_at ON entries(created_at DESC);"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_entries_deleted_at ON entries(deleted_at);"
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_entries_share_token ON entries(share_token);"
    )

    ensure_settings_row(conn)

    conn.commit()


def ensure_settings_row(conn: sqlite3.Connection) -> None:
    """Inserts the private-by-default singleton settings row if it is missing."""
    now = to_db_timestamp(datetime.now(UTC))
    conn.execute(
        """
        INSERT INTO settings (id, is_public, created_at, updated_at)
        VALUES (?, 0, ?, ?)
        ON CONFLICT (id) DO NOTHING;
        """,
        (SETTINGS_ROW_ID, now, now),
    )


def to_db_timestamp(value: datetime | None) -> str | None:
    """Fixed-width UTC ISO-8601 so that text order equals time order."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def from_db_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
