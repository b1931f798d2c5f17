"""
Field Journal Database Module.

This package provides modular database access for the application.
All functions are re-exported here so callers can import from one place.

Usage:
    from utils.db import closing_connection, insert_entry, fetch_entries
    # or
    from utils.db.entries import insert_entry
"""

# Connection and Schema
from utils.db.connection import (
    DB_FILENAME,
    SETTINGS_ROW_ID,
    _get_db_path,
    _init_schema,
    closing_connection,
    ensure_settings_row,
    from_db_timestamp,
    get_connection,
    to_db_timestamp,
)

# Entry Operations
from utils.db.entries import (
    clear_entry_deleted,
    clear_share_token,
    delete_entry_if_expired,
    fetch_active_entry_by_share_token,
    fetch_entries,
    fetch_entry,
    fetch_entry_counts,
    fetch_purge_candidates,
    insert_entry,
    mark_entry_deleted,
    set_share_token_if_absent,
)

# Visibility Settings
from utils.db.visibility import (
    fetch_settings,
    upsert_settings,
)

__all__ = [
    # Connection
    "DB_FILENAME",
    "SETTINGS_ROW_ID",
    "_get_db_path",
    "_init_schema",
    "closing_connection",
    "ensure_settings_row",
    "get_connection",
    "to_db_timestamp",
    "from_db_timestamp",
    # Entries
    "insert_entry",
    "fetch_entry",
    "fetch_entries",
    "fetch_active_entry_by_share_token",
    "mark_entry_deleted",
    "clear_entry_deleted",
    "set_share_token_if_absent",
    "clear_share_token",
    "fetch_purge_candidates",
    "delete_entry_if_expired",
    "fetch_entry_counts",
    # Settings
    "fetch_settings",
    "upsert_settings",
]
