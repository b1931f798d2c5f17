"""
Core Models - Entry and Settings records.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from utils.db import from_db_timestamp


class EntryState(str, Enum):
    """Lifecycle state of an existing entry. A purged entry has no row."""

    ACTIVE = "active"
    DELETED = "deleted"


@dataclass
class Entry:
    id: str
    created_at: datetime
    image_path: str
    image_mime: str
    label: str
    description: str
    deleted_at: datetime | None = None
    image_width: int | None = None
    image_height: int | None = None
    confidence: float | None = None
    tags: list[str] = field(default_factory=list)
    raw_json: Any = None
    share_token: str | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def is_shared(self) -> bool:
        return self.share_token is not None

    @property
    def state(self) -> EntryState:
        return EntryState.DELETED if self.is_deleted else EntryState.ACTIVE

    def restorable(self, now: datetime, ttl: timedelta) -> bool:
        """True while a soft-deleted entry is inside its restore window."""
        return self.is_deleted and now - self.deleted_at <= ttl

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Entry":
        return cls(
            id=row["id"],
            created_at=from_db_timestamp(row["created_at"]),
            deleted_at=from_db_timestamp(row.get("deleted_at")),
            image_path=row["image_path"],
            image_mime=row["image_mime"],
            image_width=row.get("image_width"),
            image_height=row.get("image_height"),
            label=row["label"],
            description=row["description"],
            confidence=row.get("confidence"),
            tags=_load_json(row.get("tags"), default=[]),
            raw_json=_load_json(row.get("raw_json"), default=None),
            share_token=row.get("share_token"),
        )


@dataclass
class Settings:
    is_public: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Settings":
        return cls(
            is_public=bool(row["is_public"]),
            created_at=from_db_timestamp(row.get("created_at")),
            updated_at=from_db_timestamp(row.get("updated_at")),
        )


def _load_json(value: str | None, default: Any) -> Any:
    if value is None:
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return default
