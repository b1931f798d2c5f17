"""
Entries Service - Web Layer Service for Entry Operations.

Thin wrapper over the core entry store and ingest pipeline, plus the JSON
shapes the API returns.
"""

from typing import Any, BinaryIO

from core.models import Entry
from web.services.components_service import get_components


# --- Serialization ---


def image_url(entry: Entry) -> str:
    return f"/api/entries/{entry.id}/image"


def share_url(entry: Entry) -> str | None:
    return f"/share/{entry.share_token}" if entry.share_token else None


def _timestamp(value) -> str | None:
    return value.isoformat() if value is not None else None


def serialize_summary(entry: Entry) -> dict[str, Any]:
    """List item shape."""
    return {
        "id": entry.id,
        "created_at": _timestamp(entry.created_at),
        "image_url": image_url(entry),
        "label": entry.label,
        "description": entry.description,
        "confidence": entry.confidence,
        "tags": list(entry.tags),
        "shared": entry.is_shared,
    }


def serialize_detail(entry: Entry) -> dict[str, Any]:
    """Owner detail shape (includes trash and share state)."""
    data = serialize_summary(entry)
    data.update(
        {
            "share_url": share_url(entry),
            "deleted_at": _timestamp(entry.deleted_at),
            "image_width": entry.image_width,
            "image_height": entry.image_height,
        }
    )
    return data


def serialize_shared(entry: Entry) -> dict[str, Any]:
    """Public detail shape for share-link visitors."""
    data = serialize_summary(entry)
    data.update(
        {
            "image_width": entry.image_width,
            "image_height": entry.image_height,
        }
    )
    return data


# --- Operations ---


def list_entries() -> list[dict[str, Any]]:
    return [serialize_summary(e) for e in get_components().entry_store.list()]


def list_public_entries() -> list[dict[str, Any]]:
    return [serialize_summary(e) for e in get_components().entry_store.list_public()]


def get_entry(entry_id: str) -> dict[str, Any]:
    return serialize_detail(get_components().entry_store.get(entry_id))


def get_shared_entry(token: str) -> dict[str, Any]:
    return serialize_shared(get_components().entry_store.get_by_share_token(token))


def create_entry(data: bytes, mime: str) -> dict[str, Any]:
    """
    Runs the ingestion pipeline.

    Args:
        data: Uploaded image bytes
        mime: Uploaded content type

    Returns:
        Detail of the created entry
    """
    return serialize_detail(get_components().ingest.ingest(data, mime))


def soft_delete_entry(entry_id: str) -> dict[str, Any]:
    return serialize_detail(get_components().entry_store.soft_delete(entry_id))


def restore_entry(entry_id: str) -> dict[str, Any]:
    return serialize_detail(get_components().entry_store.restore(entry_id))


def set_share(entry_id: str, enable: bool) -> dict[str, Any]:
    return serialize_detail(get_components().entry_store.set_share(entry_id, enable))


def open_entry_image(entry_id: str) -> tuple[BinaryIO, str]:
    """
    Opens the stored image of an entry.

    Returns:
        Tuple of (binary stream, stored MIME type); caller closes the stream
    """
    components = get_components()
    entry = components.entry_store.get(entry_id)
    return components.blob_store.read(entry.image_path), entry.image_mime
