"""
Settings Service - Web Layer Service for Visibility Settings.

Thin wrapper over core.settings_core for web-specific concerns.
"""

from typing import Any

from web.services.components_service import get_components


def _serialize(settings) -> dict[str, Any]:
    return {
        "is_public": settings.is_public,
        "updated_at": (
            settings.updated_at.isoformat() if settings.updated_at else None
        ),
    }


def get_settings() -> dict[str, Any]:
    """
    Get current visibility settings.

    Delegates to core.settings_core.
    """
    return _serialize(get_components().visibility.get())


def update_settings(is_public: bool) -> dict[str, Any]:
    """
    Update the public flag.

    Args:
        is_public: New visibility

    Returns:
        Settings as stored
    """
    return _serialize(get_components().visibility.update(is_public))
