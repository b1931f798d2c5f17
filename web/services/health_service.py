"""
Health Service - Web Layer Service for System Health.

Exposes liveness and the active classification model to the web interface.
"""

from core import health_core
from web.services.components_service import get_components


def get_system_health() -> dict:
    """
    Get current system health status.

    Returns:
        Dictionary with status, model and system metrics.
    """
    model_id = get_components().classifier.get_model_id()
    return health_core.get_health(model_id)
