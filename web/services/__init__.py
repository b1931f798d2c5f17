"""
Field Journal Services Package.

This package contains service layer modules that encapsulate business logic,
separating it from Flask routes for better testability and maintainability.

ARCHITECTURE RULE:
- Services may ONLY import from core/* modules
- Services MUST NOT import directly from utils/, pipeline/
"""

from web.services import (
    components_service,
    entries_service,
    health_service,
    settings_service,
)

__all__ = [
    "components_service",
    "entries_service",
    "health_service",
    "settings_service",
]
