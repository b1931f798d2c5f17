"""
Field Journal Core Package.

This package contains the core business logic of the application,
separated from the web layer. All entry lifecycle transitions, sharing,
visibility and purge operations are coordinated through core modules.

ARCHITECTURE RULES:
- core/ modules may only import from:
  - Python standard library
  - utils/ (database and filesystem adapters)
  - pipeline/ (classification and blob storage collaborators)
  - config, errors (global configuration and error taxonomy)

- core/ modules MUST NOT import from:
  - web/ (no Flask dependencies)
  - flask, werkzeug, or any web-specific packages

- All new business logic should be placed here, not in web/
"""

__all__ = [
    "entries_core",
    "health_core",
    "ingest_core",
    "models",
    "purge_core",
    "settings_core",
    "share_core",
]
