"""
Ingestion Pipeline Interfaces.

This package defines the abstract interfaces for the external collaborators
of the ingestion pipeline. These interfaces enable:
- Clear service boundaries
- Dependency injection
- Independent testing of each component

ARCHITECTURE:
- core.ingest_core only coordinates these interfaces
- Concrete implementations live in services/
- No direct dependencies between implementations
"""

from pipeline.interfaces.classification import (
    ClassificationInterface,
    ClassificationResult,
)
from pipeline.interfaces.persistence import BlobRef, BlobStoreInterface

__all__ = [
    # Interfaces
    "ClassificationInterface",
    "BlobStoreInterface",
    # Data Classes
    "ClassificationResult",
    "BlobRef",
]
