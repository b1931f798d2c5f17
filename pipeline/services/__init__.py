"""
Ingestion Pipeline Services.

This package contains concrete implementations of the pipeline interfaces.
Each service encapsulates a specific responsibility and can be tested independently.

ARCHITECTURE:
- Services implement interfaces from pipeline/interfaces/
- Services may use utils/ for low-level operations
- core.ingest_core orchestrates these services
"""

from pipeline.services.blob_service import FilesystemBlobStore
from pipeline.services.classification_service import ClassificationService

__all__ = [
    "ClassificationService",
    "FilesystemBlobStore",
]
