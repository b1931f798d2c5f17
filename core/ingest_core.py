"""
Ingest Core - Business Logic for Entry Ingestion.

Runs the ingestion pipeline:
    classify -> store blob -> insert row

Classification holds no database connection. The entry becomes visible only
once the row insert succeeds. If the insert fails, the stored blob is removed
best-effort; a remaining orphan is logged and accepted.
"""

import logging
import uuid

from core.entries_core import EntryStore
from core.models import Entry
from pipeline.interfaces import BlobRef, BlobStoreInterface, ClassificationInterface
from utils.image_ops import probe_image

logger = logging.getLogger(__name__)


class IngestPipeline:
    def __init__(
        self,
        classifier: ClassificationInterface,
        blob_store: BlobStoreInterface,
        entry_store: EntryStore,
    ):
        self._classifier = classifier
        self._blob_store = blob_store
        self._entry_store = entry_store

    def ingest(self, data: bytes, mime: str) -> Entry:
        """
        Classifies and stores a captured image as a new entry.

        Args:
            data: Raw image bytes
            mime: Declared MIME type

        Returns:
            The created Entry
        """
        classification = self._classifier.classify(data, mime)

        info = probe_image(data)
        entry_id = str(uuid.uuid4())
        path = self._blob_store.save(entry_id, data, mime)
        blob_ref = BlobRef(
            entry_id=entry_id,
            path=path,
            mime=mime,
            width=info.width if info else None,
            height=info.height if info else None,
        )

        try:
            entry = self._entry_store.create(classification, blob_ref)
        except Exception:
            outcome = self._blob_store.delete(path)
            if outcome == "error":
                logger.error(f"Orphaned image after failed insert: {path}")
            else:
                logger.warning(f"Removed image after failed insert: {path} ({outcome})")
            raise

        logger.info(f"Ingested entry {entry.id} from {len(data)} bytes ({mime})")
        return entry
