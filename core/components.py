"""
Components Core - Wiring of the Entry Subsystem.

Builds the store, settings, classification gateway, blob store, ingest
pipeline and purge sweeper from configuration, so the web layer never has
to touch pipeline/ or utils/ directly.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from core.entries_core import EntryStore, utc_now
from core.ingest_core import IngestPipeline
from core.purge_core import PurgeSweeper
from core.settings_core import VisibilitySettings
from core.share_core import ShareTokenManager
from pipeline.interfaces import BlobStoreInterface, ClassificationInterface
from pipeline.services import ClassificationService, FilesystemBlobStore

logger = logging.getLogger(__name__)


@dataclass
class Components:
    entry_store: EntryStore
    visibility: VisibilitySettings
    classifier: ClassificationInterface
    blob_store: BlobStoreInterface
    ingest: IngestPipeline
    sweeper: PurgeSweeper


def build_components(
    connection_factory=None,
    classifier: ClassificationInterface = None,
    blob_store: BlobStoreInterface = None,
    clock: Callable[[], datetime] = None,
) -> Components:
    """
    Builds the entry subsystem.

    Args:
        connection_factory: Context-manager factory yielding sqlite3 connections
                            (defaults to utils.db.closing_connection)
        classifier: Classification gateway (defaults to ClassificationService)
        blob_store: Image store (defaults to FilesystemBlobStore on OUTPUT_DIR)
        clock: Source of "now" (defaults to UTC wall clock)
    """
    clock = clock or utc_now
    classifier = classifier or ClassificationService()
    blob_store = blob_store or FilesystemBlobStore()

    visibility = VisibilitySettings(connection_factory=connection_factory, clock=clock)
    entry_store = EntryStore(
        connection_factory=connection_factory,
        token_manager=ShareTokenManager(),
        visibility=visibility,
        clock=clock,
    )
    sweeper = PurgeSweeper(
        blob_store=blob_store,
        connection_factory=connection_factory,
        clock=clock,
        ttl=entry_store.ttl,
    )
    ingest = IngestPipeline(
        classifier=classifier, blob_store=blob_store, entry_store=entry_store
    )
    logger.debug(f"Components built (model {classifier.get_model_id()})")
    return Components(
        entry_store=entry_store,
        visibility=visibility,
        classifier=classifier,
        blob_store=blob_store,
        ingest=ingest,
        sweeper=sweeper,
    )
