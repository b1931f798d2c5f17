"""
Tests for the ingestion pipeline (classify -> store blob -> insert row).
"""

import functools
import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from core.entries_core import EntryStore
from core.ingest_core import IngestPipeline
from errors import InvalidImage, ProviderUnavailable, StorageError
from pipeline.interfaces import ClassificationResult
from pipeline.services.blob_service import FilesystemBlobStore
from utils.db import closing_connection
from utils.path_manager import PathManager


def png_bytes(size=(4, 3)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 80, 20)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def paths(tmp_path):
    return PathManager(tmp_path / "storage")


@pytest.fixture
def blob_store(paths):
    return FilesystemBlobStore(paths)


@pytest.fixture
def entry_store(tmp_path):
    return EntryStore(
        connection_factory=functools.partial(closing_connection, tmp_path / "entries.db")
    )


@pytest.fixture
def classifier():
    mock = MagicMock()
    mock.classify.return_value = ClassificationResult(
        label="Red Fox",
        description="A quick woodland visitor.",
        confidence=0.87,
        tags=["mammal", "forest"],
        raw_json={"content": []},
        model_id="test-model",
    )
    return mock


def stored_files(paths):
    if not paths.images_dir.exists():
        return []
    return sorted(p.name for p in paths.images_dir.iterdir())


def test_ingest_stores_blob_and_entry(classifier, blob_store, entry_store, paths):
    pipeline = IngestPipeline(classifier, blob_store, entry_store)
    data = png_bytes()

    entry = pipeline.ingest(data, "image/png")

    assert entry.label == "Red Fox"
    assert entry.tags == ["mammal", "forest"]
    assert entry.image_mime == "image/png"
    assert (entry.image_width, entry.image_height) == (4, 3)
    assert entry.image_path == f"images/{entry.id}.png"
    assert stored_files(paths) == [f"{entry.id}.png"]
    assert [e.id for e in entry_store.list()] == [entry.id]
    classifier.classify.assert_called_once_with(data, "image/png")


@pytest.mark.parametrize("error", [InvalidImage("empty"), ProviderUnavailable("down")])
def test_classification_failure_stores_nothing(
    classifier, blob_store, entry_store, paths, error
):
    classifier.classify.side_effect = error
    pipeline = IngestPipeline(classifier, blob_store, entry_store)

    with pytest.raises(type(error)):
        pipeline.ingest(png_bytes(), "image/png")

    assert stored_files(paths) == []
    assert entry_store.list(include_deleted=True) == []


def test_failed_insert_removes_stored_blob(classifier, blob_store, paths):
    failing_store = MagicMock()
    failing_store.create.side_effect = StorageError("disk full")
    pipeline = IngestPipeline(classifier, blob_store, failing_store)

    with pytest.raises(StorageError):
        pipeline.ingest(png_bytes(), "image/png")

    assert stored_files(paths) == []


def test_failed_blob_write_skips_insert(classifier, entry_store):
    broken_blobs = MagicMock()
    broken_blobs.save.side_effect = StorageError("read-only filesystem")
    pipeline = IngestPipeline(classifier, broken_blobs, entry_store)

    with pytest.raises(StorageError):
        pipeline.ingest(png_bytes(), "image/png")

    assert entry_store.list(include_deleted=True) == []
