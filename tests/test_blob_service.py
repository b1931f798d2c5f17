"""
Tests for FilesystemBlobStore and PathManager.
"""

import builtins
from unittest.mock import patch

import pytest

from errors import NotFound, StorageError
from pipeline.services.blob_service import FilesystemBlobStore
from utils.path_manager import PathManager


@pytest.fixture
def paths(tmp_path):
    return PathManager(tmp_path / "storage")


@pytest.fixture
def blob_store(paths):
    return FilesystemBlobStore(paths)


def test_save_writes_under_images_dir(blob_store, paths):
    path = blob_store.save("abc", b"\x89PNG...", "image/png")

    assert path == "images/abc.png"
    assert (paths.images_dir / "abc.png").read_bytes() == b"\x89PNG..."


@pytest.mark.parametrize(
    "mime,extension",
    [("image/jpeg", "jpg"), ("image/webp", "webp"), ("image/gif", "gif"), ("image/heic", "jpg")],
)
def test_extension_follows_mime(blob_store, mime, extension):
    assert blob_store.save("abc", b"data", mime) == f"images/abc.{extension}"


def test_save_never_overwrites(blob_store, paths):
    blob_store.save("abc", b"first", "image/jpeg")

    with pytest.raises(StorageError):
        blob_store.save("abc", b"second", "image/jpeg")
    assert (paths.images_dir / "abc.jpg").read_bytes() == b"first"


def test_read_returns_stored_bytes(blob_store):
    path = blob_store.save("abc", b"image-bytes", "image/jpeg")
    with blob_store.read(path) as handle:
        assert handle.read() == b"image-bytes"


def test_read_missing_blob_raises_not_found(blob_store):
    with pytest.raises(NotFound):
        blob_store.read("images/missing.jpg")


def test_delete_then_delete_again(blob_store):
    path = blob_store.save("abc", b"image-bytes", "image/jpeg")

    assert blob_store.delete(path) == "deleted"
    assert blob_store.delete(path) == "missing"


@pytest.mark.parametrize("path", ["../outside.jpg", "images/../../outside.jpg", "/etc/passwd", ""])
def test_paths_outside_storage_root_are_refused(blob_store, tmp_path, path):
    (tmp_path / "outside.jpg").write_bytes(b"keep me")

    assert blob_store.delete(path) == "error"
    with pytest.raises(NotFound):
        blob_store.read(path)
    assert (tmp_path / "outside.jpg").exists()


def test_path_manager_resolve_stays_inside_root(paths):
    assert paths.resolve("images/a.jpg") == (paths.base_dir.resolve() / "images" / "a.jpg")
    assert paths.resolve("../a.jpg") is None


def test_failed_write_leaves_no_partial_file(blob_store, paths):
    real_open = builtins.open

    def open_then_fail(path, mode):
        handle = real_open(path, mode)
        handle.write(b"half an im")
        handle.close()
        raise OSError(28, "No space left on device")

    with patch("pipeline.services.blob_service.open", side_effect=open_then_fail, create=True):
        with pytest.raises(StorageError):
            blob_store.save("abc", b"half an image", "image/jpeg")

    assert not (paths.images_dir / "abc.jpg").exists()
    # The id can be stored again once space is back
    assert blob_store.save("abc", b"whole image", "image/jpeg") == "images/abc.jpg"
