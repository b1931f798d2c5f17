"""
Blob Service - Filesystem Image Storage.

Implements BlobStoreInterface on top of the storage root (OUTPUT_DIR).
Images live at images/<entry_id>.<ext>.

Safety rules:
- Never read or delete files outside the storage root
- Writes use exclusive create, so an existing blob is never overwritten
- Deleting a missing blob is a success (the purge sweeper may retry)
"""

from pathlib import Path
from typing import BinaryIO

from errors import NotFound, StorageError
from logging_config import get_logger
from pipeline.interfaces.persistence import BlobStoreInterface
from utils.image_ops import extension_for_mime
from utils.path_manager import PathManager, get_path_manager

logger = get_logger(__name__)


class FilesystemBlobStore(BlobStoreInterface):
    """Stores image bytes as files below the storage root."""

    def __init__(self, path_manager: PathManager = None):
        self._paths = path_manager or get_path_manager()

    def save(self, entry_id: str, data: bytes, mime: str) -> str:
        relative_path = self._paths.get_relative_image_path(
            entry_id, extension_for_mime(mime)
        )
        self._paths.get_images_dir()
        abs_path = self._paths.resolve(relative_path)
        if abs_path is None:
            raise StorageError(f"Refusing to write outside storage root: {relative_path}")

        try:
            with open(abs_path, "xb") as handle:
                handle.write(data)
        except FileExistsError as e:
            raise StorageError(f"Image already stored for entry {entry_id}") from e
        except OSError as e:
            logger.error(f"Failed to write image {abs_path}: {e}")
            self._discard_partial(abs_path)
            raise StorageError(f"Failed to write image: {e}") from e

        logger.debug(f"Stored image for entry {entry_id} at {relative_path}")
        return relative_path

    @staticmethod
    def _discard_partial(abs_path: Path) -> None:
        try:
            Path(abs_path).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Partial image left behind: {abs_path} ({e})")

    def read(self, path: str) -> BinaryIO:
        abs_path = self._paths.resolve(path)
        if abs_path is None:
            logger.error(f"Refusing to read outside storage root: {path}")
            raise NotFound("Image not found")
        try:
            return open(abs_path, "rb")
        except FileNotFoundError as e:
            raise NotFound("Image not found") from e
        except OSError as e:
            logger.error(f"Failed to open image {abs_path}: {e}")
            raise StorageError(f"Failed to read image: {e}") from e

    def delete(self, path: str) -> str:
        abs_path = self._paths.resolve(path)
        if abs_path is None:
            logger.error(f"Refusing to delete outside storage root: {path}")
            return "error"

        try:
            Path(abs_path).unlink()
            return "deleted"
        except FileNotFoundError:
            logger.warning(f"File not found for deletion: {abs_path}")
            return "missing"
        except OSError as e:
            logger.error(f"Failed to delete file: {abs_path} ({e})")
            return "error"
