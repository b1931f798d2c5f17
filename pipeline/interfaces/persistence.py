"""
Persistence Interface - Image Blob Storage.

Defines the contract for storing raw image bytes keyed by entry id.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO


@dataclass
class BlobRef:
    """
    Reference to a stored image blob.

    Attributes:
        entry_id: Id of the entry the blob belongs to.
        path: Storage-relative path (e.g., "images/<entry_id>.jpg").
        mime: MIME type the image was submitted with.
        width: Pixel width, None if unknown.
        height: Pixel height, None if unknown.
    """

    entry_id: str
    path: str
    mime: str
    width: int | None = None
    height: int | None = None


class BlobStoreInterface(ABC):
    """
    Interface for image blob persistence.

    Paths are keyed by entry id, so saves for different entries never
    collide and an entry's image is written exactly once.
    """

    @abstractmethod
    def save(self, entry_id: str, data: bytes, mime: str) -> str:
        """
        Stores image bytes for an entry.

        Returns:
            Storage-relative path of the blob.

        Raises:
            StorageError: Write failed or the blob already exists.
        """
        pass

    @abstractmethod
    def read(self, path: str) -> BinaryIO:
        """
        Opens a stored blob for streaming. Caller closes the stream.

        Raises:
            NotFound: No blob at path.
        """
        pass

    @abstractmethod
    def delete(self, path: str) -> str:
        """
        Deletes a blob. Idempotent.

        Returns:
            "deleted", "missing" (already gone, still a success) or "error".
        """
        pass
