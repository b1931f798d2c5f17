import io
from dataclasses import dataclass

from PIL import Image, UnidentifiedImageError


MIME_EXTENSIONS = {
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}
DEFAULT_EXTENSION = "jpg"


@dataclass
class ImageInfo:
    """Format and pixel size of an in-memory image."""

    format: str
    width: int
    height: int


def probe_image(data: bytes) -> ImageInfo | None:
    """
    Identifies image bytes without decoding the full raster.

    Args:
        data: Raw image bytes.

    Returns:
        ImageInfo, or None if Pillow does not recognise the payload.
    """
    if not data:
        return None
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            return ImageInfo(format=image.format or "", width=width, height=height)
    except (UnidentifiedImageError, OSError, ValueError):
        return None


def extension_for_mime(mime: str) -> str:
    """File extension used when storing an image of the given MIME type."""
    return MIME_EXTENSIONS.get((mime or "").lower(), DEFAULT_EXTENSION)
