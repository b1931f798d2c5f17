from pathlib import Path


# Directory structure:
# storage/
# ├── entries.db
# └── images/
#     └── <entry_id>.<ext>


class PathManager:
    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir)
        self.images_dir = self.base_dir / "images"

    def get_images_dir(self) -> Path:
        """Returns the images directory, creates if needed."""
        self.images_dir.mkdir(parents=True, exist_ok=True)
        return self.images_dir

    def get_relative_image_path(self, entry_id: str, extension: str) -> str:
        """
        Returns the storage-relative path for an entry image.
        Format: images/<entry_id>.<ext>
        """
        return f"images/{entry_id}.{extension}"

    def resolve(self, relative_path: str) -> Path | None:
        """
        Resolves a storage-relative path to an absolute one.
        Returns None if the result would escape the storage root.
        """
        if not relative_path:
            return None
        root = self.base_dir.resolve()
        candidate = (root / relative_path).resolve()
        if candidate != root and root not in candidate.parents:
            return None
        return candidate


_path_managers: dict[str, PathManager] = {}


def get_path_manager(base_dir: str = None) -> PathManager:
    """Returns a cached PathManager for base_dir (defaults to OUTPUT_DIR)."""
    if base_dir is None:
        from config import get_config

        base_dir = get_config()["OUTPUT_DIR"]
    key = str(base_dir)
    if key not in _path_managers:
        _path_managers[key] = PathManager(base_dir)
    return _path_managers[key]
