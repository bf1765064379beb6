import logging
import os
from pathlib import Path

from sitecms.storage.interface import AssetStorage, make_stored_name

logger = logging.getLogger(__name__)


class FilesystemStorage(AssetStorage):
    """
    Implements asset storage using the local filesystem.
    """

    def __init__(self, base_dir: str = None, url_prefix: str = "/uploads"):
        """
        Initialize filesystem storage.

        Args:
            base_dir: Base directory for uploaded files.
                      If None, uses 'uploads' in the current working directory.
            url_prefix: URL path the files are served under
        """
        super().__init__(url_prefix)
        if base_dir is None:
            base_dir = os.path.join(os.getcwd(), "uploads")

        self.base_dir = Path(base_dir).absolute()
        for subdir in ("images", "documents"):
            (self.base_dir / subdir).mkdir(parents=True, exist_ok=True)

    def _path_for(self, url: str) -> Path:
        path = (self.base_dir / self.key_for(url)).resolve()
        if not path.is_relative_to(self.base_dir.resolve()):
            raise ValueError(f"Invalid upload path: {url}")
        return path

    def save(self, data: bytes, filename: str, content_type: str, subdir: str) -> str:
        """
        Save an uploaded file under ``<base_dir>/<subdir>``.

        Returns:
            URL path where the file is served
        """
        target_dir = self.base_dir / subdir
        target_dir.mkdir(parents=True, exist_ok=True)

        stored_name = make_stored_name(filename)
        with open(target_dir / stored_name, "wb") as f:
            f.write(data)

        logger.info(f"Stored upload {filename} as {subdir}/{stored_name} ({len(data)} bytes)")
        return self.url_for(f"{subdir}/{stored_name}")

    def read(self, url: str) -> bytes:
        try:
            path = self._path_for(url)
        except ValueError as exc:
            raise FileNotFoundError(str(exc)) from exc
        if not path.is_file():
            raise FileNotFoundError(f"Upload not found at path: {url}")

        with open(path, "rb") as f:
            return f.read()

    def delete(self, url: str) -> bool:
        """
        Delete an uploaded file from the filesystem.

        Returns:
            True if successfully deleted, False otherwise
        """
        try:
            path = self._path_for(url)
            if not path.is_file():
                return False
            path.unlink()
            return True
        except (OSError, ValueError) as exc:
            logger.warning(f"Could not delete {url}: {exc}")
            return False
