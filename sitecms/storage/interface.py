import os
import random
import re
import time
from abc import ABC, abstractmethod

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def make_stored_name(original_name: str) -> str:
    """
    Build a unique, filesystem-safe name for an uploaded file.

    The base name is reduced to alphanumerics and dashes and cut to 20
    characters; a millisecond timestamp and a random number follow, then
    the lowercased original extension.
    """
    base, extension = os.path.splitext(os.path.basename(original_name or "file"))
    safe_base = _UNSAFE_CHARS.sub("-", base)[:20] or "file"
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{safe_base}-{unique_suffix}{extension.lower()}"


class AssetStorage(ABC):
    """
    Abstract interface for uploaded asset storage. Supports both S3 and local filesystem.

    Every stored file is addressed by its public URL path relative to the
    server's static root, e.g. ``/uploads/images/logo-1700000000000-42.png``.
    """

    def __init__(self, url_prefix: str = "/uploads"):
        self.url_prefix = "/" + url_prefix.strip("/")

    def url_for(self, key: str) -> str:
        return f"{self.url_prefix}/{key}"

    def key_for(self, url: str) -> str:
        """
        Translate a stored URL path back into a storage key.

        Raises:
            ValueError: If the URL is outside the upload root
        """
        path = url.split("?", 1)[0]
        prefix = self.url_prefix + "/"
        if not path.startswith(prefix):
            raise ValueError(f"Not an upload path: {url}")
        key = path[len(prefix):]
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"Invalid upload path: {url}")
        return key

    @abstractmethod
    def save(self, data: bytes, filename: str, content_type: str, subdir: str) -> str:
        """
        Save an uploaded file and return its URL path.

        Args:
            data: File contents
            filename: Original client-side file name
            content_type: MIME type reported by the client
            subdir: Target folder, "images" or "documents"

        Returns:
            URL path of the stored file
        """
        pass

    @abstractmethod
    def read(self, url: str) -> bytes:
        """
        Retrieve a stored file.

        Raises:
            FileNotFoundError: If nothing is stored at ``url``
        """
        pass

    @abstractmethod
    def delete(self, url: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if successfully deleted, False otherwise
        """
        pass
