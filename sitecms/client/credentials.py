from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class TokenStore:
    """Holds the admin bearer token, optionally persisted to a file."""

    def __init__(self, token: Optional[str] = None, path: Union[str, Path, None] = None) -> None:
        self._path = Path(path) if path else None
        self._lock = threading.Lock()
        self._token = token
        if self._token is None and self._path is not None and self._path.exists():
            self._token = self._path.read_text(encoding="utf-8").strip() or None

    def get(self) -> Optional[str]:
        with self._lock:
            return self._token

    def set(self, token: str) -> None:
        with self._lock:
            self._token = token
            if self._path is not None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._path.write_text(token, encoding="utf-8")

    def clear(self) -> None:
        with self._lock:
            self._token = None
            if self._path is not None and self._path.exists():
                self._path.unlink()
        logger.info("Stored admin token cleared")
