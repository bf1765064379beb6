from __future__ import annotations

import logging
from typing import List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User-facing toasts."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Records notifications and writes them to the log."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))
        logger.info(f"[NOTIFY] {message}")

    def error(self, message: str) -> None:
        self.messages.append(("error", message))
        logger.warning(f"[NOTIFY] {message}")
