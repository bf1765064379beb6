from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from sitecms.client.cache import CacheCoordinator
from sitecms.client.errors import (
    AuthExpiredError,
    ClientError,
    InvalidInputError,
    NetworkError,
    RateLimitedError,
    RequestTimeoutError,
    ResponseError,
)
from sitecms.client.notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


def error_message(exc: ClientError) -> Optional[str]:
    """Toast text for a failed mutation, or None when nothing should be shown."""
    if isinstance(exc, (AuthExpiredError, RateLimitedError)):
        return None
    if isinstance(exc, InvalidInputError):
        return "Cannot submit: missing data"
    if isinstance(exc, RequestTimeoutError):
        return "Request timed out"
    if isinstance(exc, NetworkError):
        return "Network error occurred"
    if isinstance(exc, ResponseError):
        return exc.message
    return str(exc) or "Something went wrong"


class MutationRunner:
    """Runs create/update/delete calls with cache invalidation and notifications."""

    def __init__(self, coordinator: CacheCoordinator, notifier: Optional[Notifier] = None) -> None:
        self._coordinator = coordinator
        self._notifier = notifier or LoggingNotifier()

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def run(self, resource: str, call: Callable[[], T], success_message: Optional[str] = None) -> T:
        """
        Run ``call``; on success invalidate ``resource`` before notifying.

        Client errors are reported to the notifier and re-raised.
        """
        try:
            result = call()
        except ClientError as exc:
            if isinstance(exc, RateLimitedError):
                logger.warning(f"Mutation on {resource} rate limited")
            message = error_message(exc)
            if message:
                self._notifier.error(message)
            raise

        self._coordinator.invalidate_and_refetch(resource)
        if success_message:
            self._notifier.success(success_message)
        return result
