"""Error taxonomy of the admin client."""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class ClientError(Exception):
    """Base for all client errors."""


class InvalidInputError(ClientError):
    """A submission was attempted without usable data."""


class NetworkError(ClientError):
    """Transport failure: DNS, refused connection, dropped socket."""


class RequestTimeoutError(NetworkError):
    """The request exceeded its deadline."""


class ResponseError(ClientError):
    """The server answered with an error status."""

    def __init__(
        self,
        status_code: int,
        message: str,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class ServerValidationError(ResponseError):
    """4xx with a server-provided message; shown to the user verbatim."""


class AuthExpiredError(ResponseError):
    """401: the stored token is no longer accepted."""


class RateLimitedError(ResponseError):
    """429: the request collided with the rate limiter."""


class ServerError(ResponseError):
    """5xx."""
