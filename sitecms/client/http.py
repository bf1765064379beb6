"""HTTP transport of the admin client.

Credentials are injected per request from the token passed to
``build_request``; the underlying ``httpx.Client`` carries no auth header
of its own. Any ``httpx.Client`` works, including FastAPI's ``TestClient``.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from sitecms.client.assembler import SubmissionEnvelope
from sitecms.client.credentials import TokenStore
from sitecms.client.envelopes import Envelope
from sitecms.client.errors import (
    AuthExpiredError,
    NetworkError,
    RateLimitedError,
    RequestTimeoutError,
    ServerError,
    ServerValidationError,
)

logger = logging.getLogger(__name__)

# Only reads are replayed after a timeout or transport failure
RETRYABLE_METHODS = ("GET",)


class ApiClient:

    def __init__(
        self,
        http: httpx.Client,
        tokens: Optional[TokenStore] = None,
        api_prefix: str = "/api",
        json_timeout: float = 30.0,
        upload_timeout: float = 60.0,
        on_auth_expired: Optional[Callable[[], None]] = None,
    ) -> None:
        self._http = http
        self._tokens = tokens or TokenStore()
        self._api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self._json_timeout = json_timeout
        self._upload_timeout = upload_timeout
        self._on_auth_expired = on_auth_expired

    @classmethod
    def from_settings(cls, settings, tokens: Optional[TokenStore] = None, **kwargs: Any) -> "ApiClient":
        """Client talking to ``settings.API_URL`` (or the local server)."""
        base_url = settings.API_URL or f"http://localhost:{settings.API_PORT}"
        return cls(
            httpx.Client(base_url=base_url),
            tokens=tokens,
            api_prefix=settings.API_PREFIX,
            json_timeout=settings.JSON_TIMEOUT_SECONDS,
            upload_timeout=settings.UPLOAD_TIMEOUT_SECONDS,
            **kwargs,
        )

    @property
    def tokens(self) -> TokenStore:
        return self._tokens

    def close(self) -> None:
        self._http.close()

    def build_request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        envelope: Optional[SubmissionEnvelope] = None,
    ) -> httpx.Request:
        """
        Build one request. ``token`` is the only source of the Authorization header.
        """
        headers: Dict[str, str] = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        kwargs: Dict[str, Any] = {"headers": headers, "params": _clean_params(params)}
        if envelope is not None:
            data, files = envelope.to_httpx()
            kwargs["data"] = data
            if files:
                kwargs["files"] = files
            kwargs["timeout"] = self._upload_timeout
        else:
            if json is not None:
                kwargs["json"] = json
            kwargs["timeout"] = self._json_timeout

        return self._http.build_request(method.upper(), f"{self._api_prefix}{path}", **kwargs)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        envelope: Optional[SubmissionEnvelope] = None,
    ) -> Envelope:
        """
        Send a request with the stored token and unwrap the response.

        Raises:
            RequestTimeoutError: Deadline exceeded (GET after one retry)
            NetworkError: The server could not be reached (GET after one retry)
            ResponseError: The server answered with an error status
        """
        method = method.upper()
        attempts = 2 if method in RETRYABLE_METHODS else 1

        for attempt in range(1, attempts + 1):
            request = self.build_request(
                method, path, token=self._tokens.get(), params=params, json=json, envelope=envelope
            )
            try:
                response = self._http.send(request)
            except httpx.TransportError as exc:
                timed_out = isinstance(exc, httpx.TimeoutException)
                if attempt < attempts:
                    reason = "timed out" if timed_out else f"failed ({exc})"
                    logger.warning(f"{method} {request.url} {reason}, retrying once")
                    continue
                if timed_out:
                    raise RequestTimeoutError("Request timed out") from exc
                raise NetworkError("Network error occurred") from exc

            logger.debug(f"{method} {request.url} - {response.status_code}")
            return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> Envelope:
        body = _json_body(response)
        if response.status_code < 400:
            return Envelope.from_json(body)

        status = response.status_code
        message = body.get("message") if isinstance(body, Mapping) else None
        message = message or f"Request failed with status code {status}"
        errors = body.get("errors") if isinstance(body, Mapping) else None

        if status == 401:
            self._tokens.clear()
            if self._on_auth_expired is not None:
                self._on_auth_expired()
            raise AuthExpiredError(status, message)
        if status == 429:
            logger.warning(f"Rate limited on {response.request.url}, backing off")
            raise RateLimitedError(status, message)
        if status < 500:
            raise ServerValidationError(status, message, errors)
        raise ServerError(status, message, errors)

    # Convenience wrappers

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Envelope:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, envelope: Optional[SubmissionEnvelope] = None) -> Envelope:
        return self.request("POST", path, json=json, envelope=envelope)

    def put(self, path: str, json: Any = None, envelope: Optional[SubmissionEnvelope] = None) -> Envelope:
        return self.request("PUT", path, json=json, envelope=envelope)

    def patch(self, path: str, json: Any = None) -> Envelope:
        return self.request("PATCH", path, json=json)

    def delete(self, path: str) -> Envelope:
        return self.request("DELETE", path)


def _clean_params(params: Optional[Mapping[str, Any]]) -> Optional[Dict[str, str]]:
    if not params:
        return None
    cleaned = {}
    for key, value in params.items():
        if value is None:
            continue
        cleaned[key] = ("true" if value else "false") if isinstance(value, bool) else str(value)
    return cleaned


def _json_body(response: httpx.Response) -> Any:
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return {}
