"""Domain error hierarchy for clean exception handling."""
from __future__ import annotations

from typing import Any, Dict, List


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Invalid input or state."""

    def __init__(self, message: str, errors: List[Dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ConflictError(DomainError):
    """Resource conflict (e.g., duplicate key)."""


class UploadRejectedError(ValidationError):
    """Uploaded file refused (type, size or count)."""

    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class AuthenticationError(DomainError):
    """Missing or invalid bearer token."""
