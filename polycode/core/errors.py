"""
Error taxonomy.

Every failure the orchestrator can observe is one of these. Errors carry
enough context to render the uniform JSON error body used by the backend
(``{"error": ..., "details": ...}``).
"""

from __future__ import annotations

from typing import Any


class PolycodeError(Exception):
    """Base class for all polycode errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PolycodeError):
    """A request was rejected locally and never reached the network."""


class ProviderError(PolycodeError):
    """
    The completion provider (or the backend relaying it) failed.

    ``status_code`` mirrors the upstream HTTP status so the backend can
    forward it unchanged.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        details: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class MalformedResponseError(ProviderError):
    """A response arrived but did not contain a usable completion."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message, status_code=500, details=details)


class TransportError(PolycodeError):
    """The backend could not be reached at all."""


class PersistenceError(PolycodeError):
    """Local storage is corrupt or unavailable."""
