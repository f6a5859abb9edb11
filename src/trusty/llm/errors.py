"""Chat backend error hierarchy.

All backend errors inherit from BackendError, so the orchestrator and the
CLI can treat them as one fatal kind.
"""

from __future__ import annotations

from trusty.exceptions import BackendError


class BackendConfigError(BackendError):
    """Missing or invalid backend configuration (e.g., no API key)."""


class BackendRateLimitError(BackendError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class BackendAuthError(BackendError):
    """Authentication failed (401/403)."""


class BackendResponseError(BackendError):
    """Unexpected response format from the backend."""


class BackendTimeoutError(BackendError):
    """The HTTP request to the backend timed out."""
