"""Errors raised by embedding backends."""

from __future__ import annotations

_AUTH_STATUS_CODES = frozenset({401, 403})


class OpenCodeAPIError(RuntimeError):
    """Non-2xx response from the OpenCode AI API."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"OpenCode AI API error ({status_code}): {body}")
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in _AUTH_STATUS_CODES


class InvalidResponseError(ValueError):
    """Response body is missing the expected ``data[].embedding`` fields."""

    def __init__(self, detail: str = "") -> None:
        message = "Invalid response from OpenCode AI API"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EmbeddingError(RuntimeError):
    """An embedding operation failed.

    Wraps the underlying transport or validation error and records which
    operation and model it happened for.
    """

    def __init__(self, operation: str, model: str, cause: BaseException) -> None:
        super().__init__(f"Failed to {operation} for model {model}: {cause}")
        self.operation = operation
        self.model = model
        self.cause = cause

    @property
    def is_auth_error(self) -> bool:
        return getattr(self.cause, "is_auth_error", False)


class DimensionWarning(RuntimeWarning):
    """The reported dimension of a custom model has not been verified yet."""
