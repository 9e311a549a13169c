"""Exceptions shared across layers."""

from chat_sync.domain.models.error_details import ErrorDetails


class ChatApiError(Exception):
    """A request to the chat server failed (transport error or non-2xx response)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def details(self) -> ErrorDetails:
        """Classify the failure for logging."""
        return ErrorDetails(status_code=self.status_code, reason=_reason_for(self.status_code))


class InvariantViolationError(RuntimeError):
    """A programming error: engine state broke one of its invariants."""


def _reason_for(status_code: int | None) -> str:
    if status_code == 401:
        return "Session expired"
    if status_code == 403:
        return "Forbidden"
    if status_code == 404:
        return "Not found"
    if status_code == 429:
        return "Rate limit exceeded"
    if status_code in (502, 503, 504):
        return "Server unavailable"
    if status_code is not None:
        return f"HTTP {status_code}"
    return "Transport error"
