"""Exception classes resolved into HTTP responses at the handler boundary."""

from __future__ import annotations


class LogApiError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(LogApiError):
    """Malformed or out-of-range request parameters."""

    status_code = 400


class NotFoundError(LogApiError):
    """A well-formed identifier with no matching row."""

    status_code = 404


class StorageError(LogApiError):
    """Connection or query failure in the storage layer.

    The message is for logs only; clients receive a generic error body.
    """

    status_code = 500
