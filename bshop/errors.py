# bshop/errors.py

from typing import Any


class BookingError(Exception):
    """Base class for failures the caller can recover from."""

    status_code = 400

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})


class ConflictError(BookingError):
    """Requested interval overlaps a confirmed appointment (or a duplicate record)."""

    status_code = 409


class InvalidStateError(BookingError):
    """Operation is not legal for the appointment's current status."""

    status_code = 409


class NotFoundError(BookingError):
    status_code = 404


class ValidationError(BookingError):
    """Malformed date, time, email or amount."""

    status_code = 422
