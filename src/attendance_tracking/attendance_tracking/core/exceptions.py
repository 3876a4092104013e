from __future__ import annotations

from .enums import ErrorKind


class AttendanceError(Exception):
    """Base exception for attendance rule violations.

    Every subclass carries an ``ErrorKind`` so callers can either catch the
    concrete class or match on ``exc.kind``. ``str(exc)`` is a message fit to
    show to an end user.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AttendanceError):
    """Raised when a referenced employee, record or correction does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(AttendanceError):
    """Raised when an operation would break a uniqueness invariant."""

    kind = ErrorKind.CONFLICT


class InvalidStateError(AttendanceError):
    """Raised when a record is in the wrong lifecycle stage for an operation."""

    kind = ErrorKind.INVALID_STATE


class ValidationError(AttendanceError):
    """Raised when input data is invalid or violates domain rules."""

    kind = ErrorKind.VALIDATION
