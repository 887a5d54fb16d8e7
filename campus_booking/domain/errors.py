"""Domain errors raised by the booking core."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from campus_booking.domain.models import Conflict


class ErrorCode(Enum):
    """Domain error codes."""

    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"
    INVALID_TIME = "INVALID_TIME"
    INVALID_TIME_RANGE = "INVALID_TIME_RANGE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    PROOFS_NOT_ALLOWED = "PROOFS_NOT_ALLOWED"
    INVALID_UPLOAD = "INVALID_UPLOAD"
    FACILITY_NOT_FOUND = "FACILITY_NOT_FOUND"
    MEDIA_NOT_FOUND = "MEDIA_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    STORE_UNREADABLE = "STORE_UNREADABLE"
    STORE_UNWRITABLE = "STORE_UNWRITABLE"


@dataclass(eq=False)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InputError(DomainError):
    """Raised for missing fields, malformed times and invalid ranges."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.MISSING_FIELD) -> None:
        super().__init__(code=code, message=message)


class NotFoundError(DomainError):
    """Raised when a facility, media resource or event id is unknown."""

    _CODES = {
        "facility": ErrorCode.FACILITY_NOT_FOUND,
        "media": ErrorCode.MEDIA_NOT_FOUND,
        "event": ErrorCode.EVENT_NOT_FOUND,
    }

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(code=self._CODES[kind], message=f"{kind} not found")
        self.kind = kind
        self.identifier = identifier


class ConflictError(DomainError):
    """Raised when a booking would double-book a facility or media resource."""

    def __init__(self, conflicts: Iterable[Conflict]) -> None:
        super().__init__(
            code=ErrorCode.BOOKING_CONFLICT,
            message="conflict with existing booking",
        )
        self.conflicts = list(conflicts)


class PersistenceError(DomainError):
    """Raised when the backing store cannot be read or written."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STORE_UNREADABLE) -> None:
        super().__init__(code=code, message=message)
