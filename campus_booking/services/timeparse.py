"""Parsing of externally supplied ISO-8601 timestamps."""

from __future__ import annotations

from datetime import datetime, timezone

from dateutil.parser import isoparse

from campus_booking.domain.errors import ErrorCode, InputError


def parse_instant(value: str | datetime | None, field: str) -> datetime:
    """Return a timezone-aware instant; naive values are taken as UTC.

    Raises InputError when the value is missing or not ISO-8601.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InputError(f"{field} is required")

    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = isoparse(value.strip())
        except (ValueError, OverflowError) as exc:
            raise InputError(
                f"{field} is not a valid ISO-8601 timestamp", ErrorCode.INVALID_TIME
            ) from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_interval(
    start: str | datetime | None,
    end: str | datetime | None,
    start_field: str = "start",
    end_field: str = "end",
) -> tuple[datetime, datetime]:
    """Parse a half-open ``[start, end)`` interval, requiring start < end."""
    start_at = parse_instant(start, start_field)
    end_at = parse_instant(end, end_field)
    if start_at >= end_at:
        raise InputError("invalid time range", ErrorCode.INVALID_TIME_RANGE)
    return start_at, end_at
