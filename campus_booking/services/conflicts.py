"""Overlap and double-booking detection between bookings."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Iterator

from campus_booking.domain.models import Conflict, Event


def overlaps(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """Return True when two half-open intervals intersect.

    Exact boundary touches (a_end == b_start) are NOT overlaps.
    """
    return not (a_end <= b_start or a_start >= b_end)


def _overlapping(
    start: datetime,
    end: datetime,
    events: Iterable[Event],
    exclude_event_id: str | None,
) -> Iterator[Event]:
    for event in events:
        if event.id == exclude_event_id or not event.is_active:
            continue
        if overlaps(event.start_time, event.end_time, start, end):
            yield event


def overlapping_events(
    start: datetime,
    end: datetime,
    events: Iterable[Event],
    exclude_event_id: str | None = None,
) -> list[Event]:
    """Return active events, other than ``exclude_event_id``, overlapping the range."""
    return list(_overlapping(start, end, events, exclude_event_id))


def _collision(candidate: Event, other: Event) -> Conflict | None:
    facility_id = candidate.allocations.facility_id
    shared_facility = (
        facility_id if facility_id and facility_id == other.allocations.facility_id else None
    )
    other_media = set(other.allocations.media_ids)
    shared_media = [m for m in candidate.allocations.media_ids if m in other_media]
    if shared_facility is None and not shared_media:
        return None
    return Conflict(event_id=other.id, facility_id=shared_facility, media_ids=shared_media)


def find_conflicts(candidate: Event, all_events: Iterable[Event]) -> list[Conflict]:
    """Return every collision between ``candidate`` and the other active bookings.

    The candidate's own id is skipped so a stored booking can be re-validated
    in place after an update.
    """
    conflicts = []
    for other in _overlapping(
        candidate.start_time, candidate.end_time, all_events, candidate.id
    ):
        conflict = _collision(candidate, other)
        if conflict is not None:
            conflicts.append(conflict)
    return conflicts


def has_conflict(candidate: Event, all_events: Iterable[Event]) -> bool:
    """Like ``find_conflicts`` but stops at the first collision."""
    return any(
        _collision(candidate, other) is not None
        for other in _overlapping(
            candidate.start_time, candidate.end_time, all_events, candidate.id
        )
    )
