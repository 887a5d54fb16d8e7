"""Read-only availability queries over the facility and media catalogs."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from campus_booking.domain.errors import NotFoundError
from campus_booking.domain.models import Availability, Event
from campus_booking.repos.base import Repositories
from campus_booking.services.conflicts import overlapping_events


def taken_resources(
    events: Iterable[Event],
    start: datetime,
    end: datetime,
    exclude_event_id: str | None = None,
) -> tuple[set[str], set[str]]:
    """Return the facility ids and media ids claimed during ``[start, end)``."""
    claimed = overlapping_events(start, end, events, exclude_event_id)
    facility_ids = {
        e.allocations.facility_id for e in claimed if e.allocations.facility_id
    }
    media_ids = {media_id for e in claimed for media_id in e.allocations.media_ids}
    return facility_ids, media_ids


def compute_availability(
    repos: Repositories,
    start: datetime,
    end: datetime,
    exclude_event_id: str | None = None,
) -> Availability:
    """Split the catalogs into free resources and claimed ids for the interval.

    Reads the latest committed state without locking; the result is a preview,
    bookings are re-checked when they are created or updated.
    """
    taken_facilities, taken_media = taken_resources(
        repos.events.list_all(), start, end, exclude_event_id
    )
    return Availability(
        available_facilities=[
            f for f in repos.facilities.list_all() if f.id not in taken_facilities
        ],
        available_media=[m for m in repos.media.list_all() if m.id not in taken_media],
        taken_facility_ids=sorted(taken_facilities),
        taken_media_ids=sorted(taken_media),
    )


def is_facility_available(
    repos: Repositories,
    facility_id: str,
    start: datetime,
    end: datetime,
) -> bool:
    if repos.facilities.get(facility_id) is None:
        raise NotFoundError("facility", facility_id)
    taken_facilities, _ = taken_resources(repos.events.list_all(), start, end)
    return facility_id not in taken_facilities
