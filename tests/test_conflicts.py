"""Tests for the overlap predicate and the conflict validator."""

from datetime import datetime, timezone

from campus_booking.domain.models import Allocation, Event, EventStatus
from campus_booking.services.conflicts import (
    find_conflicts,
    has_conflict,
    overlapping_events,
    overlaps,
)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute, tzinfo=timezone.utc)


def _make_event(
    start: datetime,
    end: datetime,
    facility_id: str | None = "hall",
    media_ids: list[str] | None = None,
    status: EventStatus = EventStatus.APPROVED,
    **overrides,
) -> Event:
    return Event(
        title=overrides.pop("title", "Existing"),
        organizer="Robotics Club",
        faculty_in_charge="Dr. Rao",
        start_time=start,
        end_time=end,
        allocations=Allocation(facility_id=facility_id, media_ids=media_ids or []),
        status=status,
        **overrides,
    )


# ---------------------------------------------------------------------------
# overlaps
# ---------------------------------------------------------------------------


def test_no_overlap():
    assert overlaps(_at(8), _at(9), _at(10), _at(11)) is False


def test_partial_overlap():
    assert overlaps(_at(9), _at(10, 30), _at(10), _at(11)) is True
    assert overlaps(_at(10), _at(11), _at(9), _at(10, 30)) is True


def test_exact_boundary_no_conflict():
    """When one interval ends exactly as the other starts, there is no overlap."""
    assert overlaps(_at(9), _at(10), _at(10), _at(11)) is False
    assert overlaps(_at(10), _at(11), _at(9), _at(10)) is False


def test_contained_interval_overlaps():
    assert overlaps(_at(9), _at(12), _at(10), _at(11)) is True
    assert overlaps(_at(10), _at(11), _at(10), _at(11)) is True


# ---------------------------------------------------------------------------
# overlapping_events
# ---------------------------------------------------------------------------


def test_overlapping_events_skips_released_and_excluded():
    active = _make_event(_at(10), _at(11))
    cancelled = _make_event(_at(10), _at(11), status=EventStatus.CANCELLED)
    rejected = _make_event(_at(10), _at(11), status=EventStatus.REJECTED)
    excluded = _make_event(_at(10), _at(11))

    result = overlapping_events(
        _at(10, 30), _at(12), [active, cancelled, rejected, excluded], excluded.id
    )

    assert [e.id for e in result] == [active.id]


# ---------------------------------------------------------------------------
# find_conflicts / has_conflict
# ---------------------------------------------------------------------------


def test_same_facility_overlapping_conflicts():
    existing = _make_event(_at(10), _at(11))
    candidate = _make_event(_at(10, 30), _at(11, 30), status=EventStatus.PENDING)

    conflicts = find_conflicts(candidate, [existing])

    assert len(conflicts) == 1
    assert conflicts[0].event_id == existing.id
    assert conflicts[0].facility_id == "hall"
    assert conflicts[0].media_ids == []
    assert has_conflict(candidate, [existing]) is True


def test_same_facility_touching_does_not_conflict():
    existing = _make_event(_at(10), _at(11))
    candidate = _make_event(_at(11), _at(12))

    assert find_conflicts(candidate, [existing]) == []
    assert has_conflict(candidate, [existing]) is False


def test_shared_media_conflicts_without_facility():
    existing = _make_event(_at(10), _at(11), facility_id=None, media_ids=["proj", "mic"])
    candidate = _make_event(_at(10), _at(11), facility_id="other", media_ids=["mic", "led"])

    conflicts = find_conflicts(candidate, [existing])

    assert len(conflicts) == 1
    assert conflicts[0].facility_id is None
    assert conflicts[0].media_ids == ["mic"]


def test_events_without_facility_do_not_collide_on_null():
    existing = _make_event(_at(10), _at(11), facility_id=None)
    candidate = _make_event(_at(10), _at(11), facility_id=None)

    assert has_conflict(candidate, [existing]) is False


def test_disjoint_resources_do_not_conflict():
    existing = _make_event(_at(10), _at(11), facility_id="a", media_ids=["proj"])
    candidate = _make_event(_at(10), _at(11), facility_id="b", media_ids=["mic"])

    assert find_conflicts(candidate, [existing]) == []


def test_cancelled_and_rejected_events_release_resources():
    cancelled = _make_event(_at(10), _at(11), status=EventStatus.CANCELLED)
    rejected = _make_event(_at(10), _at(11), status=EventStatus.REJECTED)
    candidate = _make_event(_at(10), _at(11))

    assert has_conflict(candidate, [cancelled, rejected]) is False


def test_completed_events_keep_resources():
    completed = _make_event(_at(10), _at(11), status=EventStatus.COMPLETED)
    candidate = _make_event(_at(10), _at(11))

    assert has_conflict(candidate, [completed]) is True


def test_candidate_is_not_compared_with_itself():
    stored = _make_event(_at(10), _at(11))
    moved = stored.model_copy(update={"start_time": _at(10, 30)})

    assert find_conflicts(moved, [stored]) == []


def test_reports_every_colliding_event():
    first = _make_event(_at(9), _at(10, 30), media_ids=["proj"])
    second = _make_event(_at(10, 30), _at(12), facility_id="annex", media_ids=["proj"])
    candidate = _make_event(_at(10), _at(11), media_ids=["proj"])

    conflicts = find_conflicts(candidate, [first, second])

    assert {c.event_id for c in conflicts} == {first.id, second.id}
    by_id = {c.event_id: c for c in conflicts}
    assert by_id[first.id].facility_id == "hall"
    assert by_id[second.id].facility_id is None
    assert by_id[second.id].media_ids == ["proj"]
