"""Tests for the availability engine."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from campus_booking.domain.errors import NotFoundError
from campus_booking.domain.models import AllocationRequest, EventDraft, EventPatch, EventStatus
from campus_booking.services.availability import compute_availability, is_facility_available


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 6, 1, hour, minute, tzinfo=timezone.utc)


def _book(env, facility_id, media_ids=(), start=_at(10), end=_at(11)):
    return env.manager.create(
        EventDraft(
            title="Debate finals",
            organizer="Debate Society",
            faculty_in_charge="Prof. Iyer",
            start_time=start,
            end_time=end,
            allocations=AllocationRequest(facility_id=facility_id, media_ids=list(media_ids)),
        )
    )


def test_everything_available_without_bookings(env):
    result = compute_availability(env.repos, _at(10), _at(11))

    assert {f.id for f in result.available_facilities} == {env.auditorium.id, env.seminar.id}
    assert {m.id for m in result.available_media} == {env.projector.id, env.mic.id}
    assert result.taken_facility_ids == []
    assert result.taken_media_ids == []


def test_overlapping_booking_takes_its_resources(env):
    _book(env, env.auditorium.id, [env.projector.id])

    result = compute_availability(env.repos, _at(10, 30), _at(12))

    assert [f.id for f in result.available_facilities] == [env.seminar.id]
    assert [m.id for m in result.available_media] == [env.mic.id]
    assert result.taken_facility_ids == [env.auditorium.id]
    assert result.taken_media_ids == [env.projector.id]


def test_touching_interval_sees_resources_free(env):
    _book(env, env.auditorium.id, [env.projector.id])

    result = compute_availability(env.repos, _at(11), _at(12))

    assert result.taken_facility_ids == []
    assert result.taken_media_ids == []


def test_available_and_taken_are_disjoint(env):
    _book(env, env.auditorium.id, [env.mic.id], start=_at(9), end=_at(10))
    _book(env, env.seminar.id, [env.projector.id], start=_at(10), end=_at(12))

    for start, end in [(_at(8), _at(9)), (_at(9, 30), _at(10, 30)), (_at(11), _at(13))]:
        result = compute_availability(env.repos, start, end)
        available = {f.id for f in result.available_facilities}
        assert available.isdisjoint(result.taken_facility_ids)
        assert available | set(result.taken_facility_ids) == {
            env.auditorium.id,
            env.seminar.id,
        }


@pytest.mark.parametrize("status", [EventStatus.CANCELLED, EventStatus.REJECTED])
def test_released_booking_shows_resources_again(env, status):
    event = _book(env, env.auditorium.id, [env.projector.id])
    env.manager.update(event.id, EventPatch(status=status))

    result = compute_availability(env.repos, _at(10), _at(11))

    assert env.auditorium.id in {f.id for f in result.available_facilities}
    assert env.projector.id in {m.id for m in result.available_media}


def test_completed_booking_stays_taken(env):
    event = _book(env, env.auditorium.id)
    env.manager.update(event.id, EventPatch(status=EventStatus.COMPLETED))

    result = compute_availability(env.repos, _at(10), _at(11))

    assert result.taken_facility_ids == [env.auditorium.id]


def test_exclude_ignores_the_given_booking(env):
    event = _book(env, env.auditorium.id, [env.projector.id])

    result = compute_availability(env.repos, _at(10), _at(11), exclude_event_id=event.id)

    assert result.taken_facility_ids == []
    assert result.taken_media_ids == []


def test_is_facility_available(env):
    _book(env, env.auditorium.id)

    assert is_facility_available(env.repos, env.auditorium.id, _at(10), _at(11)) is False
    assert is_facility_available(env.repos, env.auditorium.id, _at(11), _at(12)) is True
    assert is_facility_available(env.repos, env.seminar.id, _at(10), _at(11)) is True


def test_is_facility_available_unknown_facility(env):
    with pytest.raises(NotFoundError):
        is_facility_available(env.repos, "missing", _at(10), _at(11))
