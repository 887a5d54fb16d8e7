"""Booking lifecycle: creation, updates, status transitions and proofs."""

from __future__ import annotations

from threading import RLock
from typing import Callable, Sequence

from pydantic import ValidationError

from campus_booking.domain.bus import EventBus
from campus_booking.domain.errors import (
    ConflictError,
    ErrorCode,
    InputError,
    NotFoundError,
)
from campus_booking.domain.events import (
    EventBooked,
    EventStatusChanged,
    EventUpdated,
    ProofsAttached,
)
from campus_booking.domain.models import (
    Allocation,
    AllocationRequest,
    Event,
    EventDraft,
    EventPatch,
    EventStatus,
    Proof,
    TimelineEntry,
)
from campus_booking.repos.base import Repositories
from campus_booking.services.conflicts import find_conflicts
from campus_booking.services.proofs import ProofStorage, UploadedFile
from campus_booking.services.timeparse import parse_interval
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)

TransitionPolicy = Callable[[EventStatus, EventStatus], None]

# Every status may move to every status, including back out of completed.
ALLOWED_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    status: frozenset(EventStatus) for status in EventStatus
}

REQUIRED_FIELDS = (
    "title",
    "organizer",
    "faculty_in_charge",
    "start_time",
    "end_time",
    "allocations",
)

# Patch fields that move a booking in time or change what it claims.
SCHEDULE_FIELDS = frozenset({"start_time", "end_time", "allocations"})

DEFAULT_MAX_PROOF_FILES = 10


def validate_transition(current: EventStatus, target: EventStatus) -> None:
    """Default transition policy backed by ``ALLOWED_TRANSITIONS``."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InputError(
            f"cannot move booking from {current} to {target}",
            ErrorCode.INVALID_TRANSITION,
        )


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class EventLifecycleManager:
    """Owns every booking mutation.

    Create, update and attach_proofs hold a single writer lock across their
    read-validate-write sequence, so two requests for the same resource can
    never both pass validation before either is stored.
    """

    def __init__(
        self,
        repos: Repositories,
        bus: EventBus,
        proof_storage: ProofStorage,
        transition_policy: TransitionPolicy = validate_transition,
        max_proof_files: int = DEFAULT_MAX_PROOF_FILES,
    ) -> None:
        self._repos = repos
        self._bus = bus
        self._proof_storage = proof_storage
        self._transition_policy = transition_policy
        self._max_proof_files = max_proof_files
        self._write_lock = RLock()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_events(self, status: EventStatus | None = None) -> list[Event]:
        events = self._repos.events.list_all()
        if status is not None:
            events = [e for e in events if e.status == status]
        return events

    def get_event(self, event_id: str) -> Event:
        event = self._repos.events.get(event_id)
        if event is None:
            raise NotFoundError("event", event_id)
        return event

    def timeline(self, event_id: str) -> list[TimelineEntry]:
        self.get_event(event_id)
        return sorted(
            (e for e in self._repos.timeline.list_all() if e.event_id == event_id),
            key=lambda e: e.timestamp,
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create(self, draft: EventDraft) -> Event:
        for field in REQUIRED_FIELDS:
            if _is_blank(getattr(draft, field)):
                raise InputError(f"{field} is required")
        start, end = parse_interval(
            draft.start_time, draft.end_time, "start_time", "end_time"
        )

        with self._write_lock:
            event = Event(
                title=draft.title,
                description=draft.description,
                organizer=draft.organizer,
                faculty_in_charge=draft.faculty_in_charge,
                club=draft.club,
                start_time=start,
                end_time=end,
                allocations=self._resolve_allocation(draft.allocations),
                requirements=draft.requirements,
            )
            self._ensure_no_conflict(event)
            self._repos.events.upsert(event)
            try:
                self._bus.publish(
                    EventBooked(
                        event_id=event.id,
                        facility_id=event.allocations.facility_id,
                        media_ids=event.allocations.media_ids,
                    )
                )
            except Exception:
                logger.error("Rolling back booking %s after handler failure", event.id)
                self._repos.events.delete(event.id)
                raise
        return event

    def update(self, event_id: str, patch: EventPatch) -> Event:
        """Merge the fields present in ``patch`` into a stored booking.

        Any patch naming start_time, end_time or allocations is re-validated
        against all other bookings, even if the values are unchanged. Pure
        status changes are not.
        """
        changes = patch.model_dump(exclude_unset=True)
        revalidate = not SCHEDULE_FIELDS.isdisjoint(changes)

        with self._write_lock:
            existing = self.get_event(event_id)
            data = existing.model_dump()

            for field, value in changes.items():
                if field in SCHEDULE_FIELDS or value is None:
                    continue
                data[field] = value

            if "start_time" in changes or "end_time" in changes:
                data["start_time"], data["end_time"] = parse_interval(
                    changes.get("start_time", existing.start_time),
                    changes.get("end_time", existing.end_time),
                    "start_time",
                    "end_time",
                )
            if "allocations" in changes:
                if patch.allocations is None:
                    raise InputError("allocations is required")
                data["allocations"] = self._resolve_allocation(patch.allocations)

            if patch.status is not None:
                self._transition_policy(existing.status, patch.status)

            data["id"] = existing.id
            try:
                updated = Event.model_validate(data)
            except ValidationError as exc:
                raise InputError(str(exc)) from exc

            if revalidate:
                self._ensure_no_conflict(updated)
            self._repos.events.upsert(updated)

            try:
                self._bus.publish(
                    EventUpdated(
                        event_id=updated.id,
                        changed_fields=sorted(changes),
                        revalidated=revalidate,
                    )
                )
                if updated.status != existing.status:
                    self._bus.publish(
                        EventStatusChanged(
                            event_id=updated.id,
                            previous=existing.status,
                            current=updated.status,
                        )
                    )
            except Exception:
                logger.error("Restoring booking %s after handler failure", updated.id)
                self._repos.events.upsert(existing)
                raise
        return updated

    def attach_proofs(self, event_id: str, files: Sequence[UploadedFile]) -> list[Proof]:
        """Record proof files against a completed booking.

        Files are staged first and removed again if the booking cannot be
        saved, so callers see either both or neither.
        """
        with self._write_lock:
            event = self.get_event(event_id)
            if event.status != EventStatus.COMPLETED:
                raise InputError(
                    "proofs allowed only after completion",
                    ErrorCode.PROOFS_NOT_ALLOWED,
                )
            if not files:
                return []
            if len(files) > self._max_proof_files:
                raise InputError(
                    f"at most {self._max_proof_files} files per upload",
                    ErrorCode.INVALID_UPLOAD,
                )

            staged = self._proof_storage.stage(event.id, files)
            try:
                self._repos.events.upsert(
                    event.model_copy(update={"proofs": [*event.proofs, *staged]})
                )
            except Exception:
                logger.error("Rolling back %d staged proof(s) for %s", len(staged), event.id)
                self._proof_storage.discard(staged)
                raise
            try:
                self._bus.publish(ProofsAttached(event_id=event.id, proofs=staged))
            except Exception:
                logger.error("Restoring proofs of %s after handler failure", event.id)
                self._repos.events.upsert(event)
                self._proof_storage.discard(staged)
                raise
        return staged

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_allocation(self, request: AllocationRequest) -> Allocation:
        facility_name = ""
        if request.facility_id:
            facility = self._repos.facilities.get(request.facility_id)
            facility_name = facility.name if facility is not None else ""
        return Allocation(
            facility_id=request.facility_id or None,
            facility_name=facility_name,
            media_ids=request.media_ids,
        )

    def _ensure_no_conflict(self, candidate: Event) -> None:
        conflicts = find_conflicts(candidate, self._repos.events.list_all())
        if conflicts:
            logger.info(
                "Rejected booking %s: collides with %s",
                candidate.id,
                [c.event_id for c in conflicts],
            )
            raise ConflictError(conflicts)
