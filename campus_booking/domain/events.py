"""Domain events emitted during the booking lifecycle."""

from __future__ import annotations

from pydantic import BaseModel, Field

from campus_booking.domain.models import EventStatus, Proof


class EventBooked(BaseModel):
    """Fired when a new booking request has been validated and persisted."""

    event_id: str
    facility_id: str | None = None
    media_ids: list[str] = Field(default_factory=list)


class EventUpdated(BaseModel):
    """Fired after a patch has been merged into a stored booking."""

    event_id: str
    changed_fields: list[str]
    revalidated: bool = False


class EventStatusChanged(BaseModel):
    event_id: str
    previous: EventStatus
    current: EventStatus


class ProofsAttached(BaseModel):
    """Fired when proof files are recorded against a completed booking."""

    event_id: str
    proofs: list[Proof]
