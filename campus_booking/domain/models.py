"""Domain models for campus resource bookings."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class EventStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Statuses whose events no longer hold their allocated resources.
RELEASED_STATUSES = frozenset({EventStatus.CANCELLED, EventStatus.REJECTED})


class TimelineEntryType(StrEnum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    PROOFS_ATTACHED = "proofs_attached"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Facility(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    capacity: int = 0
    location: str = ""
    resources: list[str] = Field(default_factory=list)


class MediaResource(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    category: str = ""


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


class Allocation(BaseModel):
    """Resources claimed by a booking.

    ``facility_name`` is a snapshot taken when the facility is assigned; it is
    not kept in sync with later facility edits.
    """

    facility_id: str | None = None
    facility_name: str = ""
    media_ids: list[str] = Field(default_factory=list)

    @field_validator("media_ids")
    @classmethod
    def _dedupe_media(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class Catering(BaseModel):
    model_config = ConfigDict(extra="allow")

    snacks: bool = False
    lunch: bool = False
    headcount: int = 0


class Stay(BaseModel):
    model_config = ConfigDict(extra="allow")

    needed: bool = False
    rooms: int = 0
    nights: int = 0


class Transport(BaseModel):
    model_config = ConfigDict(extra="allow")

    needed: bool = False
    pickup_location: str = ""
    pickup_time: str = ""


class Requirements(BaseModel):
    """Logistics requested alongside a booking. Carried as-is."""

    model_config = ConfigDict(extra="allow")

    catering: Catering = Field(default_factory=Catering)
    stay: Stay = Field(default_factory=Stay)
    transport: Transport = Field(default_factory=Transport)


class Proof(BaseModel):
    name: str
    url: str


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str = ""
    organizer: str
    faculty_in_charge: str
    club: str = ""
    start_time: datetime
    end_time: datetime
    allocations: Allocation = Field(default_factory=Allocation)
    requirements: Requirements = Field(default_factory=Requirements)
    status: EventStatus = EventStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    proofs: list[Proof] = Field(default_factory=list)

    @field_validator("start_time", "end_time", "created_at")
    @classmethod
    def _aware(cls, value: datetime) -> datetime:
        return _as_utc(value)

    @model_validator(mode="after")
    def _end_after_start(self) -> Event:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @property
    def is_active(self) -> bool:
        """True while the booking still occupies its allocated resources."""
        return self.status not in RELEASED_STATUSES


class TimelineEntry(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    type: TimelineEntryType
    payload: dict = Field(default_factory=dict)


class Conflict(BaseModel):
    """A single collision between a candidate booking and an existing one."""

    event_id: str
    facility_id: str | None = None
    media_ids: list[str] = Field(default_factory=list)


class Availability(BaseModel):
    available_facilities: list[Facility]
    available_media: list[MediaResource]
    taken_facility_ids: list[str]
    taken_media_ids: list[str]


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class FacilityCreate(BaseModel):
    name: str | None = None
    capacity: int = 0
    location: str = ""
    resources: list[str] = Field(default_factory=list)


class FacilityUpdate(BaseModel):
    name: str | None = None
    capacity: int | None = None
    location: str | None = None
    resources: list[str] | None = None


class MediaCreate(BaseModel):
    name: str | None = None
    category: str = ""


class MediaUpdate(BaseModel):
    name: str | None = None
    category: str | None = None


class AllocationRequest(BaseModel):
    facility_id: str | None = None
    media_ids: list[str] = Field(default_factory=list)


class EventDraft(BaseModel):
    """Booking request. Required fields are checked by the lifecycle manager
    so that omissions surface as input errors rather than schema errors."""

    title: str | None = None
    description: str = ""
    organizer: str | None = None
    faculty_in_charge: str | None = None
    club: str = ""
    start_time: str | datetime | None = None
    end_time: str | datetime | None = None
    allocations: AllocationRequest | None = None
    requirements: Requirements = Field(default_factory=Requirements)


class EventPatch(BaseModel):
    """Partial update. Only fields explicitly present are applied."""

    title: str | None = None
    description: str | None = None
    organizer: str | None = None
    faculty_in_charge: str | None = None
    club: str | None = None
    start_time: str | datetime | None = None
    end_time: str | datetime | None = None
    allocations: AllocationRequest | None = None
    requirements: Requirements | None = None
    status: EventStatus | None = None


class FacilityAvailabilityResponse(BaseModel):
    available: bool


class ProofUploadResponse(BaseModel):
    uploaded: int
    files: list[Proof]
