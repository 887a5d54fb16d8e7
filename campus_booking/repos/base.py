"""Repository interface.

Repositories hold one collection of records keyed by ``id`` and must be
swappable; the booking core depends only on this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from campus_booking.domain.models import Event, Facility, MediaResource, TimelineEntry


ModelT = TypeVar("ModelT", bound=BaseModel)


class Repository(ABC, Generic[ModelT]):
    """Keyed record collection with read-all, upsert and delete."""

    @abstractmethod
    def list_all(self) -> list[ModelT]:
        """Return every record in insertion order."""
        ...

    @abstractmethod
    def get(self, record_id: str) -> ModelT | None:
        """Return a record by id, or None if not found."""
        ...

    @abstractmethod
    def upsert(self, record: ModelT) -> ModelT:
        """Insert or replace the record with the same id."""
        ...

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Remove a record; return False if it did not exist."""
        ...

    def is_empty(self) -> bool:
        return not self.list_all()


@dataclass(frozen=True)
class Repositories:
    facilities: Repository[Facility]
    media: Repository[MediaResource]
    events: Repository[Event]
    timeline: Repository[TimelineEntry]
