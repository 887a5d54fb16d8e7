"""Admin operations on the facility and media catalogs."""

from __future__ import annotations

from pydantic import BaseModel, ValidationError

from campus_booking.domain.errors import InputError, NotFoundError
from campus_booking.domain.models import (
    Facility,
    FacilityCreate,
    FacilityUpdate,
    MediaCreate,
    MediaResource,
    MediaUpdate,
)
from campus_booking.repos.base import ModelT, Repositories, Repository
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)


def _require_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise InputError("name is required")
    return name


def _edit(repo: Repository[ModelT], kind: str, record_id: str, patch: BaseModel) -> ModelT:
    existing = repo.get(record_id)
    if existing is None:
        raise NotFoundError(kind, record_id)
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes:
        _require_name(changes["name"])
    try:
        updated = type(existing).model_validate(
            {**existing.model_dump(), **changes, "id": existing.id}
        )
    except ValidationError as exc:
        raise InputError(str(exc)) from exc
    return repo.upsert(updated)


def _remove(repo: Repository, kind: str, record_id: str) -> None:
    if not repo.delete(record_id):
        raise NotFoundError(kind, record_id)
    # Bookings keep their stale reference; there is no cascade.
    logger.info("Deleted %s %s", kind, record_id)


class CatalogService:
    """Facility and media CRUD. Existing bookings are never touched."""

    def __init__(self, repos: Repositories) -> None:
        self._repos = repos

    # ------------------------------------------------------------------
    # Facilities
    # ------------------------------------------------------------------

    def list_facilities(self) -> list[Facility]:
        return self._repos.facilities.list_all()

    def get_facility(self, facility_id: str) -> Facility:
        facility = self._repos.facilities.get(facility_id)
        if facility is None:
            raise NotFoundError("facility", facility_id)
        return facility

    def add_facility(self, payload: FacilityCreate) -> Facility:
        facility = Facility(
            name=_require_name(payload.name),
            capacity=payload.capacity,
            location=payload.location,
            resources=payload.resources,
        )
        logger.info("Adding facility %s (%s)", facility.name, facility.id)
        return self._repos.facilities.upsert(facility)

    def update_facility(self, facility_id: str, patch: FacilityUpdate) -> Facility:
        return _edit(self._repos.facilities, "facility", facility_id, patch)

    def delete_facility(self, facility_id: str) -> None:
        _remove(self._repos.facilities, "facility", facility_id)

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def list_media(self) -> list[MediaResource]:
        return self._repos.media.list_all()

    def add_media(self, payload: MediaCreate) -> MediaResource:
        media = MediaResource(name=_require_name(payload.name), category=payload.category)
        logger.info("Adding media resource %s (%s)", media.name, media.id)
        return self._repos.media.upsert(media)

    def update_media(self, media_id: str, patch: MediaUpdate) -> MediaResource:
        return _edit(self._repos.media, "media", media_id, patch)

    def delete_media(self, media_id: str) -> None:
        _remove(self._repos.media, "media", media_id)
