"""FastAPI application: entry point for the campus booking service."""

from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, File, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from campus_booking.domain.bus import EventBus
from campus_booking.domain.errors import (
    ConflictError,
    DomainError,
    ErrorCode,
    InputError,
    NotFoundError,
    PersistenceError,
)
from campus_booking.domain.handlers import HandlerRegistry
from campus_booking.domain.models import (
    Availability,
    Event,
    EventDraft,
    EventPatch,
    EventStatus,
    Facility,
    FacilityAvailabilityResponse,
    FacilityCreate,
    FacilityUpdate,
    MediaCreate,
    MediaResource,
    MediaUpdate,
    ProofUploadResponse,
    TimelineEntry,
)
from campus_booking.repos.bootstrap import create_repositories, seed_if_empty
from campus_booking.services.availability import compute_availability, is_facility_available
from campus_booking.services.catalog import CatalogService
from campus_booking.services.lifecycle import EventLifecycleManager
from campus_booking.services.proofs import LocalProofStorage, UploadedFile
from campus_booking.services.timeparse import parse_interval
from campus_booking.utils.config import get_settings
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)

# ── Singletons (created at import time for simplicity) ────────────────
settings = get_settings()
event_bus = EventBus()
repos = create_repositories(settings)
proof_storage = LocalProofStorage(settings.uploads_dir, settings.uploads_url_prefix)
catalog = CatalogService(repos)
lifecycle = EventLifecycleManager(
    repos=repos,
    bus=event_bus,
    proof_storage=proof_storage,
    max_proof_files=settings.max_proof_files,
)
handler_registry = HandlerRegistry(bus=event_bus, timeline_repo=repos.timeline)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.seed_on_startup:
        seed_if_empty(repos)
    logger.info("%s started (storage=%s)", settings.app_name, settings.storage_backend)
    yield


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
app.mount(
    settings.uploads_url_prefix,
    StaticFiles(directory=settings.uploads_dir, check_dir=False),
    name="uploads",
)


# ── Error mapping ─────────────────────────────────────────────────────

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (InputError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PersistenceError, 500),
]


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = next(
        (code for error_type, code in _STATUS_BY_ERROR if isinstance(exc, error_type)),
        500,
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    body: dict = {"detail": exc.message, "code": exc.code.value}
    if isinstance(exc, ConflictError):
        body["conflicts"] = [c.model_dump() for c in exc.conflicts]
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema failures are input errors: same 400 body as InputError."""
    problems = []
    for err in exc.errors():
        # loc starts with "body", "query" or "path"
        loc = err.get("loc") or ("request",)
        field = ".".join(str(part) for part in loc[1:]) or str(loc[0])
        problems.append(f"{field}: {err['msg']}")
    return JSONResponse(
        status_code=400,
        content={"detail": "; ".join(problems), "code": ErrorCode.INVALID_FIELD.value},
    )


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict:
    return {"ok": True}


@app.get("/facilities", response_model=list[Facility])
def list_facilities() -> list[Facility]:
    return catalog.list_facilities()


@app.post("/facilities", response_model=Facility, status_code=201)
def add_facility(payload: FacilityCreate) -> Facility:
    return catalog.add_facility(payload)


@app.put("/facilities/{facility_id}", response_model=Facility)
def update_facility(facility_id: str, payload: FacilityUpdate) -> Facility:
    return catalog.update_facility(facility_id, payload)


@app.delete("/facilities/{facility_id}", status_code=204)
def delete_facility(facility_id: str) -> Response:
    catalog.delete_facility(facility_id)
    return Response(status_code=204)


@app.get(
    "/facilities/{facility_id}/availability",
    response_model=FacilityAvailabilityResponse,
)
def facility_availability(
    facility_id: str, start: str | None = None, end: str | None = None
) -> FacilityAvailabilityResponse:
    """Report whether a single facility is free for ``[start, end)``."""
    start_at, end_at = parse_interval(start, end)
    return FacilityAvailabilityResponse(
        available=is_facility_available(repos, facility_id, start_at, end_at)
    )


@app.get("/media", response_model=list[MediaResource])
def list_media() -> list[MediaResource]:
    return catalog.list_media()


@app.post("/media", response_model=MediaResource, status_code=201)
def add_media(payload: MediaCreate) -> MediaResource:
    return catalog.add_media(payload)


@app.put("/media/{media_id}", response_model=MediaResource)
def update_media(media_id: str, payload: MediaUpdate) -> MediaResource:
    return catalog.update_media(media_id, payload)


@app.delete("/media/{media_id}", status_code=204)
def delete_media(media_id: str) -> Response:
    catalog.delete_media(media_id)
    return Response(status_code=204)


@app.get("/availability", response_model=Availability)
def availability(
    start: str | None = None, end: str | None = None, exclude: str | None = None
) -> Availability:
    """Preview free facilities and media for an interval.

    Pass *exclude* with an event id to ignore that booking's own claims, e.g.
    when rescheduling it.
    """
    start_at, end_at = parse_interval(start, end)
    return compute_availability(repos, start_at, end_at, exclude_event_id=exclude)


@app.get("/events", response_model=list[Event])
def list_events(status: EventStatus | None = None) -> list[Event]:
    return lifecycle.list_events(status)


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    return lifecycle.get_event(event_id)


@app.get("/events/{event_id}/timeline", response_model=list[TimelineEntry])
def event_timeline(event_id: str) -> list[TimelineEntry]:
    return lifecycle.timeline(event_id)


@app.post("/events", response_model=Event, status_code=201)
def create_event(draft: EventDraft) -> Event:
    """Book resources; the new event starts out pending."""
    return lifecycle.create(draft)


@app.put("/events/{event_id}", response_model=Event)
def update_event(event_id: str, patch: EventPatch) -> Event:
    return lifecycle.update(event_id, patch)


@app.post("/events/{event_id}/proofs", response_model=ProofUploadResponse)
def attach_proofs(
    event_id: str, files: list[UploadFile] | None = File(None)
) -> ProofUploadResponse:
    """Upload proof-of-completion files for a completed event."""
    uploads = [
        UploadedFile(name=upload.filename or "file", content=upload.file.read())
        for upload in files or []
    ]
    stored = lifecycle.attach_proofs(event_id, uploads)
    return ProofUploadResponse(uploaded=len(stored), files=stored)


def run() -> None:
    """Serve the app with uvicorn using the configured host and port."""
    uvicorn.run(
        "campus_booking.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
