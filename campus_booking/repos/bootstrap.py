"""Repository construction and first-run seed data."""

from __future__ import annotations

from campus_booking.domain.models import Event, Facility, MediaResource, TimelineEntry
from campus_booking.repos.base import Repositories
from campus_booking.repos.json_file import JsonFileRepository
from campus_booking.repos.memory import InMemoryRepository
from campus_booking.utils.config import Settings
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)


SEED_FACILITIES = [
    ("Main Auditorium", 600, "Block A"),
    ("Seminar Hall 1", 120, "Block B"),
    ("Open Air Theater", 800, "Central Lawn"),
    ("Conference Room", 40, "Admin Tower"),
]

SEED_MEDIA = [
    ("Projector Kit", "projector"),
    ("PA System Large", "audio"),
    ("Wireless Mic Set", "audio"),
    ("LED Wall 12ft", "display"),
]


def create_memory_repositories() -> Repositories:
    return Repositories(
        facilities=InMemoryRepository(),
        media=InMemoryRepository(),
        events=InMemoryRepository(),
        timeline=InMemoryRepository(),
    )


def create_repositories(settings: Settings) -> Repositories:
    """Return the repositories selected by ``settings.storage_backend``."""
    if settings.storage_backend == "memory":
        return create_memory_repositories()

    data_dir = settings.data_dir
    logger.info("Using JSON store at %s", data_dir)
    return Repositories(
        facilities=JsonFileRepository(data_dir / "facilities.json", Facility),
        media=JsonFileRepository(data_dir / "media.json", MediaResource),
        events=JsonFileRepository(data_dir / "events.json", Event),
        timeline=JsonFileRepository(data_dir / "timeline.json", TimelineEntry),
    )


def seed_if_empty(repos: Repositories) -> None:
    """Load sample facilities and media into empty catalogs. Safe to re-run."""
    if repos.facilities.is_empty():
        for name, capacity, location in SEED_FACILITIES:
            repos.facilities.upsert(
                Facility(name=name, capacity=capacity, location=location)
            )
        logger.info("Seeded %d facilities", len(SEED_FACILITIES))
    else:
        logger.info("Facilities already present; skipping seed")

    if repos.media.is_empty():
        for name, category in SEED_MEDIA:
            repos.media.upsert(MediaResource(name=name, category=category))
        logger.info("Seeded %d media resources", len(SEED_MEDIA))
    else:
        logger.info("Media resources already present; skipping seed")
