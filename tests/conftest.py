"""Shared fixtures. Runs before any test module imports the app."""

from __future__ import annotations

import os
import tempfile
from types import SimpleNamespace

import pytest

_TEST_DATA_DIR = tempfile.mkdtemp(prefix="campus-booking-tests-")
os.environ["CAMPUS_BOOKING_STORAGE"] = "memory"
os.environ["CAMPUS_BOOKING_DATA_DIR"] = _TEST_DATA_DIR
os.environ["CAMPUS_BOOKING_LOG_LEVEL"] = "WARNING"

from campus_booking.domain.bus import EventBus  # noqa: E402
from campus_booking.domain.handlers import HandlerRegistry  # noqa: E402
from campus_booking.domain.models import Facility, MediaResource  # noqa: E402
from campus_booking.repos.bootstrap import create_memory_repositories  # noqa: E402
from campus_booking.services.lifecycle import EventLifecycleManager  # noqa: E402
from campus_booking.services.proofs import LocalProofStorage  # noqa: E402


@pytest.fixture()
def env(tmp_path):
    """Fresh bus + repos + lifecycle manager with a small catalog."""
    bus = EventBus()
    repos = create_memory_repositories()
    storage = LocalProofStorage(tmp_path / "uploads")
    manager = EventLifecycleManager(
        repos=repos, bus=bus, proof_storage=storage, max_proof_files=3
    )
    registry = HandlerRegistry(bus=bus, timeline_repo=repos.timeline)

    auditorium = repos.facilities.upsert(
        Facility(name="Main Auditorium", capacity=600, location="Block A")
    )
    seminar = repos.facilities.upsert(
        Facility(name="Seminar Hall 1", capacity=120, location="Block B")
    )
    projector = repos.media.upsert(MediaResource(name="Projector Kit", category="projector"))
    mic = repos.media.upsert(MediaResource(name="Wireless Mic Set", category="audio"))

    return SimpleNamespace(
        bus=bus,
        repos=repos,
        storage=storage,
        manager=manager,
        registry=registry,
        auditorium=auditorium,
        seminar=seminar,
        projector=projector,
        mic=mic,
    )
