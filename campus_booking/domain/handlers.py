"""Domain event handlers: maintain the per-booking audit timeline."""

from __future__ import annotations

from campus_booking.domain.bus import EventBus
from campus_booking.domain.events import (
    EventBooked,
    EventStatusChanged,
    EventUpdated,
    ProofsAttached,
)
from campus_booking.domain.models import TimelineEntry, TimelineEntryType
from campus_booking.repos.base import Repository
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the timeline store."""

    def __init__(self, bus: EventBus, timeline_repo: Repository[TimelineEntry]) -> None:
        self.bus = bus
        self.timeline_repo = timeline_repo
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventBooked, self.on_event_booked)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventStatusChanged, self.on_status_changed)
        self.bus.subscribe(ProofsAttached, self.on_proofs_attached)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_booked(self, event: EventBooked) -> None:
        logger.info(
            "Booking %s created (facility=%s, media=%s)",
            event.event_id,
            event.facility_id,
            event.media_ids,
        )
        self.timeline_repo.upsert(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.CREATED,
                payload={
                    "facility_id": event.facility_id,
                    "media_ids": event.media_ids,
                },
            )
        )

    def on_event_updated(self, event: EventUpdated) -> None:
        self.timeline_repo.upsert(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.UPDATED,
                payload={
                    "changed_fields": event.changed_fields,
                    "revalidated": event.revalidated,
                },
            )
        )

    def on_status_changed(self, event: EventStatusChanged) -> None:
        logger.info(
            "Booking %s moved %s -> %s", event.event_id, event.previous, event.current
        )
        self.timeline_repo.upsert(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.STATUS_CHANGED,
                payload={"from": event.previous.value, "to": event.current.value},
            )
        )

    def on_proofs_attached(self, event: ProofsAttached) -> None:
        self.timeline_repo.upsert(
            TimelineEntry(
                event_id=event.event_id,
                type=TimelineEntryType.PROOFS_ATTACHED,
                payload={"files": [proof.url for proof in event.proofs]},
            )
        )
