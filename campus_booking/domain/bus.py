"""Synchronous in-process bus for booking domain events."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable

from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)


class EventBus:
    """Publish/subscribe bus for domain events.

    Handlers run synchronously in registration order on the publishing
    thread, so they observe the state the publisher has just committed.
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, message_type: type, handler: Callable[[Any], None]) -> None:
        self._subscribers[message_type].append(handler)

    def publish(self, message: Any) -> None:
        handlers = self._subscribers.get(type(message), [])
        logger.debug(
            "Publishing %s to %d handler(s)", type(message).__name__, len(handlers)
        )
        for handler in handlers:
            handler(message)
