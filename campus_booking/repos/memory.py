"""In-memory repository, used for tests and ephemeral deployments."""

from __future__ import annotations

from threading import RLock

from campus_booking.repos.base import ModelT, Repository


class InMemoryRepository(Repository[ModelT]):
    """Dict-backed store keyed by id.

    Records are copied on the way in and out so callers never share mutable
    state with the store.
    """

    def __init__(self) -> None:
        self._store: dict[str, ModelT] = {}
        self._lock = RLock()

    def list_all(self) -> list[ModelT]:
        with self._lock:
            return [record.model_copy(deep=True) for record in self._store.values()]

    def get(self, record_id: str) -> ModelT | None:
        with self._lock:
            record = self._store.get(record_id)
            return record.model_copy(deep=True) if record is not None else None

    def upsert(self, record: ModelT) -> ModelT:
        with self._lock:
            self._store[record.id] = record.model_copy(deep=True)
        return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._store.pop(record_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
