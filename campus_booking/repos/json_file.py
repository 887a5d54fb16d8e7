"""JSON-file repository: one file per collection holding a list of records."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from threading import RLock

from pydantic import ValidationError

from campus_booking.domain.errors import ErrorCode, PersistenceError
from campus_booking.repos.base import ModelT, Repository
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)


class JsonFileRepository(Repository[ModelT]):
    """Reads the whole file on every call and rewrites it on every mutation.

    Unreadable or malformed files raise ``PersistenceError`` instead of being
    treated as an empty collection. Writes go through a temporary file and
    ``os.replace`` so a crash never leaves a half-written collection behind.
    """

    def __init__(self, path: Path, model: type[ModelT]) -> None:
        self._path = Path(path)
        self._model = model
        self._lock = RLock()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            self._write([])

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> list[ModelT]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise PersistenceError(f"cannot read {self._path.name}: {exc}") from exc

        if not text.strip():
            return []
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            logger.error("Corrupt store %s: %s", self._path, exc)
            raise PersistenceError(f"{self._path.name} is not valid JSON") from exc
        if not isinstance(raw, list):
            raise PersistenceError(f"{self._path.name} does not contain a list")
        try:
            return [self._model.model_validate(item) for item in raw]
        except ValidationError as exc:
            logger.error("Invalid record in %s: %s", self._path, exc)
            raise PersistenceError(f"{self._path.name} holds an invalid record") from exc

    def _write(self, records: list[ModelT]) -> None:
        payload = [record.model_dump(mode="json") for record in records]
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(payload, handle, indent=2)
                os.replace(tmp_name, self._path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(
                f"cannot write {self._path.name}: {exc}", ErrorCode.STORE_UNWRITABLE
            ) from exc

    def list_all(self) -> list[ModelT]:
        with self._lock:
            return self._read()

    def get(self, record_id: str) -> ModelT | None:
        with self._lock:
            return next((r for r in self._read() if r.id == record_id), None)

    def upsert(self, record: ModelT) -> ModelT:
        with self._lock:
            records = self._read()
            for index, existing in enumerate(records):
                if existing.id == record.id:
                    records[index] = record
                    break
            else:
                records.append(record)
            self._write(records)
        return record

    def delete(self, record_id: str) -> bool:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.id != record_id]
            if len(remaining) == len(records):
                return False
            self._write(remaining)
            return True
