"""Storage for proof-of-completion files attached to bookings."""

from __future__ import annotations

import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from campus_booking.domain.errors import ErrorCode, PersistenceError
from campus_booking.domain.models import Proof
from campus_booking.utils.logger import get_logger


logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^\w.-]")


@dataclass(frozen=True)
class UploadedFile:
    name: str
    content: bytes


class ProofStorage(ABC):
    """Accepts named byte blobs and returns locators for them."""

    @abstractmethod
    def stage(self, event_id: str, files: Sequence[UploadedFile]) -> list[Proof]:
        """Store every file or none; return one Proof per file, in order."""
        ...

    @abstractmethod
    def discard(self, proofs: Sequence[Proof]) -> None:
        """Remove files previously returned by ``stage``."""
        ...


def safe_filename(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name) or "file"


class LocalProofStorage(ProofStorage):
    """Writes files under ``<root>/<event_id>/<millis>-<safe name>``."""

    def __init__(self, root: Path, url_prefix: str = "/uploads") -> None:
        self._root = Path(root)
        self._url_prefix = url_prefix.rstrip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _target(self, directory: Path, name: str) -> Path:
        stem = f"{int(time.time() * 1000)}-{safe_filename(name)}"
        candidate = directory / stem
        counter = 1
        while candidate.exists():
            candidate = directory / f"{counter}-{stem}"
            counter += 1
        return candidate

    def path_for(self, proof: Proof) -> Path:
        relative = proof.url[len(self._url_prefix):].lstrip("/")
        return self._root / relative

    def stage(self, event_id: str, files: Sequence[UploadedFile]) -> list[Proof]:
        directory = self._root / event_id
        staged: list[Proof] = []
        try:
            directory.mkdir(parents=True, exist_ok=True)
            for upload in files:
                target = self._target(directory, upload.name)
                target.write_bytes(upload.content)
                staged.append(
                    Proof(
                        name=upload.name,
                        url=f"{self._url_prefix}/{event_id}/{target.name}",
                    )
                )
        except OSError as exc:
            self.discard(staged)
            raise PersistenceError(
                f"cannot store proof files: {exc}", ErrorCode.STORE_UNWRITABLE
            ) from exc
        logger.info("Stored %d proof file(s) for booking %s", len(staged), event_id)
        return staged

    def discard(self, proofs: Sequence[Proof]) -> None:
        for proof in proofs:
            path = self.path_for(proof)
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove staged proof %s", path)
