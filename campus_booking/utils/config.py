"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


_ENV_PREFIX = "CAMPUS_BOOKING_"


def _env(name: str, default: str) -> str:
    return os.environ.get(f"{_ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(f"{_ENV_PREFIX}{name}")
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    storage_backend: str
    data_dir: Path
    uploads_dir: Path
    uploads_url_prefix: str
    max_proof_files: int
    seed_on_startup: bool
    host: str
    port: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; call ``cache_clear`` to re-read env."""
    data_dir = Path(_env("DATA_DIR", "data"))
    uploads_dir = Path(_env("UPLOADS_DIR", str(data_dir / "uploads")))
    storage_backend = _env("STORAGE", "json").lower()
    if storage_backend not in {"json", "memory"}:
        raise ValueError(f"Unsupported storage backend: {storage_backend}")
    return Settings(
        app_name=_env("APP_NAME", "Campus Resource Booking Service"),
        app_version=_env("APP_VERSION", "0.1.0"),
        log_level=_env("LOG_LEVEL", "INFO"),
        storage_backend=storage_backend,
        data_dir=data_dir,
        uploads_dir=uploads_dir,
        uploads_url_prefix=_env("UPLOADS_URL_PREFIX", "/uploads"),
        max_proof_files=int(_env("MAX_PROOF_FILES", "10")),
        seed_on_startup=_env_bool("SEED_ON_STARTUP", True),
        host=_env("HOST", "127.0.0.1"),
        port=int(_env("PORT", "3000")),
    )
