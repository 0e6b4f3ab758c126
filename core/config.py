from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass(frozen=True)
class Settings:
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    max_upload_mb: int = 50
    preview_limit: int = 100
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def _as_int(value: Optional[str], default: int, *, lo: int = 1, hi: int = 10_000) -> int:
    if value is None or value == "":
        return default
    try:
        out = int(value)
    except Exception:
        return default
    return max(lo, min(hi, out))


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build settings from ``environ`` (defaults to ``os.environ`` after reading ``.env``)."""
    if environ is None:
        load_dotenv()
        environ = os.environ

    origins_raw = (environ.get("DATADASH_CORS_ORIGINS") or "").strip()
    origins = [o.strip() for o in origins_raw.split(",") if o.strip()] if origins_raw else list(DEFAULT_CORS_ORIGINS)

    log_level = (environ.get("DATADASH_LOG_LEVEL") or "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        log_level = "INFO"

    return Settings(
        cors_origins=origins,
        max_upload_mb=_as_int(environ.get("DATADASH_MAX_UPLOAD_MB"), 50),
        preview_limit=_as_int(environ.get("DATADASH_PREVIEW_LIMIT"), 100),
        log_level=log_level,
        host=(environ.get("DATADASH_HOST") or "127.0.0.1").strip(),
        port=_as_int(environ.get("DATADASH_PORT"), 8000, hi=65_535),
    )
