"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    database_path: Path
    log_level: str
    valet_surcharge: float


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive copies via `replace`."""
    return Settings(
        app_name=os.getenv("PARKING_APP_NAME", "Parking Allocation Service"),
        app_version=os.getenv("PARKING_APP_VERSION", "1.0.0"),
        database_path=Path(os.getenv("PARKING_DATABASE_PATH", "data/parking.db")),
        log_level=os.getenv("PARKING_LOG_LEVEL", "INFO"),
        valet_surcharge=float(os.getenv("PARKING_VALET_SURCHARGE", "5")),
    )
