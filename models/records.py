"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class Reading:
    """One water-quality sample taken at a single location."""

    location_name: str
    timestamp: datetime
    ph: float
    temperature_c: float
    orp_mv: float
    quality: Optional[str] = None


def as_aware(value: datetime) -> datetime:
    """Attach the host local timezone to naive datetimes."""
    if value.tzinfo is None:
        return value.astimezone()
    return value
