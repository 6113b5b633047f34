"""Chart- and card-ready projections derived from aggregated readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import List, Optional, Sequence

from models.records import Reading, as_aware
from services.quality import BadgeTone, ParameterStatus, QualityTag, badge_for, classify

CHART_LABEL_FORMAT = "%m/%d/%Y"


@dataclass
class ChartPoint:
    label: str
    ph: float
    timestamp: datetime


@dataclass
class Headline:
    location_name: str
    ph: float
    temperature_c: float
    orp_mv: float
    timestamp: datetime
    quality: Optional[str]
    badge: BadgeTone


@dataclass
class StatusLogEntry:
    position: int
    timestamp: datetime
    quality: Optional[str]
    badge: BadgeTone


@dataclass
class ReadingStatus:
    reading: Reading
    parameters: ParameterStatus
    badge: BadgeTone


@dataclass
class LocationDetail:
    location_name: str
    headline: Headline
    parameters: ParameterStatus
    chart: List[ChartPoint] = field(default_factory=list)
    log: List[StatusLogEntry] = field(default_factory=list)


@dataclass
class TodayStats:
    """Counters for today's readings.

    ``mean_temperature`` is ``None`` and ``has_data`` is false when there are no
    readings, so consumers can show a placeholder instead of a NaN.
    """

    total: int = 0
    good_count: int = 0
    bad_count: int = 0
    mean_temperature: Optional[float] = None
    has_data: bool = False


def format_label(timestamp: datetime, tz: Optional[tzinfo] = None) -> str:
    return timestamp.astimezone(tz).strftime(CHART_LABEL_FORMAT)


def chart_series(history: Sequence[Reading], tz: Optional[tzinfo] = None) -> List[ChartPoint]:
    """Oldest-first ``(label, pH)`` points for the trend chart."""
    ordered = sorted(history, key=lambda reading: as_aware(reading.timestamp))
    return [
        ChartPoint(label=format_label(reading.timestamp, tz), ph=reading.ph, timestamp=reading.timestamp)
        for reading in ordered
    ]


def headline(location_name: str, latest: Reading) -> Headline:
    return Headline(
        location_name=location_name,
        ph=latest.ph,
        temperature_c=latest.temperature_c,
        orp_mv=latest.orp_mv,
        timestamp=latest.timestamp,
        quality=latest.quality,
        badge=badge_for(latest.quality),
    )


def status_log(history: Sequence[Reading]) -> List[StatusLogEntry]:
    """Newest-first entries; ties keep their history order."""
    ordered = sorted(history, key=lambda reading: as_aware(reading.timestamp), reverse=True)
    return [
        StatusLogEntry(
            position=position,
            timestamp=reading.timestamp,
            quality=reading.quality,
            badge=badge_for(reading.quality),
        )
        for position, reading in enumerate(ordered, start=1)
    ]


def location_detail(
    location_name: str,
    history: Sequence[Reading],
    tz: Optional[tzinfo] = None,
) -> Optional[LocationDetail]:
    if not history:
        return None
    latest = history[0]
    return LocationDetail(
        location_name=location_name,
        headline=headline(location_name, latest),
        parameters=classify(latest),
        chart=chart_series(history, tz),
        log=status_log(history),
    )


def reading_status(reading: Reading) -> ReadingStatus:
    return ReadingStatus(reading=reading, parameters=classify(reading), badge=badge_for(reading.quality))


def today_stats(readings: Sequence[Reading]) -> TodayStats:
    stats = TodayStats(total=len(readings))
    if not readings:
        return stats

    total_temperature = 0.0
    for reading in readings:
        total_temperature += reading.temperature_c
        if reading.quality == QualityTag.good.value:
            stats.good_count += 1
        elif reading.quality == QualityTag.bad.value:
            stats.bad_count += 1

    stats.mean_temperature = total_temperature / len(readings)
    stats.has_data = True
    return stats
