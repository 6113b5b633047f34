"""Aggregation logic for water-quality readings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from models.records import Reading, as_aware
from services.quality import ParameterStatus, classify


class HistoryOrder(str, Enum):
    """How each location's history is ordered; index 0 is always treated as latest."""

    timestamp = "timestamp"
    source = "source"


@dataclass
class LocationSummary:
    """Latest reading of one location plus its parameter range flags."""

    location_name: str
    latest: Reading
    parameters: ParameterStatus
    reading_count: int

    @property
    def quality(self) -> Optional[str]:
        return self.latest.quality


@dataclass
class AggregationResult:
    by_location: Dict[str, List[Reading]] = field(default_factory=dict)
    today: List[Reading] = field(default_factory=list)

    @property
    def locations(self) -> List[str]:
        return list(self.by_location)


def local_now() -> datetime:
    return datetime.now().astimezone()


def is_same_day(timestamp: datetime, now: datetime) -> bool:
    """True when ``timestamp`` falls on ``now``'s calendar date in ``now``'s timezone."""
    reference = as_aware(now)
    return as_aware(timestamp).astimezone(reference.tzinfo).date() == reference.date()


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def __init__(self, order: HistoryOrder = HistoryOrder.timestamp) -> None:
        self.order = HistoryOrder(order)

    def aggregate(self, readings: Iterable[Reading], now: datetime) -> AggregationResult:
        items = list(readings)
        return AggregationResult(
            by_location=self.group(items),
            today=self.today(items, now),
        )

    def group(self, readings: Iterable[Reading]) -> Dict[str, List[Reading]]:
        """Group readings by exact location name, keeping first-appearance key order."""
        groups: Dict[str, List[Reading]] = {}
        for reading in readings:
            groups.setdefault(reading.location_name, []).append(reading)

        if self.order is HistoryOrder.timestamp:
            for name, history in groups.items():
                groups[name] = sorted(
                    history,
                    key=lambda reading: as_aware(reading.timestamp),
                    reverse=True,
                )
        return groups

    def today(self, readings: Iterable[Reading], now: datetime) -> List[Reading]:
        return [reading for reading in readings if is_same_day(reading.timestamp, now)]

    def summarize(self, by_location: Dict[str, List[Reading]]) -> List[LocationSummary]:
        summaries: List[LocationSummary] = []
        for name, history in by_location.items():
            if not history:
                continue
            latest = history[0]
            summaries.append(
                LocationSummary(
                    location_name=name,
                    latest=latest,
                    parameters=classify(latest),
                    reading_count=len(history),
                )
            )
        return summaries
