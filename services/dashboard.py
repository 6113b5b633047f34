"""In-memory dashboard state: last-known-good dataset and selection."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from models.records import Reading
from services.aggregator import Aggregator, LocationSummary, local_now
from services.fetcher import FetchError, FetchResult
from services.projection import (
    LocationDetail,
    ReadingStatus,
    TodayStats,
    location_detail,
    reading_status,
    today_stats,
)
from services.selection import (
    UNSELECTED,
    SelectedLocation,
    SelectionState,
    reconcile,
    selected_name,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass
class TodayView:
    stats: TodayStats
    readings: List[ReadingStatus]


@dataclass
class StoreStatus:
    has_data: bool
    last_updated: Optional[datetime]
    last_error: Optional[FetchError]
    last_error_at: Optional[datetime]
    reading_count: int
    location_count: int
    sequence: int


class DashboardStore:
    """Holds the dataset of the latest applied poll.

    Successful results replace the dataset wholesale. Failed results only
    update the error fields, so the previous dataset stays visible.
    """

    def __init__(
        self,
        aggregator: Optional[Aggregator] = None,
        selection_fallback: bool = True,
        clock: Clock = local_now,
    ) -> None:
        self.aggregator = aggregator or Aggregator()
        self.selection_fallback = selection_fallback
        self._clock = clock
        self._readings: Tuple[Reading, ...] = ()
        self._by_location: Dict[str, List[Reading]] = {}
        self._selection: SelectionState = UNSELECTED
        self._applied_sequence = 0
        self.has_data = False
        self.last_updated: Optional[datetime] = None
        self.last_error: Optional[FetchError] = None
        self.last_error_at: Optional[datetime] = None

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def readings(self) -> Tuple[Reading, ...]:
        return self._readings

    @property
    def applied_sequence(self) -> int:
        return self._applied_sequence

    def apply(self, result: FetchResult) -> bool:
        """Apply a poll result, returning ``True`` when the dataset changed."""
        if result.sequence and result.sequence < self._applied_sequence:
            logger.info(
                "Discarding stale poll result",
                extra={"sequence": result.sequence, "reason": "stale"},
            )
            return False

        if not result.ok:
            self.last_error = result.error
            self.last_error_at = result.completed_at
            return False

        readings = tuple(result.readings or ())
        self._readings = readings
        self._by_location = self.aggregator.group(readings)
        self._applied_sequence = max(self._applied_sequence, result.sequence)
        self.has_data = True
        self.last_updated = result.completed_at
        self.last_error = None
        self.last_error_at = None
        previous = self._selection
        self._selection = reconcile(previous, self.locations(), fallback=self.selection_fallback)
        if self._selection != previous:
            logger.info(
                "Selection reconciled",
                extra={"location": selected_name(self._selection)},
            )
        logger.debug(
            "Applied poll result",
            extra={"sequence": result.sequence, "reading_count": len(readings)},
        )
        return True

    def select(self, name: str) -> SelectionState:
        if name not in self._by_location:
            raise KeyError(f"Location {name!r} not found.")
        self._selection = SelectedLocation(name)
        logger.info("Selection changed", extra={"location": name})
        return self._selection

    def locations(self) -> List[str]:
        return list(self._by_location)

    def history(self, name: str) -> List[Reading]:
        try:
            return list(self._by_location[name])
        except KeyError:
            raise KeyError(f"Location {name!r} not found.") from None

    def summaries(self) -> List[LocationSummary]:
        return self.aggregator.summarize(self._by_location)

    def today_view(self, now: Optional[datetime] = None) -> TodayView:
        moment = now if now is not None else self._clock()
        readings = self.aggregator.today(self._readings, moment)
        return TodayView(
            stats=today_stats(readings),
            readings=[reading_status(reading) for reading in readings],
        )

    def detail(self, name: str) -> Optional[LocationDetail]:
        return location_detail(name, self.history(name))

    def selected_detail(self) -> Optional[LocationDetail]:
        name = selected_name(self._selection)
        if name is None or name not in self._by_location:
            return None
        return self.detail(name)

    def status(self) -> StoreStatus:
        return StoreStatus(
            has_data=self.has_data,
            last_updated=self.last_updated,
            last_error=self.last_error,
            last_error_at=self.last_error_at,
            reading_count=len(self._readings),
            location_count=len(self._by_location),
            sequence=self._applied_sequence,
        )
