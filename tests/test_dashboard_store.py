from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models.records import Reading
from services.aggregator import Aggregator, HistoryOrder
from services.dashboard import DashboardStore
from services.fetcher import FetchError, FetchResult
from services.selection import UNSELECTED, SelectedLocation

PHT = timezone(timedelta(hours=8))
NOW = datetime(2024, 5, 2, 12, 0, tzinfo=PHT)


def _reading(
    location: str,
    timestamp: datetime = NOW,
    temperature: float = 25.0,
    quality: str = "GOOD",
) -> Reading:
    return Reading(
        location_name=location,
        timestamp=timestamp,
        ph=7.0,
        temperature_c=temperature,
        orp_mv=450.0,
        quality=quality,
    )


def _success(sequence: int, *readings: Reading) -> FetchResult:
    return FetchResult(sequence=sequence, readings=list(readings))


def _failure(sequence: int, reason: str = "network") -> FetchResult:
    return FetchResult(sequence=sequence, error=FetchError(reason, "source unreachable"))


@pytest.fixture()
def store() -> DashboardStore:
    return DashboardStore(clock=lambda: NOW)


def test_store_starts_in_loading_state(store: DashboardStore) -> None:
    assert store.has_data is False
    assert store.selection is UNSELECTED
    assert store.locations() == []
    assert store.selected_detail() is None
    status = store.status()
    assert status.reading_count == 0
    assert status.sequence == 0


def test_success_replaces_dataset_and_selects_first(store: DashboardStore) -> None:
    assert store.apply(_success(1, _reading("North"), _reading("South"))) is True

    assert store.has_data is True
    assert store.locations() == ["North", "South"]
    assert store.selection == SelectedLocation("North")
    assert store.last_updated is not None

    store.apply(_success(2, _reading("East")))

    assert store.locations() == ["East"]
    assert [reading.location_name for reading in store.readings] == ["East"]


def test_failure_retains_last_known_good(store: DashboardStore) -> None:
    store.apply(_success(1, _reading("North"), _reading("South", quality="BAD")))
    before_summaries = store.summaries()
    before_today = store.today_view()
    before_updated = store.last_updated

    assert store.apply(_failure(2)) is False

    assert store.has_data is True
    assert store.summaries() == before_summaries
    assert store.today_view() == before_today
    assert store.last_updated == before_updated
    assert store.last_error is not None
    assert store.last_error.reason == "network"
    assert store.last_error_at is not None


def test_success_clears_previous_error(store: DashboardStore) -> None:
    store.apply(_failure(1))
    assert store.has_data is False
    assert store.last_error is not None

    store.apply(_success(2, _reading("North")))

    assert store.last_error is None
    assert store.last_error_at is None


def test_stale_success_is_discarded(store: DashboardStore) -> None:
    store.apply(_success(2, _reading("New Hall")))

    assert store.apply(_success(1, _reading("Old Hall"))) is False

    assert store.locations() == ["New Hall"]
    assert store.applied_sequence == 2


def test_stale_failure_is_ignored(store: DashboardStore) -> None:
    store.apply(_success(3, _reading("North")))

    store.apply(_failure(2))

    assert store.last_error is None


def test_late_success_after_newer_failure_is_applied(store: DashboardStore) -> None:
    store.apply(_failure(2))

    assert store.apply(_success(1, _reading("North"))) is True

    assert store.locations() == ["North"]


def test_user_selection_persists_across_refreshes(store: DashboardStore) -> None:
    store.apply(_success(1, _reading("North"), _reading("South")))
    store.select("South")

    store.apply(_success(2, _reading("North"), _reading("South")))

    assert store.selection == SelectedLocation("South")
    detail = store.selected_detail()
    assert detail is not None
    assert detail.location_name == "South"


def test_selection_falls_back_when_location_disappears(store: DashboardStore) -> None:
    store.apply(_success(1, _reading("North"), _reading("South")))
    store.select("South")

    store.apply(_success(2, _reading("North")))

    assert store.selection == SelectedLocation("North")


def test_selection_can_be_left_dangling() -> None:
    store = DashboardStore(selection_fallback=False, clock=lambda: NOW)
    store.apply(_success(1, _reading("North"), _reading("South")))
    store.select("South")

    store.apply(_success(2, _reading("North")))

    assert store.selection == SelectedLocation("South")
    assert store.selected_detail() is None


def test_select_unknown_location_raises(store: DashboardStore) -> None:
    store.apply(_success(1, _reading("North")))

    with pytest.raises(KeyError):
        store.select("Nowhere")
    with pytest.raises(KeyError):
        store.detail("Nowhere")


def test_today_view_uses_injected_clock(store: DashboardStore) -> None:
    store.apply(
        _success(
            1,
            _reading("North", temperature=22.0),
            _reading("South", temperature=26.0, quality="BAD"),
            _reading("North", timestamp=NOW - timedelta(days=1), temperature=40.0),
        )
    )

    view = store.today_view()

    assert view.stats.total == 2
    assert view.stats.good_count == 1
    assert view.stats.bad_count == 1
    assert view.stats.mean_temperature == 24.0
    assert [entry.reading.location_name for entry in view.readings] == ["North", "South"]
    assert view.readings[0].parameters.temperature_in_range is True

    tomorrow = store.today_view(now=NOW + timedelta(days=1))
    assert tomorrow.stats.has_data is False
    assert tomorrow.stats.mean_temperature is None


def test_history_order_policy_is_used() -> None:
    store = DashboardStore(aggregator=Aggregator(order=HistoryOrder.source), clock=lambda: NOW)
    older = _reading("North", timestamp=NOW - timedelta(days=1))
    newer = _reading("North")

    store.apply(_success(1, older, newer))

    assert store.history("North") == [older, newer]
