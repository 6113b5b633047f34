from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from models.records import Reading
from services.projection import (
    chart_series,
    headline,
    location_detail,
    status_log,
    today_stats,
)
from services.quality import BadgeTone

PHT = timezone(timedelta(hours=8))


def _reading(
    timestamp: datetime,
    ph: float = 7.0,
    temperature: float = 25.0,
    quality: str | None = "GOOD",
    location: str = "North",
) -> Reading:
    return Reading(
        location_name=location,
        timestamp=timestamp,
        ph=ph,
        temperature_c=temperature,
        orp_mv=450.0,
        quality=quality,
    )


def _history() -> list[Reading]:
    # Newest first, as produced by the aggregator.
    return [
        _reading(datetime(2024, 5, 3, 9, tzinfo=PHT), ph=7.3, quality="GOOD"),
        _reading(datetime(2024, 5, 2, 9, tzinfo=PHT), ph=6.2, quality="BAD"),
        _reading(datetime(2024, 5, 1, 9, tzinfo=PHT), ph=7.0, quality="EXCELLENT"),
    ]


def test_chart_series_is_chronological_with_date_labels() -> None:
    points = chart_series(_history(), tz=PHT)

    assert [point.label for point in points] == ["05/01/2024", "05/02/2024", "05/03/2024"]
    assert [point.ph for point in points] == [7.0, 6.2, 7.3]


def test_headline_reports_latest_values() -> None:
    latest = _history()[0]

    card = headline("North", latest)

    assert card.location_name == "North"
    assert card.ph == 7.3
    assert card.temperature_c == 25.0
    assert card.orp_mv == 450.0
    assert card.timestamp == latest.timestamp
    assert card.badge is BadgeTone.good


def test_status_log_is_numbered_newest_first() -> None:
    entries = status_log(_history())

    assert [entry.position for entry in entries] == [1, 2, 3]
    assert [entry.quality for entry in entries] == ["GOOD", "BAD", "EXCELLENT"]
    assert [entry.badge for entry in entries] == [
        BadgeTone.good,
        BadgeTone.alert,
        BadgeTone.excellent,
    ]
    assert entries[0].timestamp > entries[1].timestamp > entries[2].timestamp


def test_status_log_sorts_source_ordered_history() -> None:
    oldest_first = list(reversed(_history()))

    entries = status_log(oldest_first)

    assert [entry.quality for entry in entries] == ["GOOD", "BAD", "EXCELLENT"]
    assert entries[0].timestamp > entries[1].timestamp > entries[2].timestamp


def test_projections_accept_mixed_naive_and_aware_timestamps() -> None:
    naive = _reading(datetime(2024, 5, 1, 8), ph=6.9)
    aware = _reading(datetime(2024, 5, 2, 8, tzinfo=timezone.utc), ph=7.4)

    points = chart_series([aware, naive], tz=timezone.utc)
    detail = location_detail("North", [aware, naive], tz=timezone.utc)

    assert [point.ph for point in points] == [6.9, 7.4]
    assert points[1].label == "05/02/2024"
    assert detail is not None
    assert [entry.timestamp for entry in detail.log] == [aware.timestamp, naive.timestamp]


def test_location_detail_combines_projections() -> None:
    detail = location_detail("North", _history(), tz=PHT)

    assert detail is not None
    assert detail.headline.ph == 7.3
    assert detail.parameters.ph_in_range is True
    assert len(detail.chart) == 3
    assert len(detail.log) == 3


def test_location_detail_without_history_is_none() -> None:
    assert location_detail("North", []) is None


def test_today_stats_counts_pass_through_tags() -> None:
    moment = datetime(2024, 5, 2, 9, tzinfo=PHT)
    readings = [
        _reading(moment, temperature=20.0, quality="GOOD"),
        _reading(moment, temperature=24.0, quality="BAD"),
        _reading(moment, temperature=28.0, quality="WARNING"),
        _reading(moment, temperature=30.0, quality=None),
    ]

    stats = today_stats(readings)

    assert stats.total == 4
    assert stats.good_count == 1
    assert stats.bad_count == 1
    assert stats.mean_temperature == 25.5
    assert stats.has_data is True


def test_today_stats_empty_set_has_placeholder_mean() -> None:
    stats = today_stats([])

    assert stats.total == 0
    assert stats.good_count == 0
    assert stats.bad_count == 0
    assert stats.mean_temperature is None
    assert stats.has_data is False
    assert not (isinstance(stats.mean_temperature, float) and math.isnan(stats.mean_temperature))
