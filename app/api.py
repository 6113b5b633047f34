"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.schemas import (
    ChartPointOut,
    HeadlineOut,
    LocationDetailResponse,
    LocationsResponse,
    LocationSummaryOut,
    ParameterFlags,
    ReadingOut,
    SelectionRequest,
    SelectionResponse,
    StatusLogEntryOut,
    StatusResponse,
    SummariesResponse,
    TodayResponse,
    TodayStatsOut,
)
from models.records import Reading
from services.aggregator import LocationSummary
from services.dashboard import DashboardStore
from services.projection import LocationDetail, ReadingStatus
from services.quality import ParameterStatus, badge_for, classify
from services.selection import selected_name

router = APIRouter()


def get_store(request: Request) -> DashboardStore:
    return request.app.state.monitor.store


def _flags(parameters: ParameterStatus) -> ParameterFlags:
    return ParameterFlags(
        ph_in_range=parameters.ph_in_range,
        temperature_in_range=parameters.temperature_in_range,
        orp_in_range=parameters.orp_in_range,
        all_in_range=parameters.all_in_range,
    )


def _reading_out(reading: Reading, parameters: ParameterStatus | None = None) -> ReadingOut:
    return ReadingOut(
        location_name=reading.location_name,
        timestamp=reading.timestamp,
        ph=reading.ph,
        temperature_c=reading.temperature_c,
        orp_mv=reading.orp_mv,
        quality=reading.quality,
        badge=badge_for(reading.quality),
        parameters=_flags(parameters or classify(reading)),
    )


def _status_reading_out(entry: ReadingStatus) -> ReadingOut:
    return _reading_out(entry.reading, entry.parameters)


def _summary_out(summary: LocationSummary) -> LocationSummaryOut:
    return LocationSummaryOut(
        location_name=summary.location_name,
        reading_count=summary.reading_count,
        quality=summary.quality,
        badge=badge_for(summary.quality),
        latest=_reading_out(summary.latest, summary.parameters),
    )


def _detail_out(detail: LocationDetail) -> LocationDetailResponse:
    headline = detail.headline
    return LocationDetailResponse(
        location_name=detail.location_name,
        headline=HeadlineOut(
            location_name=headline.location_name,
            ph=headline.ph,
            temperature_c=headline.temperature_c,
            orp_mv=headline.orp_mv,
            timestamp=headline.timestamp,
            quality=headline.quality,
            badge=headline.badge,
        ),
        parameters=_flags(detail.parameters),
        chart=[
            ChartPointOut(label=point.label, ph=point.ph, timestamp=point.timestamp)
            for point in detail.chart
        ],
        log=[
            StatusLogEntryOut(
                position=entry.position,
                timestamp=entry.timestamp,
                quality=entry.quality,
                badge=entry.badge,
            )
            for entry in detail.log
        ],
    )


def _selection_out(store: DashboardStore) -> SelectionResponse:
    detail = store.selected_detail()
    return SelectionResponse(
        selected=selected_name(store.selection),
        detail=_detail_out(detail) if detail is not None else None,
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/status",
    response_model=StatusResponse,
    summary="Freshness of the dataset and the last fetch error, if any.",
)
async def get_status(store: DashboardStore = Depends(get_store)) -> StatusResponse:
    current = store.status()
    return StatusResponse(
        has_data=current.has_data,
        last_updated=current.last_updated,
        last_error=str(current.last_error) if current.last_error else None,
        last_error_at=current.last_error_at,
        reading_count=current.reading_count,
        location_count=current.location_count,
        sequence=current.sequence,
    )


@router.get(
    "/locations",
    response_model=LocationsResponse,
    summary="Monitored locations in first-appearance order.",
)
async def list_locations(store: DashboardStore = Depends(get_store)) -> LocationsResponse:
    return LocationsResponse(
        locations=store.locations(),
        selected=selected_name(store.selection),
    )


@router.get(
    "/summaries",
    response_model=SummariesResponse,
    summary="Latest reading per location with parameter range flags.",
)
async def list_summaries(store: DashboardStore = Depends(get_store)) -> SummariesResponse:
    return SummariesResponse(
        has_data=store.has_data,
        summaries=[_summary_out(summary) for summary in store.summaries()],
    )


@router.get(
    "/today",
    response_model=TodayResponse,
    summary="Readings taken today and their counters.",
)
async def get_today(store: DashboardStore = Depends(get_store)) -> TodayResponse:
    view = store.today_view()
    stats = view.stats
    return TodayResponse(
        has_data=store.has_data,
        stats=TodayStatsOut(
            total=stats.total,
            good_count=stats.good_count,
            bad_count=stats.bad_count,
            mean_temperature=stats.mean_temperature,
            has_data=stats.has_data,
        ),
        readings=[_status_reading_out(entry) for entry in view.readings],
    )


@router.get(
    "/locations/{name:path}",
    response_model=LocationDetailResponse,
    summary="Headline values, trend chart and status log for one location.",
)
async def get_location(
    name: str,
    store: DashboardStore = Depends(get_store),
) -> LocationDetailResponse:
    try:
        detail = store.detail(name)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location {name!r} not found.",
        ) from exc
    if detail is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location {name!r} has no readings.",
        )
    return _detail_out(detail)


@router.get(
    "/selection",
    response_model=SelectionResponse,
    summary="Currently focused location and its detail.",
)
async def get_selection(store: DashboardStore = Depends(get_store)) -> SelectionResponse:
    return _selection_out(store)


@router.put(
    "/selection",
    response_model=SelectionResponse,
    summary="Focus the detail view on a location.",
)
async def put_selection(
    body: SelectionRequest,
    store: DashboardStore = Depends(get_store),
) -> SelectionResponse:
    try:
        store.select(body.location)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Location {body.location!r} not found.",
        ) from exc
    return _selection_out(store)
