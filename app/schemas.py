"""Pydantic schemas for the source payload and the HTTP API layer."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.records import Reading
from services.quality import BadgeTone


def parse_timestamp(value: Any) -> datetime:
    """Parse a source timestamp into an aware datetime.

    Numbers are epoch milliseconds. Strings are ISO-8601; a missing offset
    means host local time.
    """
    if isinstance(value, bool):
        raise ValueError("Timestamp must be a string or a number.")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError("Timestamp is out of range.") from exc
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.astimezone()
    if not isinstance(value, str):
        raise ValueError("Timestamp must be a string or a number.")

    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.astimezone()

    return parsed


class ReadingPayload(BaseModel):
    """One element of the source's JSON array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    location_name: str = Field(..., alias="DormName", min_length=1)
    timestamp: datetime
    ph: float = Field(..., alias="pH", allow_inf_nan=False)
    temperature_c: float = Field(..., alias="temperature", allow_inf_nan=False)
    orp_mv: float = Field(..., alias="ORP", allow_inf_nan=False)
    quality: Optional[str] = None

    @field_validator("location_name", mode="before")
    @classmethod
    def _require_string(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("DormName must be a string.")
        return value

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> datetime:
        return parse_timestamp(value)

    @field_validator("ph", "temperature_c", "orp_mv", mode="before")
    @classmethod
    def _require_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("Value must be a JSON number.")
        return value

    def to_reading(self) -> Reading:
        return Reading(
            location_name=self.location_name,
            timestamp=self.timestamp,
            ph=self.ph,
            temperature_c=self.temperature_c,
            orp_mv=self.orp_mv,
            quality=self.quality,
        )


class ParameterFlags(BaseModel):
    """Per-parameter safe-band checks, independent of the quality tag."""

    ph_in_range: bool
    temperature_in_range: bool
    orp_in_range: bool
    all_in_range: bool


class ReadingOut(BaseModel):
    location_name: str
    timestamp: datetime
    ph: float
    temperature_c: float
    orp_mv: float
    quality: Optional[str] = None
    badge: BadgeTone
    parameters: ParameterFlags


class StatusResponse(BaseModel):
    has_data: bool
    last_updated: Optional[datetime] = None
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None
    reading_count: int = Field(..., ge=0)
    location_count: int = Field(..., ge=0)
    sequence: int = Field(..., ge=0, description="Highest applied poll sequence.")


class LocationsResponse(BaseModel):
    locations: List[str] = Field(default_factory=list)
    selected: Optional[str] = None


class LocationSummaryOut(BaseModel):
    location_name: str
    reading_count: int = Field(..., ge=0)
    quality: Optional[str] = None
    badge: BadgeTone
    latest: ReadingOut


class SummariesResponse(BaseModel):
    has_data: bool
    summaries: List[LocationSummaryOut] = Field(default_factory=list)


class TodayStatsOut(BaseModel):
    total: int = Field(..., ge=0)
    good_count: int = Field(..., ge=0)
    bad_count: int = Field(..., ge=0)
    mean_temperature: Optional[float] = Field(
        default=None, description="Null when there are no readings today."
    )
    has_data: bool


class TodayResponse(BaseModel):
    has_data: bool
    stats: TodayStatsOut
    readings: List[ReadingOut] = Field(default_factory=list)


class HeadlineOut(BaseModel):
    location_name: str
    ph: float
    temperature_c: float
    orp_mv: float
    timestamp: datetime
    quality: Optional[str] = None
    badge: BadgeTone


class ChartPointOut(BaseModel):
    label: str
    ph: float
    timestamp: datetime


class StatusLogEntryOut(BaseModel):
    position: int = Field(..., ge=1)
    timestamp: datetime
    quality: Optional[str] = None
    badge: BadgeTone


class LocationDetailResponse(BaseModel):
    location_name: str
    headline: HeadlineOut
    parameters: ParameterFlags
    chart: List[ChartPointOut] = Field(default_factory=list)
    log: List[StatusLogEntryOut] = Field(default_factory=list)


class SelectionRequest(BaseModel):
    location: str = Field(..., min_length=1)


class SelectionResponse(BaseModel):
    selected: Optional[str] = None
    detail: Optional[LocationDetailResponse] = None
