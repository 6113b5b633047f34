"""Per-parameter safe bands and quality tag helpers.

Two independent signals describe a reading. The source attaches a coarse
``quality`` tag that is displayed verbatim, while the dashboard checks each
parameter against a fixed safe band to colour values in or out of range. The
bands never feed back into the tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.records import Reading


@dataclass(frozen=True)
class QualityBand:
    """Inclusive safe range for a single measured parameter."""

    parameter: str
    minimum: float
    maximum: float
    unit: str = ""

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


PH_BAND = QualityBand(parameter="pH", minimum=6.5, maximum=8.5)
TEMPERATURE_BAND = QualityBand(parameter="temperature", minimum=20.0, maximum=30.0, unit="°C")
ORP_BAND = QualityBand(parameter="ORP", minimum=400.0, maximum=500.0, unit="mV")


@dataclass(frozen=True)
class ParameterStatus:
    ph_in_range: bool
    temperature_in_range: bool
    orp_in_range: bool

    @property
    def all_in_range(self) -> bool:
        return self.ph_in_range and self.temperature_in_range and self.orp_in_range


def classify(reading: Reading) -> ParameterStatus:
    return ParameterStatus(
        ph_in_range=PH_BAND.contains(reading.ph),
        temperature_in_range=TEMPERATURE_BAND.contains(reading.temperature_c),
        orp_in_range=ORP_BAND.contains(reading.orp_mv),
    )


class QualityTag(str, Enum):
    """Quality tags known to be emitted by the data source."""

    excellent = "EXCELLENT"
    good = "GOOD"
    warning = "WARNING"
    bad = "BAD"


class BadgeTone(str, Enum):
    excellent = "excellent"
    good = "good"
    warning = "warning"
    alert = "alert"


_TONES = {
    QualityTag.excellent.value: BadgeTone.excellent,
    QualityTag.good.value: BadgeTone.good,
    QualityTag.warning.value: BadgeTone.warning,
}


def badge_for(quality: Optional[str]) -> BadgeTone:
    # Unknown and missing tags render like BAD.
    if quality is None:
        return BadgeTone.alert
    return _TONES.get(quality, BadgeTone.alert)
