"""
Air quality data module for the AirGuide system.

This module defines the records that carry air-quality data through a
request: AirFetchResult, the audit trail of one station-resolving fetch, and
AirQualityView, the normalized projection of a raw upstream reading that the
decision logic and the caller work with.

Raw readings stay plain JSON dictionaries. Grades arrive as Korean text
(좋음/보통/나쁨/매우나쁨) and are mapped to numeric tiers 1-4 here.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import FALLBACK_HUMIDITY, FALLBACK_TEMP

UI_GRADES = ("GOOD", "NORMAL", "BAD", "VERY_BAD")

KOREAN_GRADE_MAP = {
    "좋음": 1,
    "보통": 2,
    "나쁨": 3,
    "매우나쁨": 4,
}

POLLUTANTS = ("pm25", "pm10", "o3", "no2", "co", "so2")

# Unknown or missing grade text is treated as moderate
DEFAULT_NUMERIC_GRADE = 2


def clamp_grade(grade: int) -> int:
    """Clamps a numeric grade into the 1-4 range."""
    return max(1, min(4, int(grade)))


def to_ui_grade(grade: int) -> str:
    """Maps a numeric grade 1-4 to GOOD/NORMAL/BAD/VERY_BAD."""
    return UI_GRADES[clamp_grade(grade) - 1]


def grade_from_korean(text: Optional[str]) -> int:
    """Maps Korean grade text to 1-4; missing, unknown or non-text grades map to 2."""
    if not isinstance(text, str):
        return DEFAULT_NUMERIC_GRADE
    return KOREAN_GRADE_MAP.get(text.replace(" ", ""), DEFAULT_NUMERIC_GRADE)


def to_optional_text(value: Any) -> Optional[str]:
    """Returns value if it is non-blank text, otherwise None."""
    if isinstance(value, str) and value.strip():
        return value
    return None


def to_optional_float(value: Any) -> Optional[float]:
    """Converts a JSON value to float, returning None for missing or non-numeric values."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


@dataclass
class AirFetchResult:
    """
    Audit trail of one station-resolving fetch across all candidates.

    Attributes:
        data: The raw reading that was kept, or None if every candidate failed
        resolved_station: Station the kept reading belongs to
        tried_stations: Every candidate generated for the request, in order, or
            the requested name alone when it yields no candidates
        used_fallback_candidate: True if the reading came from a candidate or
            station other than the first candidate
        used_fallback_data: True if no genuine reading was found and a
            placeholder response was kept instead
        unknown_signature_candidates: Candidates that answered with the
            unknown-station signature
    """

    data: Optional[dict[str, Any]]
    resolved_station: str
    tried_stations: list[str] = field(default_factory=list)
    used_fallback_candidate: bool = False
    used_fallback_data: bool = False
    unknown_signature_candidates: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """
        Converts the fetch result to a serializable dictionary.

        Returns:
            {data, resolvedStation, triedStations, usedFallbackCandidate,
            usedFallbackData, unknownSignatureCandidates}
        """
        return {
            "data": self.data,
            "resolvedStation": self.resolved_station,
            "triedStations": list(self.tried_stations),
            "usedFallbackCandidate": self.used_fallback_candidate,
            "usedFallbackData": self.used_fallback_data,
            "unknownSignatureCandidates": list(self.unknown_signature_candidates),
        }


@dataclass
class AirQualityView:
    """
    Normalized air-quality reading for one station.

    Attributes:
        station_name: Station the values belong to
        grade: Overall UI grade (GOOD/NORMAL/BAD/VERY_BAD). Built from the
            worse of the PM10/PM2.5 grades and later overwritten with the
            final decision grade
        sido_name: Province name, if provided upstream
        data_time: Measurement time string as provided upstream (KST)
        pm25_value ... so2_value: Pollutant concentrations, None when absent
        grades: Numeric grade (1-4) per pollutant
        temp: Temperature in Celsius, fallback value when absent upstream
        humidity: Relative humidity in percent, fallback value when absent
        has_detail: False when the view was built without any upstream data
    """

    station_name: str
    grade: str = "NORMAL"
    sido_name: Optional[str] = None
    data_time: Optional[str] = None
    pm25_value: Optional[float] = None
    pm10_value: Optional[float] = None
    o3_value: Optional[float] = None
    no2_value: Optional[float] = None
    co_value: Optional[float] = None
    so2_value: Optional[float] = None
    grades: dict[str, int] = field(default_factory=dict)
    temp: Optional[float] = FALLBACK_TEMP
    humidity: Optional[float] = FALLBACK_HUMIDITY
    has_detail: bool = False

    @classmethod
    def from_raw(cls, raw: Optional[dict[str, Any]], fallback_station: str) -> "AirQualityView":
        """
        Projects a raw upstream reading into a view.

        With no reading at all, returns a NORMAL placeholder view for the
        fallback station with default temperature and humidity so the caller
        always has something renderable.

        Args:
            raw: Raw JSON reading from the air-quality upstream, or None
            fallback_station: Station name used when the reading names none

        Returns:
            The normalized AirQualityView
        """
        if not raw:
            return cls(station_name=fallback_station)

        grades = {name: grade_from_korean(raw.get(f"{name}_grade")) for name in POLLUTANTS}
        worst = max(grades["pm10"], grades["pm25"])

        # Upstream uses either "temp" or "temperature"
        temp = to_optional_float(raw.get("temp"))
        if temp is None:
            temp = to_optional_float(raw.get("temperature"))
        humidity = to_optional_float(raw.get("humidity"))

        return cls(
            station_name=to_optional_text(raw.get("stationName")) or fallback_station,
            grade=to_ui_grade(worst),
            sido_name=to_optional_text(raw.get("sidoName")),
            data_time=to_optional_text(raw.get("dataTime")),
            pm25_value=to_optional_float(raw.get("pm25_value")),
            pm10_value=to_optional_float(raw.get("pm10_value")),
            o3_value=to_optional_float(raw.get("o3_value")),
            no2_value=to_optional_float(raw.get("no2_value")),
            co_value=to_optional_float(raw.get("co_value")),
            so2_value=to_optional_float(raw.get("so2_value")),
            grades=grades,
            temp=FALLBACK_TEMP if temp is None else temp,
            humidity=FALLBACK_HUMIDITY if humidity is None else humidity,
            has_detail=True,
        )

    def to_dict(self) -> dict[str, object]:
        """
        Converts the view to the JSON shape returned to callers.

        Pollutant value keys keep the upstream snake_case names; "value" mirrors
        PM10 and "detail" is None when no upstream data was available.
        """
        detail = None
        if self.has_detail:
            detail = {
                name: {"grade": self.grades.get(name, DEFAULT_NUMERIC_GRADE), "value": getattr(self, f"{name}_value")}
                for name in POLLUTANTS
            }

        return {
            "stationName": self.station_name,
            "sidoName": self.sido_name,
            "dataTime": self.data_time,
            "grade": self.grade,
            "value": self.pm10_value,
            "pm25_value": self.pm25_value,
            "pm10_value": self.pm10_value,
            "o3_value": self.o3_value,
            "no2_value": self.no2_value,
            "co_value": self.co_value,
            "so2_value": self.so2_value,
            "temp": self.temp,
            "humidity": self.humidity,
            "detail": detail,
        }
