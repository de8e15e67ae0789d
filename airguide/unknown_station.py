"""
Unknown-station signature detection for the AirGuide system.

For stations it cannot resolve, the air-quality upstream answers with a
fixed set of placeholder values instead of an error. A reading carrying
exactly this quadruple is "no data", not a real measurement, and must never
be shown to parents as such.
"""

import math
from typing import Any, Mapping, Optional

UNKNOWN_STATION_SIGNATURE = {
    "pm25_value": 65.0,
    "pm10_value": 85.0,
    "o3_value": 0.065,
    "no2_value": 0.025,
}

# o3/no2 are ppm decimals and need a tolerance
SIGNATURE_TOLERANCE = 1e-6


def _read_number(source: Any, name: str) -> Optional[float]:
    if isinstance(source, Mapping):
        value = source.get(name)
    else:
        value = getattr(source, name, None)
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def is_unknown_station_signature(source: Any) -> bool:
    """
    Checks whether a reading carries the unknown-station placeholder values.

    Accepts either a raw JSON mapping from the air-quality upstream or any
    object exposing pm25_value, pm10_value, o3_value and no2_value attributes
    (such as an AiGuideView echoing pollutant values).

    Args:
        source: Raw reading mapping or object with pollutant value attributes

    Returns:
        True if all four values match the signature, False otherwise
        (including when source is None or any value is missing)
    """
    if source is None:
        return False

    pm25 = _read_number(source, "pm25_value")
    pm10 = _read_number(source, "pm10_value")
    o3 = _read_number(source, "o3_value")
    no2 = _read_number(source, "no2_value")
    if pm25 is None or pm10 is None or o3 is None or no2 is None:
        return False

    return (
        pm25 == UNKNOWN_STATION_SIGNATURE["pm25_value"]
        and pm10 == UNKNOWN_STATION_SIGNATURE["pm10_value"]
        and abs(o3 - UNKNOWN_STATION_SIGNATURE["o3_value"]) < SIGNATURE_TOLERANCE
        and abs(no2 - UNKNOWN_STATION_SIGNATURE["no2_value"]) < SIGNATURE_TOLERANCE
    )
