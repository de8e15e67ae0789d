"""
Measurement freshness module for the AirGuide system.

The upstream stamps readings with a Korean wall-clock time such as
"2026-10-19 14:00". Readings an hour or more old are flagged so the caller
can prompt a refresh.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from pytz import timezone, utc

KST = timezone("Asia/Seoul")

FRESHNESS_DELAYED_MINUTES = 60
FRESHNESS_STALE_MINUTES = 90

_DATA_TIME = re.compile(r"^(\d{4})-(\d{2})-(\d{2})\s+(\d{2}):(\d{2})$")


@dataclass(frozen=True)
class FreshnessMeta:
    """
    Age classification of a measurement.

    Attributes:
        status: FRESH, DELAYED, STALE or UNKNOWN
        age_minutes: Minutes since the measurement, None when unknown
        description: User-facing note for DELAYED/STALE, otherwise None
        needs_refresh: True for DELAYED and STALE
    """

    status: str
    age_minutes: Optional[int] = None
    description: Optional[str] = None
    needs_refresh: bool = False

    def to_dict(self) -> dict[str, object]:
        """
        Converts the freshness meta to a serializable dictionary.

        Returns:
            {status, ageMinutes, description, needsRefresh}
        """
        return {
            "status": self.status,
            "ageMinutes": self.age_minutes,
            "description": self.description,
            "needsRefresh": self.needs_refresh,
        }


def parse_kst_data_time(raw: Optional[str]) -> Optional[datetime]:
    """
    Parses an upstream "YYYY-MM-DD HH:MM" KST timestamp into an aware UTC datetime.

    Hour 24 is accepted and means midnight of the following day.

    Returns:
        The UTC datetime, or None if raw is missing, not text or malformed
    """
    if not isinstance(raw, str) or not raw:
        return None
    matched = _DATA_TIME.match(raw.strip())
    if not matched:
        return None

    year, month, day, hour, minute = (int(part) for part in matched.groups())
    extra_day = hour == 24
    try:
        local = datetime(year, month, day, 0 if extra_day else hour, minute)
    except ValueError:
        return None
    if extra_day:
        local += timedelta(days=1)
    return KST.localize(local).astimezone(utc)


def classify_freshness(data_time: Optional[str], now: Optional[datetime] = None) -> FreshnessMeta:
    """
    Classifies how old a measurement is.

    Args:
        data_time: Upstream measurement time string (KST)
        now: Aware "current" time, defaults to the real UTC time

    Returns:
        FreshnessMeta: STALE at 90+ minutes, DELAYED at 60+, FRESH below,
        UNKNOWN when data_time cannot be parsed
    """
    measured_at = parse_kst_data_time(data_time)
    if measured_at is None:
        return FreshnessMeta(status="UNKNOWN")

    now = now or datetime.now(utc)
    age_minutes = max(0, int((now - measured_at).total_seconds() // 60))

    if age_minutes >= FRESHNESS_STALE_MINUTES:
        return FreshnessMeta(
            status="STALE",
            age_minutes=age_minutes,
            description=f"측정 시각 기준 {age_minutes}분 경과로 최신값 자동 재조회가 필요해요.",
            needs_refresh=True,
        )

    if age_minutes >= FRESHNESS_DELAYED_MINUTES:
        return FreshnessMeta(
            status="DELAYED",
            age_minutes=age_minutes,
            description=f"측정 시각 기준 {age_minutes}분 경과로 데이터가 지연됐을 수 있어요.",
            needs_refresh=True,
        )

    return FreshnessMeta(status="FRESH", age_minutes=age_minutes)
