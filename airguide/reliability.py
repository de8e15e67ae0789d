"""
Reliability module for the AirGuide system.

Classifies how much a parent can trust the air-quality numbers of a report.
Air-data reliability and AI availability are reported as separate signals:
a failed AI call never changes the reliability tier.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

from .air_quality import AirFetchResult

STATUS_LIVE = "LIVE"
STATUS_STATION_FALLBACK = "STATION_FALLBACK"
STATUS_DEGRADED = "DEGRADED"

AI_STATUS_OK = "ok"
AI_STATUS_FAILED = "failed"


@dataclass(frozen=True)
class ReliabilityMeta:
    """
    Trust classification of one report.

    Attributes:
        status: LIVE, STATION_FALLBACK or DEGRADED
        label: Short user-facing label for the status
        description: User-facing explanation of the status
        requested_station: Place name the caller asked for
        resolved_station: Station the shown data belongs to
        tried_stations: Every candidate tried during the fetch
        updated_at: ISO-8601 UTC time of classification
        ai_status: "ok" or "failed"
    """

    status: str
    label: str
    description: str
    requested_station: str
    resolved_station: str
    tried_stations: list[str] = field(default_factory=list)
    updated_at: str = ""
    ai_status: str = AI_STATUS_OK

    def to_dict(self) -> dict[str, object]:
        """
        Converts the reliability meta to a serializable dictionary.

        Returns:
            {status, label, description, requestedStation, resolvedStation,
            triedStations, updatedAt, aiStatus}
        """
        return {
            "status": self.status,
            "label": self.label,
            "description": self.description,
            "requestedStation": self.requested_station,
            "resolvedStation": self.resolved_station,
            "triedStations": list(self.tried_stations),
            "updatedAt": self.updated_at,
            "aiStatus": self.ai_status,
        }


def build_reliability_meta(
    requested_station: str,
    air_fetch: AirFetchResult,
    ai_ok: bool,
) -> ReliabilityMeta:
    """
    Classifies the trustworthiness of a fetch outcome.

    Precedence, first match wins:
    1. Placeholder data used, or no data at all -> DEGRADED
    2. A different candidate or station answered -> STATION_FALLBACK
    3. Otherwise -> LIVE

    Args:
        requested_station: Place name the caller asked for
        air_fetch: Outcome of the station-resolving fetch
        ai_ok: Whether the AI guide is real advice

    Returns:
        ReliabilityMeta stamped with the current time
    """
    if air_fetch.used_fallback_data or not air_fetch.data:
        status = STATUS_DEGRADED
        label = "주변 평균 대체 데이터"
        description = "실측 매칭에 실패해 주변 평균 대체 데이터를 안내하고 있어요."
    elif air_fetch.used_fallback_candidate:
        status = STATUS_STATION_FALLBACK
        label = "인근 측정소 자동 보정"
        description = "입력 주소와 인접한 유효 측정소의 최근 1시간 기준 실측값으로 자동 보정했어요."
    else:
        status = STATUS_LIVE
        label = "최근 1시간 기준 실측 데이터"
        description = "현재 선택한 지역 측정소의 최근 1시간 기준 실측값을 반영했어요."

    return ReliabilityMeta(
        status=status,
        label=label,
        description=description,
        requested_station=requested_station,
        resolved_station=air_fetch.resolved_station,
        tried_stations=list(air_fetch.tried_stations),
        updated_at=datetime.now(timezone.utc).isoformat(),
        ai_status=AI_STATUS_OK if ai_ok else AI_STATUS_FAILED,
    )
