"""
Tests for the reliability classifier.

Tests cover:
- Full decision path coverage: LIVE, STATION_FALLBACK, DEGRADED
- Precedence of DEGRADED over STATION_FALLBACK
- AI status reported independently of the tier
"""

from datetime import datetime

import pytest
from airguide.air_quality import AirFetchResult
from airguide.reliability import build_reliability_meta


class TestBuildReliabilityMeta:
    """Test suite for build_reliability_meta."""

    @pytest.fixture
    def base_fetch(self):
        """Fixture providing a direct-hit fetch result."""
        return AirFetchResult(
            data={"stationName": "중구", "pm25_value": 20, "pm10_value": 40, "o3_value": 0.04, "no2_value": 0.02},
            resolved_station="중구",
            tried_stations=["중구"],
        )

    # ==================== Decision Path Coverage ====================

    def test_direct_hit_is_live(self, base_fetch):
        """Direct hit with AI ok: LIVE and ok."""
        meta = build_reliability_meta("중구", base_fetch, True)
        assert meta.status == "LIVE"
        assert meta.label == "최근 1시간 기준 실측 데이터"
        assert meta.ai_status == "ok"
        assert meta.requested_station == "중구"
        assert meta.resolved_station == "중구"
        assert meta.tried_stations == ["중구"]

    def test_fallback_candidate_is_station_fallback(self, base_fetch):
        """Other candidate used: STATION_FALLBACK."""
        base_fetch.resolved_station = "성남시"
        base_fetch.used_fallback_candidate = True
        meta = build_reliability_meta("판교동", base_fetch, True)
        assert meta.status == "STATION_FALLBACK"
        assert meta.label == "인근 측정소 자동 보정"
        assert meta.resolved_station == "성남시"

    def test_fallback_data_is_degraded(self, base_fetch):
        """Placeholder data used: DEGRADED."""
        base_fetch.used_fallback_data = True
        meta = build_reliability_meta("어딘가", base_fetch, False)
        assert meta.status == "DEGRADED"
        assert meta.label == "주변 평균 대체 데이터"
        assert meta.ai_status == "failed"

    def test_missing_data_is_degraded(self, base_fetch):
        """No data at all: DEGRADED even without the fallback flag."""
        base_fetch.data = None
        assert build_reliability_meta("중구", base_fetch, True).status == "DEGRADED"

    # ==================== Precedence ====================

    def test_degraded_takes_precedence(self, base_fetch):
        """Fallback data and fallback candidate: DEGRADED wins."""
        base_fetch.used_fallback_data = True
        base_fetch.used_fallback_candidate = True
        assert build_reliability_meta("중구", base_fetch, True).status == "DEGRADED"

    def test_ai_failure_does_not_change_tier(self, base_fetch):
        """AI failed on a direct hit: still LIVE, aiStatus failed."""
        meta = build_reliability_meta("중구", base_fetch, False)
        assert meta.status == "LIVE"
        assert meta.ai_status == "failed"

    # ==================== Output Shape ====================

    def test_updated_at_is_current_iso_timestamp(self, base_fetch):
        """updatedAt is an aware ISO timestamp of classification time."""
        meta = build_reliability_meta("중구", base_fetch, True)
        parsed = datetime.fromisoformat(meta.updated_at)
        assert parsed.tzinfo is not None

    def test_to_dict_keys(self, base_fetch):
        """Serialization uses camelCase keys."""
        data = build_reliability_meta("중구", base_fetch, True).to_dict()
        assert set(data) == {
            "status", "label", "description", "requestedStation",
            "resolvedStation", "triedStations", "updatedAt", "aiStatus",
        }
