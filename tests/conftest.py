"""
Pytest configuration for AirGuide tests.

Registers custom markers and provides shared builders for views, guides and
fake upstream clients.
"""

import httpx
import pytest

from airguide.ai_guide import AiGuideView
from airguide.air_quality import AirQualityView

SENTINEL_READING = {
    "pm25_value": 65,
    "pm10_value": 85,
    "o3_value": 0.065,
    "no2_value": 0.025,
}


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def make_air(**overrides) -> AirQualityView:
    """Builds a moderate air view for station 중구."""
    values = dict(
        station_name="중구",
        grade="NORMAL",
        pm25_value=20.0,
        pm10_value=40.0,
        o3_value=0.05,
        no2_value=0.02,
        temp=22.0,
        humidity=45.0,
        grades={"pm25": 2, "pm10": 2},
        has_detail=True,
    )
    values.update(overrides)
    return AirQualityView(**values)


def make_guide(**overrides) -> AiGuideView:
    """Builds a typical AI guide."""
    values = dict(
        summary="테스트 요약",
        detail="테스트 상세",
        three_reason=["기본 사유 1", "기본 사유 2", "기본 사유 3"],
        detail_answer="기본 상세 답변",
        action_items=["기본 액션"],
        activity_recommendation="확인 필요",
        mask_recommendation="KF80 권장",
    )
    values.update(overrides)
    return AiGuideView(**values)


def make_reading(station="중구", **overrides) -> dict:
    """Builds a raw upstream air-quality reading."""
    reading = {
        "sidoName": "서울",
        "stationName": station,
        "dataTime": "2026-10-19 14:00",
        "pm25_grade": "보통",
        "pm25_value": 20,
        "pm10_grade": "보통",
        "pm10_value": 40,
        "o3_grade": "보통",
        "o3_value": 0.04,
        "no2_grade": "좋음",
        "no2_value": 0.02,
        "temp": 18,
        "humidity": 50,
    }
    reading.update(overrides)
    return reading


def make_client(handler) -> httpx.AsyncClient:
    """Wraps a request handler in an AsyncClient backed by MockTransport."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def air_view():
    return make_air()


@pytest.fixture
def guide():
    return make_guide()
