"""
Tests for AdviceService and the AI guide mapping.

Tests cover:
- Mapping of the upstream advice shape into AiGuideView
- Defaults for missing text and list fields
- Business errors returned with HTTP 200
- Transport failures: non-2xx, network errors, malformed bodies
- Request body and profile mapping
"""

import asyncio
import json

import httpx
import pytest
from airguide.advice_service import AdviceService
from airguide.ai_guide import (
    DEFAULT_MASK_RECOMMENDATION,
    PLACEHOLDER_DETAIL,
    PLACEHOLDER_SUMMARY,
    AiGuideView,
    is_business_error,
)
from airguide.errors import UpstreamUnavailableError
from airguide.profile import ProfileInput

from conftest import make_client

BASE_URL = "https://ai.test"

UPSTREAM_ADVICE = {
    "decision": "실외 활동 가능해요",
    "reason": "미세먼지가 보통 수준이에요.",
    "three_reason": ["사유 1", "사유 2", "사유 3", "사유 4"],
    "detail_answer": "긴 설명",
    "actionItems": ["물 자주 마시기"],
    "references": ["에어코리아"],
    "pm25_value": 21,
    "o3_value": "0.041",
}


def run_advice(handler, station_name="중구", profile=None):
    async def scenario():
        async with make_client(handler) as client:
            service = AdviceService(client, BASE_URL)
            return await service.fetch_advice(station_name, profile or ProfileInput("infant", "none"))

    return asyncio.run(scenario())


class TestAiGuideMapping:
    """Test suite for AiGuideView.from_upstream."""

    def test_full_payload_mapping(self):
        """Upstream fields map onto the guide."""
        guide = AiGuideView.from_upstream(UPSTREAM_ADVICE)
        assert guide.summary == "실외 활동 가능해요"
        assert guide.detail == "미세먼지가 보통 수준이에요."
        assert guide.three_reason == ["사유 1", "사유 2", "사유 3"]
        assert guide.detail_answer == "긴 설명"
        assert guide.action_items == ["물 자주 마시기"]
        assert guide.activity_recommendation == "실외 활동 가능해요"
        assert guide.mask_recommendation == DEFAULT_MASK_RECOMMENDATION
        assert guide.references == ["에어코리아"]
        assert guide.pm25_value == 21.0
        assert guide.o3_value == 0.041
        assert guide.pm10_value is None
        assert guide.is_placeholder is False

    def test_missing_fields_use_placeholders(self):
        """Empty payload: placeholder texts and empty lists."""
        guide = AiGuideView.from_upstream({})
        assert guide.summary == PLACEHOLDER_SUMMARY
        assert guide.detail == PLACEHOLDER_DETAIL
        assert guide.three_reason == []
        assert guide.action_items == []
        assert guide.references == []

    def test_detail_answer_defaults_to_reason(self):
        """Missing detail_answer falls back to the reason text."""
        guide = AiGuideView.from_upstream({"decision": "주의", "reason": "오존이 높아요"})
        assert guide.detail_answer == "오존이 높아요"

    def test_non_list_fields_become_empty(self):
        """Malformed list fields become empty lists."""
        guide = AiGuideView.from_upstream({"actionItems": "물 마시기", "three_reason": None})
        assert guide.action_items == []
        assert guide.three_reason == []

    @pytest.mark.parametrize("payload", [
        {"decision": "Error", "reason": "something"},
        {"decision": "주의", "reason": "Error code: 400 - temperature unsupported"},
    ])
    def test_business_error_detection(self, payload):
        """Error decision or Error code marker: business error."""
        assert is_business_error(payload) is True
        guide = AiGuideView.from_upstream(payload)
        assert guide.is_placeholder is True
        assert "Error" not in guide.summary
        assert "Error" not in guide.detail

    def test_copy_is_independent(self):
        """Copies do not share list state."""
        guide = AiGuideView.from_upstream(UPSTREAM_ADVICE)
        clone = guide.copy()
        clone.action_items.append("추가")
        assert guide.action_items == ["물 자주 마시기"]


class TestAdviceService:
    """Test suite for AdviceService.fetch_advice."""

    # ==================== Success Paths ====================

    def test_successful_advice(self):
        """2xx with advice: mapped guide returned."""
        def handler(request):
            return httpx.Response(200, json=UPSTREAM_ADVICE)

        guide = run_advice(handler)
        assert guide.summary == "실외 활동 가능해요"
        assert guide.is_placeholder is False

    def test_request_body(self):
        """POST /api/advice with station and mapped profile."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=UPSTREAM_ADVICE)

        run_advice(handler, "역삼동", ProfileInput("toddler", "none"))

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/api/advice"
        assert json.loads(request.content) == {
            "stationName": "역삼동",
            "userProfile": {"ageGroup": "toddler", "condition": "general"},
        }

    def test_business_error_becomes_maintenance_notice(self):
        """200 with an embedded error: maintenance notice, raw text hidden."""
        def handler(request):
            return httpx.Response(200, json={"decision": "Error", "reason": "Error code: 400 - bad temperature"})

        guide = run_advice(handler)
        assert guide.is_placeholder is True
        assert guide.summary == AiGuideView.maintenance_notice().summary
        assert "400" not in guide.detail

    # ==================== Failure Paths ====================

    def test_non_2xx_raises(self):
        """Non-2xx: UpstreamUnavailableError with status."""
        def handler(request):
            return httpx.Response(502)

        with pytest.raises(UpstreamUnavailableError) as excinfo:
            run_advice(handler)
        assert excinfo.value.status_code == 502
        assert excinfo.value.service == "advice"

    def test_network_error_raises(self):
        """Network failure: UpstreamUnavailableError without status."""
        def handler(request):
            raise httpx.ConnectTimeout("timeout", request=request)

        with pytest.raises(UpstreamUnavailableError) as excinfo:
            run_advice(handler)
        assert excinfo.value.status_code is None

    def test_malformed_body_raises(self):
        """Non-JSON or non-object body: UpstreamUnavailableError."""
        def handler(request):
            return httpx.Response(200, json=["not", "an", "object"])

        with pytest.raises(UpstreamUnavailableError):
            run_advice(handler)
