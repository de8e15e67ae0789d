"""
AI guide module for the AirGuide system.

This module defines AiGuideView, the normalized form of the advice upstream's
payload, together with the canned guides shown when the advice service is
unavailable or reports an internal error. Upstream error text is never
passed through to the user.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .air_quality import to_optional_float

MAX_THREE_REASONS = 3

PLACEHOLDER_SUMMARY = "오늘의 가이드를 준비 중이에요."
PLACEHOLDER_DETAIL = "상세 안내를 준비 중이에요."
PLACEHOLDER_RECOMMENDATION = "확인 필요"
DEFAULT_MASK_RECOMMENDATION = "KF80 권장"

BUSINESS_ERROR_DECISION = "Error"
BUSINESS_ERROR_MARKER = "Error code:"


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def is_business_error(payload: dict[str, Any]) -> bool:
    """
    Detects an internal error embedded in a 200 response from the advice upstream.

    The upstream signals this either with decision "Error" or with a reason
    string containing an "Error code:" marker.
    """
    if payload.get("decision") == BUSINESS_ERROR_DECISION:
        return True
    reason = payload.get("reason")
    return isinstance(reason, str) and BUSINESS_ERROR_MARKER in reason


@dataclass
class AiGuideView:
    """
    Normalized AI activity guide.

    Attributes:
        summary: One-line headline recommendation
        detail: Short explanation
        three_reason: Up to three short reason bullets (derivation may append more)
        detail_answer: Longer explanation
        action_items: Concrete actions for the parent
        activity_recommendation: Outdoor activity recommendation text
        mask_recommendation: Mask recommendation text
        references: Source references
        pm25_value, pm10_value, o3_value, no2_value: Pollutant values echoed by
            the advice upstream, used to backfill gaps in the air reading
        is_placeholder: True for canned guides that stand in for real advice
    """

    summary: str = PLACEHOLDER_SUMMARY
    detail: str = PLACEHOLDER_DETAIL
    three_reason: list[str] = field(default_factory=list)
    detail_answer: str = ""
    action_items: list[str] = field(default_factory=list)
    activity_recommendation: str = PLACEHOLDER_RECOMMENDATION
    mask_recommendation: str = PLACEHOLDER_RECOMMENDATION
    references: list[str] = field(default_factory=list)
    pm25_value: Optional[float] = None
    pm10_value: Optional[float] = None
    o3_value: Optional[float] = None
    no2_value: Optional[float] = None
    is_placeholder: bool = False

    @classmethod
    def from_upstream(cls, payload: dict[str, Any]) -> "AiGuideView":
        """
        Maps the advice upstream's payload into a guide.

        Upstream shape: {decision, reason, three_reason[], detail_answer,
        actionItems[], references[], maskRecommendation?, pm25_value?, ...}.
        Missing text falls back to placeholder strings and missing lists to
        empty lists. Business errors map to the maintenance notice.

        Args:
            payload: Parsed JSON object from the advice upstream

        Returns:
            The normalized guide
        """
        if is_business_error(payload):
            return cls.maintenance_notice()

        decision = _text(payload.get("decision"))
        reason = _text(payload.get("reason"))

        return cls(
            summary=decision or PLACEHOLDER_SUMMARY,
            detail=reason or PLACEHOLDER_DETAIL,
            three_reason=_string_list(payload.get("three_reason"))[:MAX_THREE_REASONS],
            detail_answer=_text(payload.get("detail_answer")) or reason or PLACEHOLDER_DETAIL,
            action_items=_string_list(payload.get("actionItems")),
            activity_recommendation=decision or PLACEHOLDER_RECOMMENDATION,
            mask_recommendation=_text(payload.get("maskRecommendation")) or DEFAULT_MASK_RECOMMENDATION,
            references=_string_list(payload.get("references")),
            pm25_value=to_optional_float(payload.get("pm25_value")),
            pm10_value=to_optional_float(payload.get("pm10_value")),
            o3_value=to_optional_float(payload.get("o3_value")),
            no2_value=to_optional_float(payload.get("no2_value")),
        )

    @classmethod
    def maintenance_notice(cls) -> "AiGuideView":
        """Guide shown when the advice upstream reports an internal error."""
        return cls(
            summary="AI 선생님이 잠시 점검 중이에요 😅",
            detail="잠시 후 다시 확인하면 맞춤 가이드를 받을 수 있어요.",
            detail_answer="잠시 후 다시 확인하면 맞춤 가이드를 받을 수 있어요.",
            is_placeholder=True,
        )

    @classmethod
    def unavailable(cls) -> "AiGuideView":
        """Guide shown when the advice upstream cannot be reached."""
        return cls(
            summary="지금은 정보를 가져올 수 없어요 🥲\n잠시 후 다시 시도해주세요!",
            detail="AI 선생님이 잠시 쉬고 있어요. 연결을 확인해주세요.",
            detail_answer="AI 선생님이 잠시 쉬고 있어요. 연결을 확인해주세요.",
            is_placeholder=True,
        )

    def copy(self) -> "AiGuideView":
        """Returns a copy whose lists can be appended to without touching this guide."""
        return replace(
            self,
            three_reason=list(self.three_reason),
            action_items=list(self.action_items),
            references=list(self.references),
        )

    def to_dict(self) -> dict[str, object]:
        """
        Converts the guide to a serializable dictionary.

        Returns:
            Dictionary with camelCase text keys and the upstream pollutant
            value keys (pm25_value, ...)
        """
        return {
            "summary": self.summary,
            "detail": self.detail,
            "threeReason": list(self.three_reason),
            "detailAnswer": self.detail_answer,
            "actionItems": list(self.action_items),
            "activityRecommendation": self.activity_recommendation,
            "maskRecommendation": self.mask_recommendation,
            "references": list(self.references),
            "pm25_value": self.pm25_value,
            "pm10_value": self.pm10_value,
            "o3_value": self.o3_value,
            "no2_value": self.no2_value,
        }
