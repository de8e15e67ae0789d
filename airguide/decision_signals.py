"""
Decision signal module for the AirGuide system.

This module contains the DecisionSignalDeriver, the rules engine that fuses
PM2.5 and ozone grades with profile-specific weather adjustments into one
final risk grade, and injects the ozone-window and infant-mask policies into
the AI guide.

Grades only move toward VERY_BAD along the pipeline. The deriver never
mutates its inputs; it returns new air/guide objects plus a DecisionSignals
record.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from pytz import timezone

from .ai_guide import AiGuideView
from .air_quality import AirQualityView, clamp_grade, to_ui_grade
from .profile import ProfileInput

SEOUL_TZ = timezone("Asia/Seoul")

# Hours [14, 17) local time carry peak ozone
O3_RISK_WINDOW = (14, 17)

O3_OUTING_BAN_ACTION = "오후 2~5시 외출 금지"
O3_MASK_NOTE = "오존은 가스성 오염물질이라 마스크로 충분히 걸러지지 않아요."
O3_REASON = "오존 농도가 높아 실외 활동 제한이 필요해요."
O3_WINDOW_SUMMARY = "오후 2~5시는 실내 활동이 더 안전해요"

INFANT_MASK_BAN = "마스크 착용 금지(영아)"
INFANT_ACTION = "영아는 마스크 대신 실내 공기질 관리에 집중"
INFANT_REASON = "영아는 마스크 착용 시 질식 위험이 있어요."

REASON_YOUNG_LOW_HUMIDITY = "영유아 + 저습도(35% 미만)로 위험도를 1단계 상향했어요."
REASON_ELEMENTARY_EXTREME_TEMP = "초등 저학년 + 극단 기온으로 위험도를 1단계 상향했어요."
REASON_ASTHMA_COLD = "천식 + 저온(5°C 미만)으로 위험도를 1단계 상향했어요."
REASON_RHINITIS_DRY = "비염 + 건조(30% 미만)로 위험도를 1단계 상향했어요."
REASON_ATOPY_HEAT = "아토피 + 고온(30°C 초과)로 위험도를 1단계 상향했어요."


@dataclass(frozen=True)
class DecisionSignals:
    """
    Outcome of one decision derivation.

    Attributes:
        pm25_grade: PM2.5 grade (1-4)
        o3_grade: Ozone grade (1-4)
        adjusted_risk_grade: Final numeric grade after adjustments and overrides
        final_grade: UI grade matching adjusted_risk_grade
        o3_is_dominant_risk: Ozone is BAD or worse and at least as bad as PM2.5
        o3_outing_ban_forced: The 2-5pm outing ban was injected
        infant_mask_ban_applied: The infant mask prohibition was applied
        weather_adjusted: A weather/condition adjustment fired
        weather_adjustment_reason: Reason text of the adjustment that fired last
    """

    pm25_grade: int
    o3_grade: int
    adjusted_risk_grade: int
    final_grade: str
    o3_is_dominant_risk: bool
    o3_outing_ban_forced: bool
    infant_mask_ban_applied: bool
    weather_adjusted: bool
    weather_adjustment_reason: Optional[str] = None

    def to_dict(self) -> dict[str, object]:
        """
        Converts the signal record to a serializable dictionary.

        Returns:
            Dictionary of grades and rule flags keyed in camelCase
        """
        return {
            "pm25Grade": self.pm25_grade,
            "o3Grade": self.o3_grade,
            "adjustedRiskGrade": self.adjusted_risk_grade,
            "finalGrade": self.final_grade,
            "o3IsDominantRisk": self.o3_is_dominant_risk,
            "o3OutingBanForced": self.o3_outing_ban_forced,
            "infantMaskBanApplied": self.infant_mask_ban_applied,
            "weatherAdjusted": self.weather_adjusted,
            "weatherAdjustmentReason": self.weather_adjustment_reason,
        }


def _is_missing(value: Optional[float]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def pm25_grade_from_value(value: Optional[float]) -> int:
    """
    Grades a PM2.5 concentration (µg/m³).

    <=15 -> 1, <=35 -> 2, <=75 -> 3, otherwise 4. Missing values are graded 2
    so that a data gap neither reassures nor alarms.
    """
    if _is_missing(value):
        return 2
    if value <= 15:
        return 1
    if value <= 35:
        return 2
    if value <= 75:
        return 3
    return 4


def o3_grade_from_value(value: Optional[float]) -> int:
    """
    Grades an ozone concentration (ppm).

    <=0.03 -> 1, <=0.09 -> 2, <=0.15 -> 3, otherwise 4. Missing values are
    graded 2.
    """
    if _is_missing(value):
        return 2
    if value <= 0.03:
        return 1
    if value <= 0.09:
        return 2
    if value <= 0.15:
        return 3
    return 4


def get_seoul_hour() -> int:
    """Returns the current wall-clock hour in Asia/Seoul."""
    return datetime.now(SEOUL_TZ).hour


def _append_unique(items: list[str], value: str) -> None:
    if value not in items:
        items.append(value)


def apply_weather_adjustment(
    base_risk_grade: int,
    profile: ProfileInput,
    temp: Optional[float],
    humidity: Optional[float],
) -> tuple[int, Optional[str]]:
    """
    Raises the risk grade for profile-specific weather sensitivities.

    Two independent checks, each a first-match-wins chain:
    - Age: infant/toddler with humidity < 35%, else elementary_low with
      temp >= 30 or temp <= 2
    - Condition: asthma with temp < 5, else rhinitis with humidity < 30%,
      else atopy with temp > 30

    Each firing check adds one grade, so both may stack. Only the reason of
    the last check that fired is returned.

    Args:
        base_risk_grade: Worse of the PM2.5 and ozone grades
        profile: Profile of the child; missing fields use the defaults
        temp: Temperature in Celsius, or None
        humidity: Relative humidity in percent, or None

    Returns:
        Tuple of (adjusted grade clamped to 1-4, reason or None)
    """
    profile = profile.normalized()
    adjusted = base_risk_grade
    reason: Optional[str] = None
    has_temp = not _is_missing(temp)
    has_humidity = not _is_missing(humidity)

    if profile.age_group in ("infant", "toddler") and has_humidity and humidity < 35:
        adjusted += 1
        reason = REASON_YOUNG_LOW_HUMIDITY
    elif profile.age_group == "elementary_low" and has_temp and (temp >= 30 or temp <= 2):
        adjusted += 1
        reason = REASON_ELEMENTARY_EXTREME_TEMP

    # TODO: confirm with product whether the age reason should survive when a condition rule also fires
    if profile.condition == "asthma" and has_temp and temp < 5:
        adjusted += 1
        reason = REASON_ASTHMA_COLD
    elif profile.condition == "rhinitis" and has_humidity and humidity < 30:
        adjusted += 1
        reason = REASON_RHINITIS_DRY
    elif profile.condition == "atopy" and has_temp and temp > 30:
        adjusted += 1
        reason = REASON_ATOPY_HEAT

    return (clamp_grade(adjusted), reason)


class DecisionSignalDeriver:
    """
    Rules engine producing the final child-safety decision.

    Pure apart from the Seoul clock read, which is skipped whenever the caller
    passes an explicit hour.
    """

    def derive(
        self,
        air: AirQualityView,
        guide: AiGuideView,
        profile: ProfileInput,
        current_hour: Optional[int] = None,
    ) -> tuple[AirQualityView, AiGuideView, DecisionSignals]:
        """
        Computes the final grade and applies the safety policies to the guide.

        Steps:
        1. Grade PM2.5 and ozone from their values
        2. Take the worse of the two as base risk
        3. Apply the weather/condition adjustment
        4. Force VERY_BAD when both PM2.5 and ozone are BAD or worse
        5. Map the numeric grade to the UI grade
        6. Ozone dominant: inject the 2-5pm outing ban, the mask note and a reason
        7. Infant: force the mask prohibition and add an action and a reason
        8. Append the weather adjustment reason, if any
        9. Ozone dominant inside the 14-17h window: replace the summary

        Args:
            air: Air-quality view (its grade is replaced in the result)
            guide: AI guide (lists are only appended to in the result)
            profile: Profile of the child
            current_hour: Hour (0-23, Asia/Seoul) to evaluate the ozone window
                with; the real Seoul clock is used when None

        Returns:
            A tuple containing:
            - AirQualityView: Copy of air with grade set to the final grade
            - AiGuideView: Copy of guide with the policies applied
            - DecisionSignals: The derived signal record
        """
        pm25_grade = pm25_grade_from_value(air.pm25_value)
        o3_grade = o3_grade_from_value(air.o3_value)
        base_risk = max(pm25_grade, o3_grade)
        adjusted, reason = apply_weather_adjustment(base_risk, profile, air.temp, air.humidity)

        final_numeric = adjusted
        if pm25_grade >= 3 and o3_grade >= 3:
            final_numeric = 4

        final_grade = to_ui_grade(final_numeric)
        o3_dominant = o3_grade >= 3 and o3_grade >= pm25_grade
        hour = get_seoul_hour() if current_hour is None else current_hour
        in_o3_window = O3_RISK_WINDOW[0] <= hour < O3_RISK_WINDOW[1]

        next_guide = guide.copy()

        if o3_dominant:
            _append_unique(next_guide.action_items, O3_OUTING_BAN_ACTION)
            parts = [next_guide.detail_answer or next_guide.detail, O3_MASK_NOTE]
            next_guide.detail_answer = " ".join(part for part in parts if part)
            _append_unique(next_guide.three_reason, O3_REASON)

        is_infant = profile.age_group == "infant"
        if is_infant:
            next_guide.mask_recommendation = INFANT_MASK_BAN
            _append_unique(next_guide.action_items, INFANT_ACTION)
            _append_unique(next_guide.three_reason, INFANT_REASON)

        if reason:
            _append_unique(next_guide.three_reason, reason)

        if o3_dominant and in_o3_window:
            next_guide.summary = O3_WINDOW_SUMMARY

        signals = DecisionSignals(
            pm25_grade=pm25_grade,
            o3_grade=o3_grade,
            adjusted_risk_grade=final_numeric,
            final_grade=final_grade,
            o3_is_dominant_risk=o3_dominant,
            o3_outing_ban_forced=o3_dominant,
            infant_mask_ban_applied=is_infant,
            weather_adjusted=reason is not None,
            weather_adjustment_reason=reason,
        )
        return (replace(air, grade=final_grade, grades=dict(air.grades)), next_guide, signals)
