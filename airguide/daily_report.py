"""
Daily report module for the AirGuide system.

This module defines the records returned to callers: DailyReport, the merged
air-quality + AI guide decision for one request, and AirQualityRefresh, the
air-only snapshot used for periodic refreshes. Both serialize to the JSON
shape the route layer sends to clients.
"""

from dataclasses import dataclass

from .ai_guide import AiGuideView
from .air_quality import AirQualityView
from .decision_signals import DecisionSignals
from .freshness import FreshnessMeta
from .reliability import ReliabilityMeta


@dataclass
class DailyReport:
    """
    Complete child-safety decision for one location and profile.

    Attributes:
        air_quality: Air-quality view carrying the final grade
        ai_guide: AI guide with safety policies applied
        decision_signals: Derived grades and applied rules
        reliability: Trust classification of the air data and AI status
        freshness: Age classification of the measurement
        timestamp: ISO-8601 UTC time the report was built
    """

    air_quality: AirQualityView
    ai_guide: AiGuideView
    decision_signals: DecisionSignals
    reliability: ReliabilityMeta
    freshness: FreshnessMeta
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        """
        Converts the report to a serializable dictionary.

        Returns:
            {airQuality, aiGuide, decisionSignals, reliability, freshness, timestamp}
        """
        return {
            "airQuality": self.air_quality.to_dict(),
            "aiGuide": self.ai_guide.to_dict(),
            "decisionSignals": self.decision_signals.to_dict(),
            "reliability": self.reliability.to_dict(),
            "freshness": self.freshness.to_dict(),
            "timestamp": self.timestamp,
        }


@dataclass
class AirQualityRefresh:
    """Air-only snapshot: the latest reading without AI advice or decision rules."""

    air_quality: AirQualityView
    reliability: ReliabilityMeta
    freshness: FreshnessMeta
    timestamp: str

    def to_dict(self) -> dict[str, object]:
        """
        Converts the refresh snapshot to a serializable dictionary.

        Returns:
            {airQuality, reliability, freshness, timestamp}
        """
        return {
            "airQuality": self.air_quality.to_dict(),
            "reliability": self.reliability.to_dict(),
            "freshness": self.freshness.to_dict(),
            "timestamp": self.timestamp,
        }
