"""
AirGuide: child-safety air-quality decisions.

Merges a station-level air-quality reading with AI activity advice into a
single decision for a location and child profile.
"""

from .daily_report_system import DailyReportSystem
from .daily_report import AirQualityRefresh, DailyReport
from .config import Config
from .profile import ProfileInput

__all__ = ['DailyReportSystem', 'DailyReport', 'AirQualityRefresh', 'Config', 'ProfileInput']
