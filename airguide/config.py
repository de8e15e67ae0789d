"""
Configuration module for the AirGuide system.

Values are read from the process environment. A local .env file is loaded
first so development setups can keep upstream URLs out of the code.

Environment variables:
    AIRGUIDE_DATA_API_URL: Base URL of the air-quality upstream
    AIRGUIDE_AI_API_URL: Base URL of the AI advice upstream
    AIRGUIDE_HTTP_TIMEOUT: Request timeout in seconds for self-managed clients
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Sequence

from dotenv import load_dotenv

load_dotenv()


DEFAULT_API_URL = "https://epi-log-ai.vercel.app"
DEFAULT_HTTP_TIMEOUT = 10.0

# Substituted when the upstream reading carries no weather fields
FALLBACK_TEMP = 22.0
FALLBACK_HUMIDITY = 45.0

# Ambiguous district names -> well-known neighbourhoods that do have stations
DEFAULT_STATION_HINTS: Mapping[str, Sequence[str]] = MappingProxyType({
    "성남시 분당구": ("정자동", "수내동", "운중동"),
    "분당구": ("정자동", "수내동", "운중동"),
    "판교동": ("운중동", "정자동"),
    "세종시": ("보람동", "아름동", "한솔동", "조치원읍"),
    "세종특별자치시": ("보람동", "아름동", "한솔동", "조치원읍"),
})


@dataclass(frozen=True)
class Config:
    """
    Runtime settings for the AirGuide system.

    Attributes:
        data_api_url: Base URL for the air-quality lookup
        ai_api_url: Base URL for the AI advice endpoint
        http_timeout: Timeout (seconds) used when the system opens its own client
        station_hints: District -> neighbourhood fallbacks for station matching
    """

    data_api_url: str = DEFAULT_API_URL
    ai_api_url: str = DEFAULT_API_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    station_hints: Mapping[str, Sequence[str]] = field(default_factory=lambda: DEFAULT_STATION_HINTS)

    @classmethod
    def from_env(cls) -> "Config":
        """
        Builds a Config from environment variables, falling back to defaults.

        An unparseable AIRGUIDE_HTTP_TIMEOUT falls back to the default timeout.
        """
        try:
            timeout = float(os.getenv("AIRGUIDE_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
        except ValueError:
            timeout = DEFAULT_HTTP_TIMEOUT

        return cls(
            data_api_url=os.getenv("AIRGUIDE_DATA_API_URL", DEFAULT_API_URL).rstrip("/"),
            ai_api_url=os.getenv("AIRGUIDE_AI_API_URL", DEFAULT_API_URL).rstrip("/"),
            http_timeout=timeout,
        )
