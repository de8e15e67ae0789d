"""
Error types for the AirGuide system.

Upstream problems are absorbed into degraded-but-valid report objects, so
these exceptions never leave the fetch layer. They exist to let the fetchers
signal failures to the orchestrator in a uniform way.
"""

from typing import Optional


class AirGuideError(Exception):
    """Base class for all AirGuide errors."""


class UpstreamUnavailableError(AirGuideError):
    """
    Raised when an upstream service cannot be reached or answers non-2xx.

    Attributes:
        service: Short name of the upstream ("air-quality" or "advice")
        status_code: HTTP status code, or None for network-level failures
    """

    def __init__(self, service: str, status_code: Optional[int] = None, message: str = ""):
        self.service = service
        self.status_code = status_code
        detail = message or (f"HTTP {status_code}" if status_code is not None else "network error")
        super().__init__(f"{service} upstream unavailable: {detail}")


class UpstreamBusinessError(AirGuideError):
    """Raised when an upstream answers 200 but embeds an error in its payload."""

    def __init__(self, service: str, reason: str = ""):
        self.service = service
        self.reason = reason
        super().__init__(f"{service} upstream reported an internal error")
