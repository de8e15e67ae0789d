"""
Advice service module for the AirGuide system.

This module contains the AdviceService class which asks the AI advice
upstream for an activity guide for one station and profile. Transport
failures raise UpstreamUnavailableError; internal errors the upstream reports
inside a 200 response become the maintenance notice guide.
"""

import logging
from typing import Any

import httpx

from .ai_guide import AiGuideView, is_business_error
from .errors import UpstreamBusinessError, UpstreamUnavailableError
from .profile import ProfileInput

logger = logging.getLogger(__name__)


class AdviceService:
    """
    Client for the AI advice upstream.

    Performs a single POST per call; retry policy lives in the orchestrator.
    """

    ENDPOINT = "/api/advice"
    SERVICE_NAME = "advice"

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    def build_request_body(self, station_name: str, profile: ProfileInput) -> dict[str, Any]:
        """
        Builds the JSON body for the advice endpoint.

        Args:
            station_name: Station the advice should be computed for
            profile: Profile of the child, mapped to the upstream schema

        Returns:
            {stationName, userProfile: {ageGroup, condition}}
        """
        return {
            "stationName": station_name,
            "userProfile": profile.to_ai_payload(),
        }

    async def fetch_advice(self, station_name: str, profile: ProfileInput) -> AiGuideView:
        """
        Requests an activity guide for a station and profile.

        Args:
            station_name: Station the advice should be computed for
            profile: Profile of the child the guide is for

        Returns:
            The mapped AiGuideView, or the maintenance notice when the upstream
            reports an internal error

        Raises:
            UpstreamUnavailableError: On network failure, non-2xx status or a
                body that is not a JSON object
        """
        url = f"{self.base_url}{self.ENDPOINT}"
        body = self.build_request_body(station_name, profile)
        logger.info(f"AdviceService: requesting advice for {station_name} with {body['userProfile']}")

        try:
            resp = await self.client.post(url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"AdviceService: request failed for {station_name}: {e}")
            raise UpstreamUnavailableError(self.SERVICE_NAME, message=str(e)) from e

        if resp.is_error:
            logger.error(f"AdviceService: upstream answered {resp.status_code} for {station_name}")
            raise UpstreamUnavailableError(self.SERVICE_NAME, status_code=resp.status_code)

        try:
            payload = resp.json()
        except ValueError as e:
            logger.error(f"AdviceService: invalid JSON for {station_name}: {e}")
            raise UpstreamUnavailableError(self.SERVICE_NAME, status_code=resp.status_code, message="invalid JSON") from e

        if not isinstance(payload, dict):
            raise UpstreamUnavailableError(self.SERVICE_NAME, status_code=resp.status_code, message="unexpected payload")

        try:
            return self._parse_guide(payload)
        except UpstreamBusinessError as e:
            # Raw upstream text stays in the log only
            logger.error(f"AdviceService: upstream business error: {e.reason}")
            return AiGuideView.maintenance_notice()

    def _parse_guide(self, payload: dict[str, Any]) -> AiGuideView:
        if is_business_error(payload):
            raise UpstreamBusinessError(self.SERVICE_NAME, reason=str(payload.get("reason") or ""))
        return AiGuideView.from_upstream(payload)
