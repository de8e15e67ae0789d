"""
Air quality fetcher module for the AirGuide system.

This module contains the AirQualityFetcher class which resolves a free-form
place name to a real monitoring station. Candidates are tried one at a time
against the upstream lookup; the first genuine reading wins, and readings
carrying the unknown-station signature are skipped but remembered as a last
resort.
"""

import logging
from typing import Any, Optional

import httpx

from .air_quality import AirFetchResult, to_optional_text
from .station_candidates import StationCandidateGenerator
from .unknown_station import is_unknown_station_signature

logger = logging.getLogger(__name__)


class AirQualityFetcher:
    """
    Station-resolving client for the air-quality upstream.

    The HTTP client is injected so the same fetcher works against the real
    service and against httpx.MockTransport in tests. Upstream failures are
    logged and absorbed; fetch_with_station_fallback never raises for them.
    """

    ENDPOINT = "/api/air-quality"

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        candidate_generator: Optional[StationCandidateGenerator] = None,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.candidate_generator = candidate_generator or StationCandidateGenerator()

    async def _fetch_candidate(self, candidate: str) -> Optional[dict[str, Any]]:
        """
        Requests the reading for a single candidate.

        Returns:
            Parsed JSON object, or None on network failure, non-2xx status or
            a body that is not a JSON object
        """
        url = f"{self.base_url}{self.ENDPOINT}"
        try:
            resp = await self.client.get(url, params={"stationName": candidate})
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"AirQualityFetcher: upstream answered {e.response.status_code} for candidate={candidate}"
            )
            return None
        except httpx.HTTPError as e:
            logger.error(f"AirQualityFetcher: request failed for candidate={candidate}: {e}")
            return None
        except ValueError as e:
            logger.error(f"AirQualityFetcher: invalid JSON for candidate={candidate}: {e}")
            return None

        if not isinstance(payload, dict):
            logger.error(f"AirQualityFetcher: unexpected payload type for candidate={candidate}")
            return None
        return payload

    async def fetch_with_station_fallback(self, station_name: str) -> AirFetchResult:
        """
        Tries every candidate in order until a genuine reading is found.

        - Failed candidates are skipped; a failed call is never repeated.
        - The first successful response is kept as a last-resort fallback.
        - A response carrying the unknown-station signature is recorded and
          the search continues.
        - The first response without the signature ends the search.

        If no genuine reading turns up, the kept fallback (possibly None) is
        returned with used_fallback_data set when it exists.

        Args:
            station_name: Place name requested by the caller

        Returns:
            AirFetchResult describing the outcome and every candidate tried
        """
        candidates = self.candidate_generator.build_candidates(station_name)
        # Blank names yield no candidates; the audit trail still names the request
        tried_stations = candidates or [station_name]
        preferred = candidates[0] if candidates else station_name
        fallback_data: Optional[dict[str, Any]] = None
        fallback_station: Optional[str] = None
        unknown_signature_candidates: list[str] = []

        for candidate in candidates:
            parsed = await self._fetch_candidate(candidate)
            if parsed is None:
                continue

            resolved = to_optional_text(parsed.get("stationName")) or candidate
            if fallback_data is None:
                fallback_data = parsed
                fallback_station = resolved

            if is_unknown_station_signature(parsed):
                unknown_signature_candidates.append(candidate)
                logger.warning(
                    f'AirQualityFetcher: unknown station signature for "{candidate}", trying next candidate'
                )
                continue

            return AirFetchResult(
                data=parsed,
                resolved_station=resolved,
                tried_stations=tried_stations,
                used_fallback_candidate=candidate != preferred or resolved != preferred,
                used_fallback_data=False,
                unknown_signature_candidates=unknown_signature_candidates,
            )

        if fallback_data is None:
            logger.error(f'AirQualityFetcher: no candidate answered for "{station_name}"')
        else:
            logger.warning(
                f'AirQualityFetcher: no genuine reading for "{station_name}", keeping placeholder from {fallback_station}'
            )

        return AirFetchResult(
            data=fallback_data,
            resolved_station=fallback_station or station_name,
            tried_stations=tried_stations,
            used_fallback_candidate=fallback_station is not None and fallback_station != preferred,
            used_fallback_data=fallback_data is not None,
            unknown_signature_candidates=unknown_signature_candidates,
        )
