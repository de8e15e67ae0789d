"""
Daily report system module for the AirGuide system.

This module contains the DailyReportSystem class, the orchestrator of one
report request. It fans out to the air-quality and advice upstreams, resolves
the station, re-requests advice when the station changed or the advice came
back with placeholder values, then derives the decision signals and the
reliability classification.

Every upstream failure is absorbed: callers always receive a complete,
renderable report.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import AsyncIterator, Optional, Union

import httpx

from .advice_service import AdviceService
from .ai_guide import AiGuideView
from .air_quality import AirFetchResult, AirQualityView
from .air_quality_fetcher import AirQualityFetcher
from .config import Config
from .daily_report import AirQualityRefresh, DailyReport
from .decision_signals import DecisionSignalDeriver
from .errors import AirGuideError
from .freshness import classify_freshness
from .profile import ProfileInput
from .reliability import build_reliability_meta
from .station_candidates import StationCandidateGenerator, collapse_whitespace
from .unknown_station import is_unknown_station_signature

logger = logging.getLogger(__name__)

BACKFILL_FIELDS = ("pm25_value", "o3_value", "pm10_value", "no2_value")


class AdviceStage(Enum):
    """
    Stages of the advice retry ladder.

    INITIAL -> STATION_RETRIED -> SENTINEL_RETRIED -> FINAL. Each transition
    issues at most one advice request, so a report never makes more than two
    advice retries.
    """

    INITIAL = "INITIAL"
    STATION_RETRIED = "STATION_RETRIED"
    SENTINEL_RETRIED = "SENTINEL_RETRIED"
    FINAL = "FINAL"


class DailyReportSystem:
    """
    Orchestrator for the daily child-safety report.

    Upstream clients can be injected directly (air_fetcher, advice_service),
    or built per request around an injected or self-managed httpx.AsyncClient.
    No state is shared between requests apart from read-only configuration.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        client: Optional[httpx.AsyncClient] = None,
        air_fetcher: Optional[AirQualityFetcher] = None,
        advice_service: Optional[AdviceService] = None,
        deriver: Optional[DecisionSignalDeriver] = None,
    ):
        self.config = config or Config.from_env()
        self.client = client
        self.air_fetcher = air_fetcher
        self.advice_service = advice_service
        self.deriver = deriver or DecisionSignalDeriver()
        self.candidate_generator = StationCandidateGenerator(self.config.station_hints)

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[Optional[httpx.AsyncClient]]:
        """Yields the injected client, or a fresh one closed when the request ends."""
        if self.client is not None or (self.air_fetcher and self.advice_service):
            yield self.client
            return
        async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
            yield client

    def _services(self, client: Optional[httpx.AsyncClient]) -> tuple[AirQualityFetcher, AdviceService]:
        air_fetcher = self.air_fetcher or AirQualityFetcher(
            client, self.config.data_api_url, self.candidate_generator
        )
        advice_service = self.advice_service or AdviceService(client, self.config.ai_api_url)
        return (air_fetcher, advice_service)

    def _prepare_profile(self, profile: Optional[ProfileInput]) -> ProfileInput:
        profile = profile or ProfileInput()
        valid, reason = profile.validate()
        if not valid:
            logger.warning(f"DailyReportSystem: {reason}, using defaults")
        return profile.normalized()

    async def handle_request(self, payload: dict, current_hour: Optional[int] = None) -> DailyReport:
        """
        Entry point for the route layer: accepts {stationName, profile}.

        The station name is expected to be validated by the caller.
        """
        return await self.compute_report(
            payload.get("stationName") or "",
            ProfileInput.from_dict(payload.get("profile")),
            current_hour=current_hour,
        )

    async def compute_report(
        self,
        station_name: str,
        profile: Optional[ProfileInput] = None,
        current_hour: Optional[int] = None,
    ) -> DailyReport:
        """
        Builds the daily report for a location and profile.

        Workflow:
        1. Fetch air data (with station fallback) and the first advice
           concurrently; either may fail without aborting the other
        2. Walk the advice retry ladder against the resolved station
        3. Substitute a placeholder guide if no advice could be obtained
        4. Backfill missing pollutant values from the advice echo
        5. Derive decision signals and classify reliability and freshness

        Args:
            station_name: Place name requested by the caller
            profile: Profile of the child; defaults apply to missing fields
            current_hour: Optional Asia/Seoul hour for the ozone window rule

        Returns:
            The complete DailyReport
        """
        profile = self._prepare_profile(profile)
        logger.info(f"DailyReportSystem: building report for station={station_name}")

        async with self._client_scope() as client:
            air_fetcher, advice_service = self._services(client)
            air_outcome, advice_outcome = await asyncio.gather(
                air_fetcher.fetch_with_station_fallback(station_name),
                advice_service.fetch_advice(station_name, profile),
                return_exceptions=True,
            )
            air_fetch = self._settle_air(station_name, air_outcome)
            first_guide = self._settle_advice(station_name, advice_outcome)
            guide = await self._run_advice_ladder(
                advice_service, station_name, air_fetch, first_guide, profile
            )

        ai_ok = guide is not None and not guide.is_placeholder
        if guide is None:
            guide = AiGuideView.unavailable()

        air_view = AirQualityView.from_raw(air_fetch.data, air_fetch.resolved_station)
        self._backfill_from_guide(air_view, guide)

        air_view, guide, signals = self.deriver.derive(air_view, guide, profile, current_hour)
        report = DailyReport(
            air_quality=air_view,
            ai_guide=guide,
            decision_signals=signals,
            reliability=build_reliability_meta(station_name, air_fetch, ai_ok),
            freshness=classify_freshness(air_view.data_time),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self._log_report(report)
        return report

    async def refresh_air_quality(self, station_name: str) -> AirQualityRefresh:
        """
        Re-reads the air data alone, without advice or decision rules.

        Reliability is classified as if the AI were available, since no AI call
        is part of a refresh.
        """
        async with self._client_scope() as client:
            air_fetcher, _ = self._services(client)
            air_fetch = await air_fetcher.fetch_with_station_fallback(station_name)

        air_view = AirQualityView.from_raw(air_fetch.data, air_fetch.resolved_station)
        return AirQualityRefresh(
            air_quality=air_view,
            reliability=build_reliability_meta(station_name, air_fetch, True),
            freshness=classify_freshness(air_view.data_time),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def _settle_air(
        self,
        station_name: str,
        outcome: Union[AirFetchResult, BaseException],
    ) -> AirFetchResult:
        if isinstance(outcome, AirFetchResult):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        logger.error(f"DailyReportSystem: air fetch failed unexpectedly: {outcome}")
        return AirFetchResult(
            data=None,
            resolved_station=station_name,
            tried_stations=self.candidate_generator.build_candidates(station_name) or [station_name],
        )

    def _settle_advice(
        self,
        station_name: str,
        outcome: Union[AiGuideView, BaseException],
    ) -> Optional[AiGuideView]:
        if isinstance(outcome, AiGuideView):
            return outcome
        if not isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, AirGuideError):
            logger.warning(f"DailyReportSystem: advice unavailable for {station_name}: {outcome}")
        else:
            logger.error(f"DailyReportSystem: advice failed unexpectedly for {station_name}: {outcome}")
        return None

    async def _try_advice(
        self,
        advice_service: AdviceService,
        station_name: str,
        profile: ProfileInput,
    ) -> Optional[AiGuideView]:
        """Single advice attempt whose failures are logged and turned into None."""
        try:
            return await advice_service.fetch_advice(station_name, profile)
        except Exception as e:
            return self._settle_advice(station_name, e)

    async def _run_advice_ladder(
        self,
        advice_service: AdviceService,
        requested_station: str,
        air_fetch: AirFetchResult,
        guide: Optional[AiGuideView],
        profile: ProfileInput,
    ) -> Optional[AiGuideView]:
        """
        Walks the advice retry ladder.

        - INITIAL: if the air data resolved to another station, ask again for
          that station; any answer replaces the first one, a failed call keeps it
        - STATION_RETRIED: if the current advice echoes the unknown-station
          signature, ask once more for the resolved station and keep the answer
          only if it does not carry the signature too
        - SENTINEL_RETRIED: done

        Returns:
            The advice to use, or None if none could be obtained
        """
        resolved = air_fetch.resolved_station
        stage = AdviceStage.INITIAL

        while stage is not AdviceStage.FINAL:
            if stage is AdviceStage.INITIAL:
                if collapse_whitespace(requested_station) != collapse_whitespace(resolved):
                    logger.info(
                        f"DailyReportSystem: station resolved {requested_station} -> {resolved}, retrying advice"
                    )
                    retried = await self._try_advice(advice_service, resolved, profile)
                    # Advice must describe the station whose numbers are shown, so any
                    # answer for the resolved station wins, placeholders included
                    if retried is not None:
                        guide = retried
                stage = AdviceStage.STATION_RETRIED

            elif stage is AdviceStage.STATION_RETRIED:
                if guide is not None and is_unknown_station_signature(guide):
                    logger.info(
                        f"DailyReportSystem: advice carries unknown station signature, retrying for {resolved}"
                    )
                    retried = await self._try_advice(advice_service, resolved, profile)
                    if self._is_usable_retry(retried, guide) and not is_unknown_station_signature(retried):
                        guide = retried
                stage = AdviceStage.SENTINEL_RETRIED

            else:
                stage = AdviceStage.FINAL

        return guide

    @staticmethod
    def _is_usable_retry(retried: Optional[AiGuideView], current: Optional[AiGuideView]) -> bool:
        """A retry wins unless it failed, or it is a placeholder replacing real advice."""
        if retried is None:
            return False
        if retried.is_placeholder and current is not None and not current.is_placeholder:
            return False
        return True

    def _backfill_from_guide(self, air_view: AirQualityView, guide: AiGuideView) -> None:
        """Fills pollutant values missing from the air view with the advice echo."""
        if is_unknown_station_signature(guide):
            return
        for name in BACKFILL_FIELDS:
            echoed = getattr(guide, name)
            if getattr(air_view, name) is None and echoed is not None:
                setattr(air_view, name, echoed)

    def _log_report(self, report: DailyReport) -> None:
        """Writes one human-readable summary line for a finished report."""
        signals = report.decision_signals
        reliability = report.reliability

        rules = []
        if signals.o3_outing_ban_forced:
            rules.append("O3 outing ban")
        if signals.infant_mask_ban_applied:
            rules.append("infant mask ban")
        if signals.weather_adjusted:
            rules.append("weather adjustment")
        rules_str = ", ".join(rules) if rules else "None"

        logger.info(
            f"DailyReportSystem: {reliability.requested_station} -> {reliability.resolved_station} | "
            f"{signals.final_grade:8s} | {reliability.status:16s} | "
            f"tried: {len(reliability.tried_stations)} | AI: {reliability.ai_status} | "
            f"Rules: {rules_str}"
        )
