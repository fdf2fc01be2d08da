"""
Analysis Service Implementation

Orchestrates the analysis pipeline:
    Candles → Indicators → Patterns → Signals → Signal store

This is the main entry point for analysing trading pairs.
"""

import asyncio
import logging
from typing import Optional

from signal_engine.core.config import settings
from signal_engine.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    AnalysisStatus,
    BatchSummary,
)
from signal_engine.schemas.indicators import IndicatorRequest
from signal_engine.services.analysis.interface import AnalysisServiceInterface
from signal_engine.services.cache import SignalStore, get_signal_store
from signal_engine.services.data import CandleProvider, InMemoryCandleProvider
from signal_engine.services.indicators import IndicatorService, get_indicator_service
from signal_engine.services.patterns import PatternDetector, get_pattern_detector
from signal_engine.services.signals import SignalGenerator, get_signal_generator

logger = logging.getLogger(__name__)


def _default_indicator_requests() -> list[IndicatorRequest]:
    return [IndicatorRequest(name=name) for name in settings.default_indicators]


class AnalysisService(AnalysisServiceInterface):
    """
    Analysis Service.

    Collaborators are injected; anything not given is resolved lazily
    from the module singletons.
    """

    def __init__(
        self,
        candle_provider: Optional[CandleProvider] = None,
        indicator_service: Optional[IndicatorService] = None,
        signal_store: Optional[SignalStore] = None,
        detector: Optional[PatternDetector] = None,
        generator: Optional[SignalGenerator] = None,
    ):
        self.candle_provider = candle_provider or InMemoryCandleProvider()
        self._indicator_service = indicator_service
        self._signal_store = signal_store
        self.detector = detector or get_pattern_detector()
        self.generator = generator or get_signal_generator()

    @property
    def indicator_service(self) -> IndicatorService:
        """Lazy load indicator service."""
        if self._indicator_service is None:
            self._indicator_service = get_indicator_service()
        return self._indicator_service

    @property
    def signal_store(self) -> SignalStore:
        """Lazy load signal store."""
        if self._signal_store is None:
            self._signal_store = get_signal_store()
        return self._signal_store

    async def execute(self, input_data: AnalysisRequest) -> AnalysisResult:
        return await self.analyze(input_data)

    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Run the analysis pipeline for one unit.

        Pipeline:
            1. Candle Provider → candles
            2. Indicator Service → series per indicator
            3. Pattern Detector → patterns
            4. Signal Generator → signals (saved to the signal store)
        """
        pair = request.pair.upper()
        timeframe = request.timeframe

        logger.info(f"Starting analysis for {pair} ({timeframe.value})")

        # =================================================================
        # STAGE 1: Candles
        # =================================================================
        candles = await self.candle_provider.get_candles(pair, timeframe, request.limit)

        if not candles:
            logger.warning(f"No historical data for {pair} ({timeframe.value})")
            return AnalysisResult(
                pair=pair,
                timeframe=timeframe,
                status=AnalysisStatus.ERROR,
                message=f"No historical data for {pair} ({timeframe.value})",
            )
        logger.info(f"Stage 1 complete: Got {len(candles)} candles")

        # =================================================================
        # STAGE 2: Indicators
        # =================================================================
        requests = request.indicators or _default_indicator_requests()
        indicators = await self.indicator_service.calculate_all(
            pair, timeframe, candles, requests
        )
        logger.info(f"Stage 2 complete: {len(indicators)} indicator series")

        # =================================================================
        # STAGE 3: Patterns
        # =================================================================
        patterns = self.detector.detect(candles, indicators)
        logger.info(f"Stage 3 complete: {len(patterns)} patterns")

        # =================================================================
        # STAGE 4: Signals
        # =================================================================
        signals = []
        if request.generate_signals:
            signals = self.generator.generate(candles, patterns, timeframe, pair=pair)
            if signals:
                await self.signal_store.save(signals)
            logger.info(f"Stage 4 complete: {len(signals)} signals")

        logger.info(f"Analysis complete for {pair} ({timeframe.value})")
        return AnalysisResult(
            pair=pair,
            timeframe=timeframe,
            status=AnalysisStatus.SUCCESS,
            message=f"Found {len(patterns)} patterns, generated {len(signals)} signals",
            candle_count=len(candles),
            indicators=indicators,
            patterns=patterns,
            signals=signals,
        )

    async def analyze_batch(self, requests: list[AnalysisRequest]) -> BatchSummary:
        """Analyse units concurrently; failures become error results."""
        tasks = [self.analyze(request) for request in requests]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, AnalysisResult):
                results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                # CancelledError and friends are not unit failures
                raise outcome
            logger.error(
                f"Error analysing {request.pair} ({request.timeframe.value}): {outcome}"
            )
            results.append(
                AnalysisResult(
                    pair=request.pair.upper(),
                    timeframe=request.timeframe,
                    status=AnalysisStatus.ERROR,
                    message=str(outcome),
                )
            )

        summary = BatchSummary.from_results(results)
        logger.info(
            f"Batch complete: {summary.success_count} ok, {summary.error_count} failed, "
            f"{summary.pattern_count} patterns, {summary.signal_count} signals"
        )
        return summary

    async def health_check(self) -> bool:
        """Check health of dependent services."""
        try:
            return await self.indicator_service.health_check()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return False


# Singleton instance
_service_instance: Optional[AnalysisService] = None


def get_analysis_service(
    candle_provider: Optional[CandleProvider] = None,
) -> AnalysisService:
    """Get or create analysis service singleton."""
    global _service_instance
    if _service_instance is None:
        _service_instance = AnalysisService(candle_provider=candle_provider)
    return _service_instance
