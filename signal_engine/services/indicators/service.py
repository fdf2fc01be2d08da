"""
Indicator Service Implementation

Read-through layer over IndicatorCalculator: serves stored series computed
from the same first candle when they cover the requested candles, otherwise
calculates and persists.
"""

import logging
from typing import Optional, Sequence

from signal_engine.schemas.indicators import (
    IndicatorBatchRequest,
    IndicatorRequest,
    IndicatorSeries,
    merge_parameters,
)
from signal_engine.schemas.market import Candle, Timeframe
from signal_engine.services.cache import IndicatorKey, IndicatorStore, get_indicator_store
from signal_engine.services.indicators.calculator import (
    IndicatorCalculator,
    get_indicator_calculator,
)
from signal_engine.services.indicators.interface import IndicatorServiceInterface

logger = logging.getLogger(__name__)


def _covering(
    stored: Optional[IndicatorSeries], candles: Sequence[Candle]
) -> Optional[IndicatorSeries]:
    """Stored slots re-aligned to the candles, or None if any timestamp is missing."""
    if stored is None or stored.is_empty:
        return None

    slots = dict(zip(stored.timestamps, stored.values))
    timestamps = [c.timestamp for c in candles]
    if any(ts not in slots for ts in timestamps):
        return None

    return IndicatorSeries(
        kind=stored.kind,
        name=stored.name,
        parameters=stored.parameters,
        timestamps=timestamps,
        values=[slots[ts] for ts in timestamps],
    )


class IndicatorService(IndicatorServiceInterface):
    """
    Indicator Service.

    The store is injected; without one every call calculates.
    """

    def __init__(
        self,
        store: Optional[IndicatorStore] = None,
        calculator: Optional[IndicatorCalculator] = None,
    ):
        self.store = store
        self.calculator = calculator or get_indicator_calculator()

    async def execute(
        self, input_data: IndicatorBatchRequest
    ) -> dict[str, IndicatorSeries]:
        """Calculate indicators for one candle batch."""
        return await self.calculate_all(
            input_data.pair,
            input_data.timeframe,
            input_data.candles,
            input_data.indicators,
        )

    async def get_series(
        self,
        pair: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
        request: IndicatorRequest,
    ) -> IndicatorSeries:
        kind = request.kind
        if kind is None:
            # Unsupported: calculator logs and returns an empty series
            return self.calculator.calculate_request(request, candles)

        params = merge_parameters(kind, request.parameters)
        self.calculator.validate_parameters(kind, params)
        key = IndicatorKey(
            indicator=kind.value,
            pair=pair,
            timeframe=timeframe,
            parameters=params,
            start=candles[0].timestamp if candles else None,
        )

        if self.store is not None:
            cached = _covering(await self.store.get(key), candles)
            if cached is not None:
                logger.debug(f"{pair} {timeframe.value} {kind.value}: served from store")
                return cached

        series = self.calculator.calculate(kind, candles, params)

        if self.store is not None and not series.is_empty:
            await self.store.put(key, series)

        return series

    async def calculate_all(
        self,
        pair: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
        requests: list[IndicatorRequest],
    ) -> dict[str, IndicatorSeries]:
        results: dict[str, IndicatorSeries] = {}

        for request in requests:
            try:
                series = await self.get_series(pair, timeframe, candles, request)
            except Exception as e:
                # Log error but continue with other indicators
                logger.error(f"Error calculating {request.name} for {pair}: {e}")
                continue

            if series.name in results:
                logger.warning(
                    f"{pair}: duplicate indicator {series.name}, keeping the last request"
                )
            results[series.name] = series

        computed = sum(1 for s in results.values() if not s.is_empty)
        logger.info(
            f"{pair} {timeframe.value}: {computed}/{len(requests)} indicators computed"
        )
        return results

    async def health_check(self) -> bool:
        return True


# Singleton instance
_indicator_service: Optional[IndicatorService] = None


def get_indicator_service() -> IndicatorService:
    """Get or create indicator service singleton."""
    global _indicator_service
    if _indicator_service is None:
        _indicator_service = IndicatorService(store=get_indicator_store())
    return _indicator_service
