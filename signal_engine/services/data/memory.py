"""
In-memory candle provider.

Serves pre-loaded candle series; used by tests and by callers that
already hold their market data.
"""

import logging
from typing import Iterable, Optional

from signal_engine.schemas.market import Candle, CandleSeries, Timeframe
from signal_engine.services.data.interface import CandleProvider

logger = logging.getLogger(__name__)


class InMemoryCandleProvider(CandleProvider):
    """Candle provider backed by a dict of (PAIR, timeframe) -> candles."""

    def __init__(self, series: Optional[Iterable[CandleSeries]] = None):
        self._candles: dict[tuple[str, Timeframe], list[Candle]] = {}
        for item in series or ():
            self.load(item)

    def load(self, series: CandleSeries) -> None:
        """Replace the candles held for the series' pair and timeframe."""
        key = (series.pair.upper(), series.timeframe)
        self._candles[key] = sorted(series.candles, key=lambda c: c.timestamp)
        logger.debug(f"Loaded {len(series.candles)} candles for {key[0]} {key[1].value}")

    async def get_candles(
        self, pair: str, timeframe: Timeframe, limit: int
    ) -> list[Candle]:
        candles = self._candles.get((pair.upper(), Timeframe.parse(timeframe)), [])
        if limit <= 0:
            return []
        return list(candles[-limit:])
