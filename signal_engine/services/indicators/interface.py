"""
Indicator Service Interface

Defines the contract for the indicator calculation layer.
"""

from abc import abstractmethod
from typing import Sequence

from signal_engine.services.base import BaseService
from signal_engine.schemas.indicators import (
    IndicatorBatchRequest,
    IndicatorRequest,
    IndicatorSeries,
)
from signal_engine.schemas.market import Candle, Timeframe


class IndicatorServiceInterface(
    BaseService[IndicatorBatchRequest, dict[str, IndicatorSeries]]
):
    """
    Indicator Service Contract.

    INPUT: IndicatorBatchRequest
        - pair, timeframe: identity used for the store key
        - candles: ascending OHLCV candles
        - indicators: list of IndicatorRequest

    OUTPUT: dict[str, IndicatorSeries]
        - Key: indicator display name (e.g. "Bollinger Bands")
        - Value: series aligned with the candles (empty if not computable)
    """

    @property
    def name(self) -> str:
        return "IndicatorService"

    @abstractmethod
    async def execute(
        self, input_data: IndicatorBatchRequest
    ) -> dict[str, IndicatorSeries]:
        """Calculate every requested indicator for the batch."""
        pass

    @abstractmethod
    async def get_series(
        self,
        pair: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
        request: IndicatorRequest,
    ) -> IndicatorSeries:
        """
        Read-through lookup of one indicator.

        Args:
            pair: Trading pair
            timeframe: Candle timeframe
            candles: Candles the series must cover
            request: Indicator name and parameter overrides

        Returns:
            Stored series if it covers every candle, else a fresh calculation
        """
        pass

    @abstractmethod
    async def calculate_all(
        self,
        pair: str,
        timeframe: Timeframe,
        candles: Sequence[Candle],
        requests: list[IndicatorRequest],
    ) -> dict[str, IndicatorSeries]:
        """Run get_series for each request; failures are skipped."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Indicator service is always healthy (pure computation)."""
        pass
