"""
Candle Provider Interface

Defines the contract for loading historical candles.
"""

from abc import ABC, abstractmethod

from signal_engine.schemas.market import Candle, Timeframe


class CandleProvider(ABC):
    """
    Candle Provider Contract.

    INPUT: pair, timeframe, limit

    OUTPUT: list[Candle]
        - The most recent `limit` candles, ascending by timestamp
        - Empty list if nothing is known for the pair/timeframe
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def get_candles(
        self, pair: str, timeframe: Timeframe, limit: int
    ) -> list[Candle]:
        """Load recent candles."""
        pass
