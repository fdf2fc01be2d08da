"""
CONTRACT 1: Candle Series

Input for every analysis run.

Candles are supplied by an external provider, ordered ascending by timestamp.
Uniqueness per (pair, timeframe, timestamp) is the provider's invariant.
"""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class Timeframe(str, Enum):
    M1 = "1m"
    M3 = "3m"
    M5 = "5m"
    M15 = "15m"
    M30 = "30m"
    H1 = "1h"
    H2 = "2h"
    H4 = "4h"
    H6 = "6h"
    H8 = "8h"
    H12 = "12h"
    D1 = "1d"
    D3 = "3d"
    W1 = "1w"
    MN1 = "1M"

    @property
    def duration(self) -> int:
        """Candle duration in seconds."""
        return TIMEFRAME_SECONDS[self]

    @classmethod
    def parse(cls, value: "str | Timeframe") -> "Timeframe":
        if isinstance(value, Timeframe):
            return value
        # exact match: "1M" is a month, "1m" a minute
        return cls(value)


# Timeframe to seconds
TIMEFRAME_SECONDS = {
    Timeframe.M1: 60,
    Timeframe.M3: 60 * 3,
    Timeframe.M5: 60 * 5,
    Timeframe.M15: 60 * 15,
    Timeframe.M30: 60 * 30,
    Timeframe.H1: 60 * 60,
    Timeframe.H2: 60 * 60 * 2,
    Timeframe.H4: 60 * 60 * 4,
    Timeframe.H6: 60 * 60 * 6,
    Timeframe.H8: 60 * 60 * 8,
    Timeframe.H12: 60 * 60 * 12,
    Timeframe.D1: 60 * 60 * 24,
    Timeframe.D3: 60 * 60 * 24 * 3,
    Timeframe.W1: 60 * 60 * 24 * 7,
    Timeframe.MN1: 60 * 60 * 24 * 30,
}

DEFAULT_CANDLE_SECONDS = 60 * 60 * 24


def candle_duration(timeframe: "str | Timeframe") -> int:
    """Seconds per candle; unknown timeframes count as one day."""
    try:
        return Timeframe.parse(timeframe).duration
    except ValueError:
        return DEFAULT_CANDLE_SECONDS


# =============================================================================
# CANDLES
# =============================================================================


class Candle(BaseModel):
    """Single OHLCV candlestick."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    open: float = Field(..., ge=0)
    high: float = Field(..., ge=0)
    low: float = Field(..., ge=0)
    close: float = Field(..., ge=0)
    volume: float = Field(default=0.0, ge=0)

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def upper_shadow(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_shadow(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


class CandleSeries(BaseModel):
    """
    Candles for one (pair, timeframe).
    Returned by: CandleProvider
    Consumed by: AnalysisService
    """

    pair: str
    timeframe: Timeframe = Timeframe.D1
    candles: list[Candle] = Field(default_factory=list)

    @field_validator("candles")
    @classmethod
    def _ascending(cls, candles: list[Candle]) -> list[Candle]:
        for previous, current in zip(candles, candles[1:]):
            if current.timestamp < previous.timestamp:
                raise ValueError("candles must be ordered ascending by timestamp")
        return candles
