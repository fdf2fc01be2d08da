"""
Shared fixtures: deterministic candle series.
"""

import math
from datetime import datetime, timedelta, timezone

import pytest

from signal_engine.schemas.market import Candle

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def build_candles(closes, step=timedelta(days=1), wick=0.5, volume=1000.0, start=BASE_TIME):
    """Each candle opens at the previous close; wicks extend `wick` past the body."""
    candles = []
    previous = closes[0] + 1
    for i, close in enumerate(closes):
        open_ = previous
        candles.append(
            Candle(
                timestamp=start + i * step,
                open=open_,
                high=max(open_, close) + wick,
                low=max(min(open_, close) - wick, 0.0),
                close=close,
                volume=volume + i,
            )
        )
        previous = close
    return candles


def candle(open_, high, low, close, index=0, volume=1000.0):
    return Candle(
        timestamp=BASE_TIME + timedelta(days=index),
        open=open_,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


@pytest.fixture
def make_candles():
    return build_candles


@pytest.fixture
def make_candle():
    return candle


@pytest.fixture
def wave_candles():
    """80 daily candles: sine wave on a gentle uptrend."""
    closes = [100 + 10 * math.sin(i / 5) + i * 0.2 for i in range(80)]
    return build_candles(closes)


@pytest.fixture
def crossover_candles():
    """
    25 daily candles falling one point a day from 120, then a jump to 130.

    The last close crosses above SMA(20); no earlier candle crosses it.
    """
    closes = [120.0 - i for i in range(24)] + [130.0]
    return build_candles(closes)
