"""
Technical Indicator Calculations

Pure Python/NumPy implementations of technical indicators.
All math is deterministic. Warm-up slots are NaN, never zero.
"""

import numpy as np
from dataclasses import dataclass
from typing import Sequence

from signal_engine.schemas.market import Candle


@dataclass
class OHLCVData:
    """OHLCV data arrays for calculations."""

    timestamps: list
    opens: np.ndarray
    highs: np.ndarray
    lows: np.ndarray
    closes: np.ndarray
    volumes: np.ndarray

    @classmethod
    def from_candles(cls, candles: Sequence[Candle]) -> "OHLCVData":
        """Convert a candle list to float64 arrays."""
        return cls(
            timestamps=[c.timestamp for c in candles],
            opens=np.array([c.open for c in candles], dtype=float),
            highs=np.array([c.high for c in candles], dtype=float),
            lows=np.array([c.low for c in candles], dtype=float),
            closes=np.array([c.close for c in candles], dtype=float),
            volumes=np.array([c.volume for c in candles], dtype=float),
        )

    def source(self, name: str) -> np.ndarray:
        """Price array by source name (open/high/low/close/volume)."""
        sources = {
            "open": self.opens,
            "high": self.highs,
            "low": self.lows,
            "close": self.closes,
            "volume": self.volumes,
        }
        if name not in sources:
            raise KeyError(name)
        return sources[name]

    def __len__(self) -> int:
        return len(self.closes)


def _undefined(n: int) -> np.ndarray:
    return np.full(n, np.nan)


# =============================================================================
# MOVING AVERAGES
# =============================================================================


def sma(data: np.ndarray, period: int) -> np.ndarray:
    """Simple Moving Average. Windows touching a NaN stay undefined."""
    if len(data) < period:
        return _undefined(len(data))

    result = _undefined(len(data))
    for i in range(period - 1, len(data)):
        result[i] = np.mean(data[i - period + 1 : i + 1])
    return result


def ema(data: np.ndarray, period: int) -> np.ndarray:
    """
    Exponential Moving Average.

    Seeded with the SMA of the first `period` defined values; leading NaNs
    (e.g. a MACD line still warming up) shift the seed forward.
    """
    result = _undefined(len(data))
    defined = np.flatnonzero(~np.isnan(data))
    if len(defined) == 0:
        return result

    start = int(defined[0])
    if len(data) - start < period:
        return result

    multiplier = 2 / (period + 1)

    # Start with SMA
    seed_index = start + period - 1
    result[seed_index] = np.mean(data[start : start + period])

    # Calculate EMA
    for i in range(seed_index + 1, len(data)):
        result[i] = (data[i] - result[i - 1]) * multiplier + result[i - 1]

    return result


# =============================================================================
# MOMENTUM INDICATORS
# =============================================================================


def rsi(data: np.ndarray, period: int = 14) -> np.ndarray:
    """Relative Strength Index with Wilder smoothing. First value at `period`."""
    if len(data) < period + 1:
        return _undefined(len(data))

    # Calculate price changes
    deltas = np.diff(data)

    # Separate gains and losses
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    # First average
    avg_gain = np.mean(gains[:period])
    avg_loss = np.mean(losses[:period])

    result = _undefined(len(data))
    result[period] = _rsi_value(avg_gain, avg_loss)

    # Subsequent RSI values using smoothed averages
    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        result[i + 1] = _rsi_value(avg_gain, avg_loss)

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(
    data: np.ndarray,
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    MACD (Moving Average Convergence Divergence).

    The MACD line is defined from `slow_period - 1`; the signal line is the
    EMA of the MACD line and starts at `slow_period + signal_period - 2`.

    Returns: (macd_line, signal_line, histogram)
    """
    fast_ema = ema(data, fast_period)
    slow_ema = ema(data, slow_period)

    macd_line = fast_ema - slow_ema

    # Signal line is EMA of MACD line
    signal_line = ema(macd_line, signal_period)

    # Histogram
    histogram = macd_line - signal_line

    return macd_line, signal_line, histogram


def stochastic(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    k_period: int = 14,
    d_period: int = 3,
    smooth: int = 3,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Stochastic Oscillator.

    Raw %K is 50 when the window's high equals its low. With `smooth > 1`
    %K is the simple mean of the last `smooth` raw values.

    Returns: (k, d)
    """
    if len(closes) < k_period:
        return _undefined(len(closes)), _undefined(len(closes))

    k = _undefined(len(closes))

    for i in range(k_period - 1, len(closes)):
        highest_high = np.max(highs[i - k_period + 1 : i + 1])
        lowest_low = np.min(lows[i - k_period + 1 : i + 1])

        if highest_high == lowest_low:
            k[i] = 50
        else:
            k[i] = 100 * ((closes[i] - lowest_low) / (highest_high - lowest_low))

    if smooth > 1:
        k = sma(k, smooth)

    d = sma(k, d_period)

    return k, d


def cci(
    highs: np.ndarray,
    lows: np.ndarray,
    closes: np.ndarray,
    period: int = 20,
    constant: float = 0.015,
) -> np.ndarray:
    """Commodity Channel Index. Zero when the mean deviation is zero."""
    typical_price = (highs + lows + closes) / 3
    tp_sma = sma(typical_price, period)

    result = _undefined(len(closes))
    for i in range(period - 1, len(closes)):
        mean_dev = np.mean(np.abs(typical_price[i - period + 1 : i + 1] - tp_sma[i]))
        if mean_dev == 0:
            result[i] = 0.0
        else:
            result[i] = (typical_price[i] - tp_sma[i]) / (constant * mean_dev)

    return result


# =============================================================================
# VOLATILITY INDICATORS
# =============================================================================


def true_range(highs: np.ndarray, lows: np.ndarray, closes: np.ndarray) -> np.ndarray:
    """True range; the first candle has no previous close so TR = high - low."""
    tr = highs - lows
    if len(closes) > 1:
        prev_close = closes[:-1]
        tr[1:] = np.maximum.reduce(
            [
                highs[1:] - lows[1:],
                np.abs(highs[1:] - prev_close),
                np.abs(lows[1:] - prev_close),
            ]
        )
    return tr


def atr(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> np.ndarray:
    """Average True Range: SMA seed of the first `period` TRs, then Wilder."""
    if len(closes) < period:
        return _undefined(len(closes))

    tr = true_range(highs, lows, closes)
    result = _undefined(len(closes))

    value = np.mean(tr[:period])
    result[period - 1] = value
    for i in range(period, len(tr)):
        value = (value * (period - 1) + tr[i]) / period
        result[i] = value

    return result


def bollinger_bands(
    data: np.ndarray, period: int = 20, std_dev: float = 2.0
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Bollinger Bands with population standard deviation.

    Returns: (upper, middle, lower)
    """
    middle = sma(data, period)

    # Standard deviation
    std = _undefined(len(data))
    for i in range(period - 1, len(data)):
        std[i] = np.std(data[i - period + 1 : i + 1])

    upper = middle + (std_dev * std)
    lower = middle - (std_dev * std)

    return upper, middle, lower


# =============================================================================
# VOLUME INDICATORS
# =============================================================================


def obv(closes: np.ndarray, volumes: np.ndarray) -> np.ndarray:
    """On-Balance Volume, starting from the first candle's volume."""
    result = np.zeros(len(closes))
    if len(closes) == 0:
        return result
    result[0] = volumes[0]

    for i in range(1, len(closes)):
        if closes[i] > closes[i - 1]:
            result[i] = result[i - 1] + volumes[i]
        elif closes[i] < closes[i - 1]:
            result[i] = result[i - 1] - volumes[i]
        else:
            result[i] = result[i - 1]

    return result


# =============================================================================
# TREND INDICATORS
# =============================================================================


def wilder_sum(data: np.ndarray, period: int) -> np.ndarray:
    """
    Wilder running sum: first = sum of the first `period` values,
    then s = s - s/period + x. Element j covers data[j + period - 1].
    """
    if len(data) < period:
        return np.array([])

    smoothed = np.zeros(len(data) - period + 1)
    smoothed[0] = np.sum(data[:period])
    for j in range(1, len(smoothed)):
        smoothed[j] = smoothed[j - 1] - (smoothed[j - 1] / period) + data[j + period - 1]
    return smoothed


def adx(
    highs: np.ndarray, lows: np.ndarray, closes: np.ndarray, period: int = 14
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Average Directional Index.

    +DI/-DI are defined from candle `period`; ADX is the simple mean of DX
    over `period` values and is defined from candle `2 * period - 1`.

    Returns: (adx, plus_di, minus_di)
    """
    n = len(closes)
    adx_result = _undefined(n)
    plus_di = _undefined(n)
    minus_di = _undefined(n)

    if n < period * 2:
        return adx_result, plus_di, minus_di

    # Directional movement from the second candle on
    up_move = highs[1:] - highs[:-1]
    down_move = lows[:-1] - lows[1:]
    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    tr = true_range(highs, lows, closes)[1:]

    # Smooth the values
    smoothed_tr = wilder_sum(tr, period)
    smoothed_plus_dm = wilder_sum(plus_dm, period)
    smoothed_minus_dm = wilder_sum(minus_dm, period)

    dx = np.zeros(len(smoothed_tr))
    for j in range(len(smoothed_tr)):
        candle = j + period
        if smoothed_tr[j] == 0:
            plus_di[candle] = 0.0
            minus_di[candle] = 0.0
        else:
            plus_di[candle] = 100 * (smoothed_plus_dm[j] / smoothed_tr[j])
            minus_di[candle] = 100 * (smoothed_minus_dm[j] / smoothed_tr[j])

        di_sum = plus_di[candle] + minus_di[candle]
        if di_sum == 0:
            dx[j] = 0.0
        else:
            dx[j] = 100 * (abs(plus_di[candle] - minus_di[candle]) / di_sum)

    # ADX is the simple mean of DX
    for j in range(period - 1, len(dx)):
        adx_result[j + period] = np.mean(dx[j - period + 1 : j + 1])

    return adx_result, plus_di, minus_di
