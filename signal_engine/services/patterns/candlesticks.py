"""
Candlestick Shapes

Pure predicates over one to three candles, plus the sliding-window scan that
turns them into Pattern objects. Ratio-based shapes never match a candle
whose range is zero or negative.
"""

from typing import Any, Sequence

from signal_engine.schemas.market import Candle
from signal_engine.schemas.patterns import Pattern, PatternType, Strength

# Shape thresholds (fractions of the candle range / first body)
HAMMER_MAX_BODY = 0.3
HAMMER_MAX_UPPER_SHADOW = 0.1
HAMMER_MIN_LOWER_SHADOW = 0.6
DOJI_MAX_BODY = 0.05
STAR_MAX_MIDDLE_BODY = 0.3


# =============================================================================
# SINGLE CANDLE
# =============================================================================


def is_hammer(candle: Candle) -> bool:
    """Small body, almost no upper shadow, long lower shadow."""
    if candle.range <= 0:
        return False
    return (
        candle.body / candle.range <= HAMMER_MAX_BODY
        and candle.upper_shadow / candle.range <= HAMMER_MAX_UPPER_SHADOW
        and candle.lower_shadow / candle.range >= HAMMER_MIN_LOWER_SHADOW
    )


def is_doji(candle: Candle) -> bool:
    if candle.range <= 0:
        return False
    return candle.body / candle.range <= DOJI_MAX_BODY


# =============================================================================
# TWO CANDLES
# =============================================================================


def is_hanging_man(candle: Candle, previous: Candle) -> bool:
    """Hammer shape opening above the previous close."""
    return is_hammer(candle) and previous.close < candle.open


def is_bullish_engulfing(candle: Candle, previous: Candle) -> bool:
    return (
        previous.is_bearish
        and candle.is_bullish
        and candle.open < previous.close
        and candle.close > previous.open
    )


def is_bearish_engulfing(candle: Candle, previous: Candle) -> bool:
    return (
        previous.is_bullish
        and candle.is_bearish
        and candle.open > previous.close
        and candle.close < previous.open
    )


# =============================================================================
# THREE CANDLES (first, middle, last in time order)
# =============================================================================


def is_morning_star(first: Candle, middle: Candle, last: Candle) -> bool:
    """Bearish candle, small gapped-down body, bullish close past the first midpoint."""
    if not (first.is_bearish and last.is_bullish):
        return False
    small_middle = middle.body <= first.body * STAR_MAX_MIDDLE_BODY
    closes_into_first = last.close > (first.open + first.close) / 2
    gap_down = max(first.open, first.close) > max(middle.open, middle.close)
    gap_up = min(middle.open, middle.close) < min(last.open, last.close)
    return small_middle and closes_into_first and gap_down and gap_up


def is_evening_star(first: Candle, middle: Candle, last: Candle) -> bool:
    """Mirror of the morning star."""
    if not (first.is_bullish and last.is_bearish):
        return False
    small_middle = middle.body <= first.body * STAR_MAX_MIDDLE_BODY
    closes_into_first = last.close < (first.open + first.close) / 2
    gap_up = min(first.open, first.close) < min(middle.open, middle.close)
    gap_down = max(middle.open, middle.close) > max(last.open, last.close)
    return small_middle and closes_into_first and gap_up and gap_down


# =============================================================================
# SCAN
# =============================================================================


def _ohlc(candle: Candle) -> dict[str, float]:
    return {
        "open": candle.open,
        "high": candle.high,
        "low": candle.low,
        "close": candle.close,
    }


def _oc(candle: Candle) -> dict[str, float]:
    return {"open": candle.open, "close": candle.close}


def _pattern(
    name: str,
    type_: PatternType,
    strength: Strength,
    candle: Candle,
    description: str,
    evidence: dict[str, Any],
) -> Pattern:
    return Pattern(
        name=name,
        type=type_,
        strength=strength,
        timestamp=candle.timestamp,
        description=description,
        evidence=evidence,
    )


def detect_candlestick_patterns(candles: Sequence[Candle]) -> list[Pattern]:
    """Evaluate every shape on each 3-candle window ending at index i >= 2."""
    patterns: list[Pattern] = []

    for i in range(2, len(candles)):
        first, previous, current = candles[i - 2], candles[i - 1], candles[i]

        if is_hammer(current):
            patterns.append(
                _pattern(
                    "Hammer",
                    PatternType.BULLISH,
                    Strength.MEDIUM,
                    current,
                    "Hammer candlestick",
                    {"candle": _ohlc(current)},
                )
            )

        if is_hanging_man(current, previous):
            patterns.append(
                _pattern(
                    "Hanging Man",
                    PatternType.BEARISH,
                    Strength.MEDIUM,
                    current,
                    "Hanging Man candlestick",
                    {"candle": _ohlc(current)},
                )
            )

        if is_bullish_engulfing(current, previous):
            patterns.append(
                _pattern(
                    "Bullish Engulfing",
                    PatternType.BULLISH,
                    Strength.STRONG,
                    current,
                    "Bullish candle engulfs the previous bearish body",
                    {"current_candle": _oc(current), "previous_candle": _oc(previous)},
                )
            )

        if is_bearish_engulfing(current, previous):
            patterns.append(
                _pattern(
                    "Bearish Engulfing",
                    PatternType.BEARISH,
                    Strength.STRONG,
                    current,
                    "Bearish candle engulfs the previous bullish body",
                    {"current_candle": _oc(current), "previous_candle": _oc(previous)},
                )
            )

        if is_doji(current):
            patterns.append(
                _pattern(
                    "Doji",
                    PatternType.NEUTRAL,
                    Strength.WEAK,
                    current,
                    "Doji candlestick",
                    {"candle": _ohlc(current)},
                )
            )

        star_evidence = {
            "candles": {
                "first": _oc(first),
                "second": _oc(previous),
                "third": _oc(current),
            }
        }

        if is_morning_star(first, previous, current):
            patterns.append(
                _pattern(
                    "Morning Star",
                    PatternType.BULLISH,
                    Strength.STRONG,
                    current,
                    "Morning Star three-candle reversal",
                    star_evidence,
                )
            )

        if is_evening_star(first, previous, current):
            patterns.append(
                _pattern(
                    "Evening Star",
                    PatternType.BEARISH,
                    Strength.STRONG,
                    current,
                    "Evening Star three-candle reversal",
                    star_evidence,
                )
            )

    return patterns
