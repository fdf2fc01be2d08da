"""
Indicator Detection Rules

Each rule compares candle i with candle i-1 and the matching indicator slots.
Slots that are still warming up (None) skip that step.
"""

from dataclasses import dataclass
from typing import Callable, Sequence

from signal_engine.schemas.indicators import IndicatorKind, IndicatorSeries
from signal_engine.schemas.market import Candle
from signal_engine.schemas.patterns import Pattern, PatternType, Strength

# Divergence needs some history behind the current candle
DIVERGENCE_MIN_INDEX = 5

RuleFn = Callable[[Sequence[Candle], IndicatorSeries], list[Pattern]]


@dataclass(frozen=True)
class DetectionRule:
    """
    A pattern rule and the indicator kinds it can read.

    When several kinds are listed the first usable one is taken,
    e.g. the MA cross reads EMA before SMA.
    """

    name: str
    kinds: tuple[IndicatorKind, ...]
    detect: RuleFn


def _pairs(series: IndicatorSeries):
    """(i, previous slot, current slot) for i >= 1 with both slots defined."""
    for i in range(1, len(series)):
        previous, current = series[i - 1], series[i]
        if previous is None or current is None:
            continue
        yield i, previous, current


# =============================================================================
# MOVING AVERAGE CROSS
# =============================================================================


def detect_ma_cross(candles: Sequence[Candle], series: IndicatorSeries) -> list[Pattern]:
    patterns = []
    ma_type = series.kind.value if series.kind else series.name

    for i, prev_ma, cur_ma in _pairs(series):
        candle, prev_candle = candles[i], candles[i - 1]
        evidence = {"ma_type": ma_type, "ma_value": cur_ma.value, "close": candle.close}

        if prev_candle.close < prev_ma.value and candle.close > cur_ma.value:
            patterns.append(
                Pattern(
                    name="Golden Cross",
                    type=PatternType.BULLISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description=f"Price crossed above {ma_type}",
                    evidence=evidence,
                )
            )
        if prev_candle.close > prev_ma.value and candle.close < cur_ma.value:
            patterns.append(
                Pattern(
                    name="Death Cross",
                    type=PatternType.BEARISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description=f"Price crossed below {ma_type}",
                    evidence=evidence,
                )
            )

    return patterns


# =============================================================================
# RSI
# =============================================================================


def detect_rsi(candles: Sequence[Candle], series: IndicatorSeries) -> list[Pattern]:
    patterns = []

    for i, prev, cur in _pairs(series):
        candle = candles[i]

        if prev.value < cur.oversold < cur.value:
            patterns.append(
                Pattern(
                    name="RSI Oversold Exit",
                    type=PatternType.BULLISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="RSI left the oversold zone",
                    evidence={"rsi": cur.value, "oversold": cur.oversold},
                )
            )
        if prev.value > cur.overbought > cur.value:
            patterns.append(
                Pattern(
                    name="RSI Overbought Exit",
                    type=PatternType.BEARISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="RSI left the overbought zone",
                    evidence={"rsi": cur.value, "overbought": cur.overbought},
                )
            )

        if i < DIVERGENCE_MIN_INDEX:
            continue

        divergence = {"rsi_current": cur.value, "rsi_previous": prev.value}
        if cur.value > prev.value and candle.low < candles[i - 1].low:
            patterns.append(
                Pattern(
                    name="RSI Bullish Divergence",
                    type=PatternType.BULLISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="Lower low in price with rising RSI",
                    evidence=divergence,
                )
            )
        if cur.value < prev.value and candle.high > candles[i - 1].high:
            patterns.append(
                Pattern(
                    name="RSI Bearish Divergence",
                    type=PatternType.BEARISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="Higher high in price with falling RSI",
                    evidence=divergence,
                )
            )

    return patterns


# =============================================================================
# MACD
# =============================================================================


def detect_macd(candles: Sequence[Candle], series: IndicatorSeries) -> list[Pattern]:
    patterns = []

    for i, prev, cur in _pairs(series):
        if prev.signal is None or cur.signal is None:
            continue
        candle = candles[i]

        if prev.macd < prev.signal and cur.macd > cur.signal:
            patterns.append(
                Pattern(
                    name="MACD Bullish Crossover",
                    type=PatternType.BULLISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description="MACD line crossed above the signal line",
                    evidence={"macd": cur.macd, "signal": cur.signal},
                )
            )
        if prev.macd > prev.signal and cur.macd < cur.signal:
            patterns.append(
                Pattern(
                    name="MACD Bearish Crossover",
                    type=PatternType.BEARISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description="MACD line crossed below the signal line",
                    evidence={"macd": cur.macd, "signal": cur.signal},
                )
            )

        if prev.histogram is None or cur.histogram is None:
            continue
        histogram = {"histogram": cur.histogram, "previous_histogram": prev.histogram}
        if prev.histogram < 0 < cur.histogram:
            patterns.append(
                Pattern(
                    name="MACD Histogram Direction Change (Bullish)",
                    type=PatternType.BULLISH,
                    strength=Strength.WEAK,
                    timestamp=candle.timestamp,
                    description="MACD histogram turned positive",
                    evidence=histogram,
                )
            )
        if prev.histogram > 0 > cur.histogram:
            patterns.append(
                Pattern(
                    name="MACD Histogram Direction Change (Bearish)",
                    type=PatternType.BEARISH,
                    strength=Strength.WEAK,
                    timestamp=candle.timestamp,
                    description="MACD histogram turned negative",
                    evidence=histogram,
                )
            )

    return patterns


# =============================================================================
# BOLLINGER BANDS
# =============================================================================


def detect_bollinger(candles: Sequence[Candle], series: IndicatorSeries) -> list[Pattern]:
    patterns = []

    for i, prev, cur in _pairs(series):
        candle, prev_candle = candles[i], candles[i - 1]
        lower = {"lower_band": cur.lower, "close": candle.close}
        upper = {"upper_band": cur.upper, "close": candle.close}

        if prev_candle.low <= prev.lower and candle.close > cur.lower:
            patterns.append(
                Pattern(
                    name="Bollinger Bands Bounce (Lower)",
                    type=PatternType.BULLISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description="Price bounced off the lower band",
                    evidence=lower,
                )
            )
        if prev_candle.high >= prev.upper and candle.close < cur.upper:
            patterns.append(
                Pattern(
                    name="Bollinger Bands Bounce (Upper)",
                    type=PatternType.BEARISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description="Price bounced off the upper band",
                    evidence=upper,
                )
            )
        if prev_candle.close < prev.upper and candle.close > cur.upper:
            patterns.append(
                Pattern(
                    name="Bollinger Bands Breakout (Upper)",
                    type=PatternType.BULLISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="Close broke above the upper band",
                    evidence=upper,
                )
            )
        if prev_candle.close > prev.lower and candle.close < cur.lower:
            patterns.append(
                Pattern(
                    name="Bollinger Bands Breakout (Lower)",
                    type=PatternType.BEARISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="Close broke below the lower band",
                    evidence=lower,
                )
            )

    return patterns


# =============================================================================
# STOCHASTIC
# =============================================================================


def detect_stochastic(candles: Sequence[Candle], series: IndicatorSeries) -> list[Pattern]:
    patterns = []

    for i, prev, cur in _pairs(series):
        # %D still warming up on either candle: skip the step
        if prev.d is None or cur.d is None:
            continue
        candle = candles[i]
        crossover = {"k": cur.k, "d": cur.d}

        if prev.k < prev.d and cur.k > cur.d and cur.k < cur.oversold:
            patterns.append(
                Pattern(
                    name="Stochastic Bullish Crossover (Oversold)",
                    type=PatternType.BULLISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="%K crossed above %D in the oversold zone",
                    evidence={**crossover, "oversold": cur.oversold},
                )
            )
        if prev.k > prev.d and cur.k < cur.d and cur.k > cur.overbought:
            patterns.append(
                Pattern(
                    name="Stochastic Bearish Crossover (Overbought)",
                    type=PatternType.BEARISH,
                    strength=Strength.STRONG,
                    timestamp=candle.timestamp,
                    description="%K crossed below %D in the overbought zone",
                    evidence={**crossover, "overbought": cur.overbought},
                )
            )

        if prev.k < cur.oversold < cur.k:
            patterns.append(
                Pattern(
                    name="Stochastic Oversold Exit",
                    type=PatternType.BULLISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description="%K left the oversold zone",
                    evidence={"k": cur.k, "oversold": cur.oversold},
                )
            )
        if prev.k > cur.overbought > cur.k:
            patterns.append(
                Pattern(
                    name="Stochastic Overbought Exit",
                    type=PatternType.BEARISH,
                    strength=Strength.MEDIUM,
                    timestamp=candle.timestamp,
                    description="%K left the overbought zone",
                    evidence={"k": cur.k, "overbought": cur.overbought},
                )
            )

    return patterns


# =============================================================================
# REGISTRY
# =============================================================================

# Evaluation order is the output order
RULES: tuple[DetectionRule, ...] = (
    DetectionRule("ma_cross", (IndicatorKind.EMA, IndicatorKind.SMA), detect_ma_cross),
    DetectionRule("rsi", (IndicatorKind.RSI,), detect_rsi),
    DetectionRule("macd", (IndicatorKind.MACD,), detect_macd),
    DetectionRule("bollinger", (IndicatorKind.BOLLINGER,), detect_bollinger),
    DetectionRule("stochastic", (IndicatorKind.STOCHASTIC,), detect_stochastic),
)

RULE_REGISTRY: dict[IndicatorKind, DetectionRule] = {
    kind: rule for rule in RULES for kind in rule.kinds
}
