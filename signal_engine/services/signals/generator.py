"""
Signal Generator

Aggregates recent same-direction patterns into at most one buy and one sell
signal per run. Entry is the latest close; stop and target are fractions of
the latest candle's range. All heuristic constants come from Settings.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from signal_engine.core.config import Settings, settings
from signal_engine.schemas.market import Candle, Timeframe, candle_duration
from signal_engine.schemas.patterns import Pattern, Strength
from signal_engine.schemas.signals import PatternEvidence, Signal, SignalDirection

logger = logging.getLogger(__name__)


def risk_reward_ratio(entry: float, stop_loss: float, take_profit: float) -> float:
    """|target - entry| / |entry - stop|, 0 when there is no risk distance."""
    risk = abs(entry - stop_loss)
    if risk <= 0:
        return 0.0
    return abs(take_profit - entry) / risk


class SignalGenerator:
    """Builds trading signals from detected patterns."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    def success_probability(self, strength: Strength) -> float:
        return {
            Strength.STRONG: self.config.strong_probability,
            Strength.MEDIUM: self.config.medium_probability,
            Strength.WEAK: self.config.weak_probability,
        }[strength]

    def stop_loss(self, candle: Candle, direction: SignalDirection) -> float:
        offset = candle.range * self.config.stop_loss_multiplier / 10
        if direction == SignalDirection.BUY:
            return max(0.0, candle.close - offset)
        return candle.close + offset

    def take_profit(self, candle: Candle, direction: SignalDirection) -> float:
        offset = candle.range * self.config.take_profit_multiplier / 5
        if direction == SignalDirection.BUY:
            return candle.close + offset
        return max(0.0, candle.close - offset)

    def recent_patterns(
        self,
        candles: Sequence[Candle],
        patterns: Sequence[Pattern],
        timeframe: "str | Timeframe",
    ) -> list[Pattern]:
        """Patterns no older than the recency window before the latest candle."""
        latest = candles[-1].timestamp
        window = self.config.signal_recency_candles * candle_duration(timeframe)
        return [
            p for p in patterns if (latest - p.timestamp).total_seconds() <= window
        ]

    def generate(
        self,
        candles: Sequence[Candle],
        patterns: Sequence[Pattern],
        timeframe: "str | Timeframe",
        pair: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[Signal]:
        """
        Generate signals.

        Args:
            candles: Candles in ascending order (the last one prices the signal)
            patterns: Detected patterns
            timeframe: Candle timeframe, sets the recency window
            pair: Trading pair recorded on the signal
            now: Generation time (default: current UTC time)

        Returns:
            Zero, one or two signals (buy first)
        """
        if not candles or not patterns:
            return []

        recent = self.recent_patterns(candles, patterns, timeframe)
        try:
            timeframe = Timeframe.parse(timeframe)
        except ValueError:
            # same fallback as candle_duration
            logger.warning(f"Unknown timeframe {timeframe!r}, recording signals as 1d")
            timeframe = Timeframe.D1
        generated_at = now or datetime.now(timezone.utc)

        signals = []
        for direction in (SignalDirection.BUY, SignalDirection.SELL):
            members = [p for p in recent if p.type == direction.pattern_type]
            if len(members) < self.config.min_patterns_per_signal:
                continue
            signals.append(
                self._build(candles[-1], direction, members, timeframe, pair, generated_at)
            )

        logger.debug(
            f"{pair or '-'} {timeframe.value}: {len(recent)}/{len(patterns)} recent patterns, "
            f"{len(signals)} signals"
        )
        return signals

    def _build(
        self,
        candle: Candle,
        direction: SignalDirection,
        members: list[Pattern],
        timeframe: Timeframe,
        pair: Optional[str],
        generated_at: datetime,
    ) -> Signal:
        strength = (
            Strength.STRONG
            if any(p.strength == Strength.STRONG for p in members)
            else Strength.MEDIUM
        )
        entry = candle.close
        stop = self.stop_loss(candle, direction)
        target = self.take_profit(candle, direction)

        return Signal(
            pair=pair,
            timeframe=timeframe,
            timestamp=candle.timestamp,
            direction=direction,
            strength=strength,
            entry_price=entry,
            stop_loss=stop,
            take_profit=target,
            risk_reward_ratio=risk_reward_ratio(entry, stop, target),
            success_probability=self.success_probability(strength),
            supporting_patterns=[p.name for p in members],
            indicators_data=[
                PatternEvidence(
                    pattern_name=p.name,
                    pattern_type=p.type,
                    pattern_strength=p.strength,
                    timestamp=p.timestamp,
                    indicators=p.evidence,
                )
                for p in members
            ],
            generated_at=generated_at,
        )


# Singleton instance
_generator: Optional[SignalGenerator] = None


def get_signal_generator() -> SignalGenerator:
    """Get or create generator singleton."""
    global _generator
    if _generator is None:
        _generator = SignalGenerator()
    return _generator


def generate_signals(
    candles: Sequence[Candle],
    patterns: Sequence[Pattern],
    timeframe: "str | Timeframe",
    pair: Optional[str] = None,
) -> list[Signal]:
    """Module-level shortcut for SignalGenerator.generate."""
    return get_signal_generator().generate(candles, patterns, timeframe, pair)
