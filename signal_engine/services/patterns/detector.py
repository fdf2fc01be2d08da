"""
Pattern Detector

Runs the indicator rules and the candlestick scan over one candle series.
Deterministic: the same candles and series always give the same patterns
in the same order.
"""

import logging
from typing import Mapping, Optional, Sequence

from signal_engine.schemas.indicators import IndicatorKind, IndicatorSeries
from signal_engine.schemas.market import Candle
from signal_engine.schemas.patterns import Pattern
from signal_engine.services.patterns.candlesticks import detect_candlestick_patterns
from signal_engine.services.patterns.rules import RULES, DetectionRule

logger = logging.getLogger(__name__)


class PatternDetector:
    """Detects indicator and candlestick patterns."""

    def __init__(self, rules: Sequence[DetectionRule] = RULES):
        self.rules = tuple(rules)

    def detect(
        self,
        candles: Sequence[Candle],
        indicators: Optional[Mapping["str | IndicatorKind", IndicatorSeries]] = None,
    ) -> list[Pattern]:
        """
        Detect patterns.

        Args:
            candles: Candles in ascending timestamp order
            indicators: Series keyed by IndicatorKind or indicator name

        Returns:
            Indicator-rule patterns in rule order, then candlestick patterns
        """
        usable = self._usable_series(candles, indicators or {})
        patterns: list[Pattern] = []

        for rule in self.rules:
            series = next((usable[k] for k in rule.kinds if k in usable), None)
            if series is None:
                continue
            found = rule.detect(candles, series)
            logger.debug(f"Rule {rule.name} ({series.name}): {len(found)} patterns")
            patterns.extend(found)

        patterns.extend(detect_candlestick_patterns(candles))
        return patterns

    def _usable_series(
        self,
        candles: Sequence[Candle],
        indicators: Mapping["str | IndicatorKind", IndicatorSeries],
    ) -> dict[IndicatorKind, IndicatorSeries]:
        usable: dict[IndicatorKind, IndicatorSeries] = {}

        for key, series in indicators.items():
            # the series' own tag wins over the mapping key
            kind = series.kind or IndicatorKind.parse(key)
            if kind is None:
                logger.debug(f"Ignoring unsupported indicator {key}")
                continue
            if series.is_empty:
                continue
            if len(series) != len(candles):
                logger.warning(
                    f"{kind.value}: {len(series)} values for {len(candles)} candles, skipping"
                )
                continue
            usable[kind] = series

        return usable


# Singleton instance
_detector: Optional[PatternDetector] = None


def get_pattern_detector() -> PatternDetector:
    """Get or create detector singleton."""
    global _detector
    if _detector is None:
        _detector = PatternDetector()
    return _detector


def detect_patterns(
    candles: Sequence[Candle],
    indicators: Optional[Mapping["str | IndicatorKind", IndicatorSeries]] = None,
) -> list[Pattern]:
    """Module-level shortcut for PatternDetector.detect."""
    return get_pattern_detector().detect(candles, indicators)
