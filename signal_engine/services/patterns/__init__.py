"""
Pattern Detection

CONTRACT:
    Input:  Candles + {indicator: IndicatorSeries}
    Output: list[Pattern]

Indicator rules (MA cross, RSI, MACD, Bollinger Bands, Stochastic) are
dispatched through an explicit registry; candlestick shapes are scanned on
every 3-candle window.
"""

from signal_engine.services.patterns.detector import (
    PatternDetector,
    detect_patterns,
    get_pattern_detector,
)
from signal_engine.services.patterns.rules import RULE_REGISTRY, RULES, DetectionRule

__all__ = [
    "PatternDetector",
    "detect_patterns",
    "get_pattern_detector",
    "DetectionRule",
    "RULES",
    "RULE_REGISTRY",
]
