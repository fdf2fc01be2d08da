"""
Signal Engine Schema Contracts

This module defines the data contracts between engine components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from signal_engine.schemas.market import (
    Candle,
    CandleSeries,
    Timeframe,
    candle_duration,
)
from signal_engine.schemas.indicators import (
    IndicatorKind,
    IndicatorRequest,
    IndicatorSeries,
    IndicatorValue,
    DEFAULT_PARAMETERS,
    merge_parameters,
)
from signal_engine.schemas.patterns import (
    Pattern,
    PatternType,
    Strength,
)
from signal_engine.schemas.signals import (
    Signal,
    SignalDirection,
    PatternEvidence,
)
from signal_engine.schemas.analysis import (
    AnalysisRequest,
    AnalysisResult,
    AnalysisStatus,
    BatchSummary,
)

__all__ = [
    # Market
    "Candle",
    "CandleSeries",
    "Timeframe",
    "candle_duration",
    # Indicators
    "IndicatorKind",
    "IndicatorRequest",
    "IndicatorSeries",
    "IndicatorValue",
    "DEFAULT_PARAMETERS",
    "merge_parameters",
    # Patterns
    "Pattern",
    "PatternType",
    "Strength",
    # Signals
    "Signal",
    "SignalDirection",
    "PatternEvidence",
    # Analysis
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisStatus",
    "BatchSummary",
]
