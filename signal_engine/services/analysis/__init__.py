"""
Analysis Orchestration

Loads candles, computes indicators, detects patterns and generates signals
for one or many (pair, timeframe) units.
"""

from signal_engine.services.analysis.interface import AnalysisServiceInterface
from signal_engine.services.analysis.service import (
    AnalysisService,
    get_analysis_service,
)

__all__ = [
    "AnalysisServiceInterface",
    "AnalysisService",
    "get_analysis_service",
]
