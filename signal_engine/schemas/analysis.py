"""
CONTRACT 5: Analysis Run

Input: AnalysisRequest (one pair/timeframe unit)
Output: AnalysisResult

A batch is a list of units; a failing unit is reported with status "error"
and never aborts the rest of the batch.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from signal_engine.core.config import settings
from signal_engine.schemas.indicators import IndicatorRequest, IndicatorSeries
from signal_engine.schemas.market import Timeframe
from signal_engine.schemas.patterns import Pattern
from signal_engine.schemas.signals import Signal


class AnalysisStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class AnalysisRequest(BaseModel):
    """Analyse one trading pair on one timeframe."""

    pair: str
    timeframe: Timeframe = Field(
        default_factory=lambda: Timeframe(settings.default_timeframe)
    )
    limit: int = Field(
        default_factory=lambda: settings.default_candle_limit,
        ge=1,
        le=5000,
        description="Candles to load",
    )
    indicators: Optional[list[IndicatorRequest]] = Field(
        default=None,
        description="Indicators to compute (default: settings.default_indicators)",
    )
    generate_signals: bool = True


class AnalysisResult(BaseModel):
    """Outcome of one analysis unit."""

    pair: str
    timeframe: Timeframe
    status: AnalysisStatus
    message: str
    candle_count: int = 0
    indicators: dict[str, IndicatorSeries] = Field(default_factory=dict)
    patterns: list[Pattern] = Field(default_factory=list)
    signals: list[Signal] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == AnalysisStatus.SUCCESS


class BatchSummary(BaseModel):
    """Totals across a batch run."""

    success_count: int = 0
    error_count: int = 0
    pattern_count: int = 0
    signal_count: int = 0
    results: list[AnalysisResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[AnalysisResult]) -> "BatchSummary":
        ok = [r for r in results if r.ok]
        return cls(
            success_count=len(ok),
            error_count=len(results) - len(ok),
            pattern_count=sum(len(r.patterns) for r in ok),
            signal_count=sum(len(r.signals) for r in ok),
            results=results,
        )
