"""
Analysis Service Interface

Orchestrates one analysis run per (pair, timeframe).
"""

from abc import abstractmethod

from signal_engine.services.base import BaseService
from signal_engine.schemas.analysis import AnalysisRequest, AnalysisResult, BatchSummary


class AnalysisServiceInterface(BaseService[AnalysisRequest, AnalysisResult]):
    """
    Analysis Service Contract.

    This is the MAIN ORCHESTRATOR for the engine.

    INPUT: AnalysisRequest
        - pair, timeframe: unit to analyse
        - limit: candles to load
        - indicators: requested indicators (default from settings)
        - generate_signals: whether to build and store signals

    OUTPUT: AnalysisResult
        - status/message: "error" if the unit could not be analysed
        - indicators, patterns, signals

    PIPELINE:
        Candles → Indicators (read-through) → Patterns → Signals → Signal store
    """

    @property
    def name(self) -> str:
        return "AnalysisService"

    @abstractmethod
    async def execute(self, input_data: AnalysisRequest) -> AnalysisResult:
        """Analyse one unit."""
        pass

    @abstractmethod
    async def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """Run the pipeline for one pair/timeframe."""
        pass

    @abstractmethod
    async def analyze_batch(self, requests: list[AnalysisRequest]) -> BatchSummary:
        """
        Run independent units concurrently.

        A unit that raises is reported with status "error"; the batch
        always completes.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass
