"""
Store Interfaces

Persistence contracts for computed indicator series and generated signals.
Implementations are injected into IndicatorService / AnalysisService.
"""

import hashlib
import json
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from signal_engine.schemas.indicators import IndicatorKind, IndicatorSeries
from signal_engine.schemas.market import Timeframe
from signal_engine.schemas.signals import Signal


class IndicatorKey(BaseModel):
    """
    Identity of a stored indicator series.

    Two keys with the same merged parameters map to the same storage slot,
    whatever the parameter order.

    `start` is the first candle the series was computed from. Smoothed
    indicators (EMA, RSI, ATR, ADX) depend on where the calculation starts,
    so each start gets its own slot and an upsert always rewrites a
    timestamp with the value it already holds.
    """

    model_config = ConfigDict(frozen=True)

    indicator: str
    pair: str
    timeframe: Timeframe
    parameters: dict[str, Any] = Field(default_factory=dict)
    start: Optional[datetime] = None

    @property
    def digest(self) -> str:
        payload = json.dumps(self.parameters, sort_keys=True, default=str)
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:16]

    @property
    def storage_key(self) -> str:
        kind = IndicatorKind.parse(self.indicator)
        name = kind.name if kind else self.indicator.upper()
        start = self.start.isoformat() if self.start else "-"
        return (
            f"indicator:{self.pair.upper()}:{self.timeframe.value}:{name}:"
            f"{self.digest}:{start}"
        )


class IndicatorStore(ABC):
    """Indicator series persistence, upserted per timestamp."""

    @abstractmethod
    async def get(self, key: IndicatorKey) -> Optional[IndicatorSeries]:
        """Stored series in ascending timestamp order, None if nothing stored."""
        pass

    @abstractmethod
    async def put(self, key: IndicatorKey, series: IndicatorSeries) -> None:
        """Upsert every slot of the series. Writing twice is a no-op."""
        pass


class SignalStore(ABC):
    """Generated signal history."""

    @abstractmethod
    async def save(self, signals: list[Signal]) -> int:
        """Append signals; returns the number saved."""
        pass

    @abstractmethod
    async def latest(
        self, pair: Optional[str], timeframe: Timeframe, limit: int = 10
    ) -> list[Signal]:
        """Most recent signals first."""
        pass
