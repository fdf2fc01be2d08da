"""
CONTRACT 4: Signal Generator

Input: Candles + list[Pattern]
Output: list[Signal]

A signal is emitted only from >= 2 same-direction patterns inside the
recency window. Signals are immutable; later runs create new ones.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from signal_engine.schemas.market import Timeframe
from signal_engine.schemas.patterns import PatternType, Strength


class SignalDirection(str, Enum):
    BUY = "buy"
    SELL = "sell"

    @property
    def pattern_type(self) -> PatternType:
        return PatternType.BULLISH if self is SignalDirection.BUY else PatternType.BEARISH


class SignalType(str, Enum):
    TECHNICAL = "technical"


class PatternEvidence(BaseModel):
    """Contributing pattern as recorded on a signal."""

    model_config = ConfigDict(frozen=True)

    pattern_name: str
    pattern_type: PatternType
    pattern_strength: Strength
    timestamp: datetime
    indicators: dict[str, Any] = Field(default_factory=dict)


class Signal(BaseModel):
    """Directional trading signal with entry, stop and target."""

    model_config = ConfigDict(frozen=True)

    pair: Optional[str] = None
    timeframe: Timeframe
    timestamp: datetime = Field(..., description="Timestamp of the latest candle")
    direction: SignalDirection
    signal_type: SignalType = SignalType.TECHNICAL
    strength: Strength
    entry_price: float = Field(..., ge=0)
    stop_loss: float = Field(..., ge=0)
    take_profit: float = Field(..., ge=0)
    risk_reward_ratio: float = Field(..., ge=0)
    success_probability: float = Field(..., ge=0, le=1)
    supporting_patterns: list[str] = Field(default_factory=list)
    indicators_data: list[PatternEvidence] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def metadata(self) -> dict[str, Any]:
        return {
            "patterns": list(self.supporting_patterns),
            "generation_time": self.generated_at.isoformat(),
        }
