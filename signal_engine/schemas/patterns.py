"""
CONTRACT 3: Pattern Detector

Input: Candles + {IndicatorKind: IndicatorSeries}
Output: list[Pattern]

Patterns are derived facts: immutable once produced, keyed by
(timestamp, name).
"""

from datetime import datetime
from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class PatternType(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Strength(str, Enum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


class Pattern(BaseModel):
    """Single detected pattern with the values that triggered it."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: PatternType
    strength: Strength
    timestamp: datetime
    description: str
    evidence: dict[str, Any] = Field(default_factory=dict)

    @property
    def key(self) -> tuple[datetime, str]:
        return (self.timestamp, self.name)

    @property
    def is_bullish(self) -> bool:
        return self.type == PatternType.BULLISH

    @property
    def is_bearish(self) -> bool:
        return self.type == PatternType.BEARISH
