"""
CONTRACT 2: Indicator Calculator

Input: Candles + IndicatorRequest
Output: IndicatorSeries

Each series slot is a tagged value (one case per indicator kind) or None
during the warm-up period.
Pure Python/NumPy - no I/O.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from signal_engine.schemas.market import Candle, Timeframe


# =============================================================================
# ENUMS
# =============================================================================


class IndicatorKind(str, Enum):
    SMA = "SMA"
    EMA = "EMA"
    MACD = "MACD"
    RSI = "RSI"
    BOLLINGER = "Bollinger Bands"
    STOCHASTIC = "Stochastic"
    ADX = "ADX"
    CCI = "CCI"
    OBV = "OBV"
    ATR = "ATR"

    @classmethod
    def parse(cls, value: "str | IndicatorKind") -> Optional["IndicatorKind"]:
        """Resolve a display name, enum name or alias. None if unsupported."""
        if isinstance(value, IndicatorKind):
            return value
        key = str(value).strip().upper().replace("_", " ")
        return _KIND_LOOKUP.get(key)


_KIND_LOOKUP: dict[str, IndicatorKind] = {}
for _kind in IndicatorKind:
    _KIND_LOOKUP[_kind.value.upper()] = _kind
    _KIND_LOOKUP[_kind.name] = _kind
_KIND_LOOKUP.update(
    {
        "BB": IndicatorKind.BOLLINGER,
        "BOLLINGER BANDS": IndicatorKind.BOLLINGER,
        "BBANDS": IndicatorKind.BOLLINGER,
        "STOCH": IndicatorKind.STOCHASTIC,
    }
)


class PriceSource(str, Enum):
    OPEN = "open"
    HIGH = "high"
    LOW = "low"
    CLOSE = "close"
    VOLUME = "volume"


# Defaults merged under request parameters
DEFAULT_PARAMETERS: dict[IndicatorKind, dict[str, Any]] = {
    IndicatorKind.SMA: {"length": 20, "source": "close"},
    IndicatorKind.EMA: {"length": 20, "source": "close"},
    IndicatorKind.MACD: {
        "fast_length": 12,
        "slow_length": 26,
        "signal_length": 9,
        "source": "close",
    },
    IndicatorKind.RSI: {
        "length": 14,
        "source": "close",
        "overbought": 70,
        "oversold": 30,
    },
    IndicatorKind.BOLLINGER: {"length": 20, "std_dev": 2, "source": "close"},
    IndicatorKind.STOCHASTIC: {
        "k_length": 14,
        "d_length": 3,
        "smooth": 3,
        "overbought": 80,
        "oversold": 20,
    },
    IndicatorKind.ADX: {"length": 14},
    IndicatorKind.CCI: {"length": 20, "constant": 0.015},
    IndicatorKind.OBV: {},
    IndicatorKind.ATR: {"length": 14},
}


def merge_parameters(
    kind: IndicatorKind, parameters: Optional[dict[str, Any]] = None
) -> dict[str, Any]:
    """Overlay request parameters on the kind's defaults."""
    merged = dict(DEFAULT_PARAMETERS.get(kind, {}))
    merged.update(parameters or {})
    return merged


# =============================================================================
# VALUES (tagged by kind)
# =============================================================================


class _Value(BaseModel):
    model_config = ConfigDict(frozen=True)


class SMAValue(_Value):
    kind: Literal[IndicatorKind.SMA] = IndicatorKind.SMA
    value: float


class EMAValue(_Value):
    kind: Literal[IndicatorKind.EMA] = IndicatorKind.EMA
    value: float


class CCIValue(_Value):
    kind: Literal[IndicatorKind.CCI] = IndicatorKind.CCI
    value: float


class OBVValue(_Value):
    kind: Literal[IndicatorKind.OBV] = IndicatorKind.OBV
    value: float


class ATRValue(_Value):
    kind: Literal[IndicatorKind.ATR] = IndicatorKind.ATR
    value: float


class RSIValue(_Value):
    kind: Literal[IndicatorKind.RSI] = IndicatorKind.RSI
    value: float = Field(..., ge=0, le=100)
    overbought: float = 70
    oversold: float = 30


class MACDValue(_Value):
    """MACD line is defined before the signal line has warmed up."""

    kind: Literal[IndicatorKind.MACD] = IndicatorKind.MACD
    macd: float
    signal: Optional[float] = None
    histogram: Optional[float] = None


class BollingerValue(_Value):
    kind: Literal[IndicatorKind.BOLLINGER] = IndicatorKind.BOLLINGER
    upper: float
    middle: float
    lower: float


class StochasticValue(_Value):
    kind: Literal[IndicatorKind.STOCHASTIC] = IndicatorKind.STOCHASTIC
    k: float
    d: Optional[float] = None
    overbought: float = 80
    oversold: float = 20


class ADXValue(_Value):
    kind: Literal[IndicatorKind.ADX] = IndicatorKind.ADX
    adx: float
    plus_di: float
    minus_di: float


IndicatorValue = Annotated[
    Union[
        SMAValue,
        EMAValue,
        CCIValue,
        OBVValue,
        ATRValue,
        RSIValue,
        MACDValue,
        BollingerValue,
        StochasticValue,
        ADXValue,
    ],
    Field(discriminator="kind"),
]


# =============================================================================
# INPUT: IndicatorRequest
# =============================================================================


class IndicatorRequest(BaseModel):
    """
    Request for a single indicator.
    Sent by: AnalysisService / caller
    Received by: IndicatorCalculator / IndicatorService

    `name` may be any alias accepted by IndicatorKind.parse; unsupported names
    produce an empty series rather than an error.
    """

    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> Optional[IndicatorKind]:
        return IndicatorKind.parse(self.name)


# =============================================================================
# OUTPUT: IndicatorSeries
# =============================================================================


class IndicatorSeries(BaseModel):
    """
    Per-candle indicator values, aligned 1:1 with the input candles.

    An empty `values` list means the indicator could not be computed
    (insufficient history or unsupported kind).
    """

    model_config = ConfigDict(frozen=True)

    kind: Optional[IndicatorKind] = None
    name: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    timestamps: list[datetime] = Field(default_factory=list)
    values: list[Optional[IndicatorValue]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.values

    def __getitem__(self, index: int) -> Optional[IndicatorValue]:
        return self.values[index]

    def __len__(self) -> int:
        return len(self.values)

    def defined(self) -> list[tuple[datetime, IndicatorValue]]:
        """(timestamp, value) pairs past the warm-up period."""
        return [
            (ts, value)
            for ts, value in zip(self.timestamps, self.values)
            if value is not None
        ]

    def last(self) -> Optional[IndicatorValue]:
        """Most recent defined value."""
        for value in reversed(self.values):
            if value is not None:
                return value
        return None

    @classmethod
    def empty(
        cls,
        name: str,
        kind: Optional[IndicatorKind] = None,
        parameters: Optional[dict[str, Any]] = None,
    ) -> "IndicatorSeries":
        return cls(kind=kind, name=name, parameters=parameters or {})


class IndicatorBatchRequest(BaseModel):
    """Several indicators over one candle series."""

    pair: str
    timeframe: Timeframe = Timeframe.D1
    candles: list[Candle] = Field(default_factory=list)
    indicators: list[IndicatorRequest] = Field(default_factory=list)
