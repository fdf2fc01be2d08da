"""
Indicator Calculator

Turns a candle list into an IndicatorSeries for one indicator kind.
Synchronous and pure: no I/O, no caching (see IndicatorService for that).
"""

import logging
import math
from typing import Any, Callable, Optional, Sequence

from signal_engine.schemas.indicators import (
    ADXValue,
    ATRValue,
    BollingerValue,
    CCIValue,
    EMAValue,
    IndicatorKind,
    IndicatorRequest,
    IndicatorSeries,
    MACDValue,
    OBVValue,
    PriceSource,
    RSIValue,
    SMAValue,
    StochasticValue,
    merge_parameters,
)
from signal_engine.schemas.market import Candle
from signal_engine.services.base import InvalidParameterError
from signal_engine.services.indicators.calculations import (
    OHLCVData,
    adx,
    atr,
    bollinger_bands,
    cci,
    ema,
    macd,
    obv,
    rsi,
    sma,
    stochastic,
)

logger = logging.getLogger(__name__)

# Parameters that must be positive integers, per kind
_LENGTH_PARAMETERS: dict[IndicatorKind, tuple[str, ...]] = {
    IndicatorKind.SMA: ("length",),
    IndicatorKind.EMA: ("length",),
    IndicatorKind.MACD: ("fast_length", "slow_length", "signal_length"),
    IndicatorKind.RSI: ("length",),
    IndicatorKind.BOLLINGER: ("length",),
    IndicatorKind.STOCHASTIC: ("k_length", "d_length", "smooth"),
    IndicatorKind.ADX: ("length",),
    IndicatorKind.CCI: ("length",),
    IndicatorKind.OBV: (),
    IndicatorKind.ATR: ("length",),
}


def _defined(value: float) -> bool:
    return not math.isnan(value)


class IndicatorCalculator:
    """
    Calculates one indicator series per call.

    The output is aligned 1:1 with the input candles; warm-up slots are None.
    Insufficient history and unsupported kinds both yield an empty series.
    """

    def __init__(self):
        self._registry: dict[
            IndicatorKind, Callable[[OHLCVData, dict[str, Any]], list]
        ] = {
            IndicatorKind.SMA: self._sma,
            IndicatorKind.EMA: self._ema,
            IndicatorKind.MACD: self._macd,
            IndicatorKind.RSI: self._rsi,
            IndicatorKind.BOLLINGER: self._bollinger,
            IndicatorKind.STOCHASTIC: self._stochastic,
            IndicatorKind.ADX: self._adx,
            IndicatorKind.CCI: self._cci,
            IndicatorKind.OBV: self._obv,
            IndicatorKind.ATR: self._atr,
        }

    @property
    def supported(self) -> list[IndicatorKind]:
        return list(self._registry)

    def calculate(
        self,
        indicator: "str | IndicatorKind",
        candles: Sequence[Candle],
        parameters: Optional[dict[str, Any]] = None,
    ) -> IndicatorSeries:
        """
        Calculate an indicator over candles.

        Args:
            indicator: IndicatorKind or any name accepted by IndicatorKind.parse
            candles: Candles in ascending timestamp order
            parameters: Overrides merged over the kind's defaults

        Returns:
            IndicatorSeries aligned with candles, or an empty series

        Raises:
            InvalidParameterError: Non-positive length or negative multiplier
        """
        kind = IndicatorKind.parse(indicator)
        name = kind.value if kind else str(indicator)

        if kind is None or kind not in self._registry:
            logger.warning(f"Unsupported indicator: {indicator}")
            return IndicatorSeries.empty(name, parameters=parameters)

        params = merge_parameters(kind, parameters)
        self.validate_parameters(kind, params)

        required = self.minimum_required(kind, params)
        if len(candles) < required:
            logger.debug(
                f"{name}: {len(candles)} candles, need {required}; returning empty series"
            )
            return IndicatorSeries.empty(name, kind, params)

        data = OHLCVData.from_candles(candles)
        values = self._registry[kind](data, params)

        return IndicatorSeries(
            kind=kind,
            name=name,
            parameters=params,
            timestamps=data.timestamps,
            values=values,
        )

    def calculate_request(
        self, request: IndicatorRequest, candles: Sequence[Candle]
    ) -> IndicatorSeries:
        return self.calculate(request.name, candles, request.parameters)

    def minimum_required(
        self, kind: IndicatorKind, parameters: Optional[dict[str, Any]] = None
    ) -> int:
        """Minimum candle count for a non-empty series."""
        params = merge_parameters(kind, parameters)

        if kind in (
            IndicatorKind.SMA,
            IndicatorKind.EMA,
            IndicatorKind.BOLLINGER,
            IndicatorKind.CCI,
        ):
            return int(params["length"])
        if kind == IndicatorKind.MACD:
            return int(params["slow_length"]) + int(params["signal_length"])
        if kind in (IndicatorKind.RSI, IndicatorKind.ATR):
            return int(params["length"]) + 1
        if kind == IndicatorKind.STOCHASTIC:
            return (
                int(params["k_length"])
                + (int(params["smooth"]) - 1)
                + (int(params["d_length"]) - 1)
            )
        if kind == IndicatorKind.ADX:
            return 2 * int(params["length"])
        if kind == IndicatorKind.OBV:
            return 2
        return 0

    def validate_parameters(self, kind: IndicatorKind, params: dict[str, Any]) -> None:
        """Reject lengths below 1, negative multipliers and unknown sources."""
        for key in _LENGTH_PARAMETERS.get(kind, ()):
            value = params.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameterError(kind.value, key, value, "must be an integer")
            if value != int(value) or value < 1:
                raise InvalidParameterError(kind.value, key, value, "must be >= 1")
            params[key] = int(value)

        if kind == IndicatorKind.BOLLINGER and params["std_dev"] < 0:
            raise InvalidParameterError(
                kind.value, "std_dev", params["std_dev"], "must be >= 0"
            )
        if kind == IndicatorKind.CCI and params["constant"] <= 0:
            raise InvalidParameterError(
                kind.value, "constant", params["constant"], "must be > 0"
            )

        if "source" in params:
            try:
                PriceSource(params["source"])
            except ValueError:
                raise InvalidParameterError(
                    kind.value, "source", params["source"], "unknown price source"
                ) from None

    # ==================== Per-kind adapters ====================

    def _sma(self, data: OHLCVData, p: dict[str, Any]) -> list:
        values = sma(data.source(p["source"]), p["length"]).tolist()
        return [SMAValue(value=v) if _defined(v) else None for v in values]

    def _ema(self, data: OHLCVData, p: dict[str, Any]) -> list:
        values = ema(data.source(p["source"]), p["length"]).tolist()
        return [EMAValue(value=v) if _defined(v) else None for v in values]

    def _macd(self, data: OHLCVData, p: dict[str, Any]) -> list:
        line, signal, hist = macd(
            data.source(p["source"]),
            p["fast_length"],
            p["slow_length"],
            p["signal_length"],
        )
        result = []
        for m, s, h in zip(line.tolist(), signal.tolist(), hist.tolist()):
            if not _defined(m):
                result.append(None)
            elif _defined(s):
                result.append(MACDValue(macd=m, signal=s, histogram=h))
            else:
                result.append(MACDValue(macd=m))
        return result

    def _rsi(self, data: OHLCVData, p: dict[str, Any]) -> list:
        values = rsi(data.source(p["source"]), p["length"]).tolist()
        return [
            RSIValue(value=v, overbought=p["overbought"], oversold=p["oversold"])
            if _defined(v)
            else None
            for v in values
        ]

    def _bollinger(self, data: OHLCVData, p: dict[str, Any]) -> list:
        upper, middle, lower = bollinger_bands(
            data.source(p["source"]), p["length"], float(p["std_dev"])
        )
        return [
            BollingerValue(upper=u, middle=m, lower=lo) if _defined(m) else None
            for u, m, lo in zip(upper.tolist(), middle.tolist(), lower.tolist())
        ]

    def _stochastic(self, data: OHLCVData, p: dict[str, Any]) -> list:
        k, d = stochastic(
            data.highs, data.lows, data.closes, p["k_length"], p["d_length"], p["smooth"]
        )
        result = []
        for k_val, d_val in zip(k.tolist(), d.tolist()):
            if not _defined(k_val):
                result.append(None)
                continue
            result.append(
                StochasticValue(
                    k=k_val,
                    d=d_val if _defined(d_val) else None,
                    overbought=p["overbought"],
                    oversold=p["oversold"],
                )
            )
        return result

    def _adx(self, data: OHLCVData, p: dict[str, Any]) -> list:
        adx_arr, plus_di, minus_di = adx(data.highs, data.lows, data.closes, p["length"])
        return [
            ADXValue(adx=a, plus_di=pd, minus_di=md) if _defined(a) else None
            for a, pd, md in zip(adx_arr.tolist(), plus_di.tolist(), minus_di.tolist())
        ]

    def _cci(self, data: OHLCVData, p: dict[str, Any]) -> list:
        values = cci(
            data.highs, data.lows, data.closes, p["length"], float(p["constant"])
        ).tolist()
        return [CCIValue(value=v) if _defined(v) else None for v in values]

    def _obv(self, data: OHLCVData, p: dict[str, Any]) -> list:
        values = obv(data.closes, data.volumes).tolist()
        return [OBVValue(value=v) for v in values]

    def _atr(self, data: OHLCVData, p: dict[str, Any]) -> list:
        values = atr(data.highs, data.lows, data.closes, p["length"]).tolist()
        return [ATRValue(value=v) if _defined(v) else None for v in values]


# Singleton instance
_calculator: Optional[IndicatorCalculator] = None


def get_indicator_calculator() -> IndicatorCalculator:
    """Get or create calculator singleton."""
    global _calculator
    if _calculator is None:
        _calculator = IndicatorCalculator()
    return _calculator


def calculate(
    indicator: "str | IndicatorKind",
    candles: Sequence[Candle],
    parameters: Optional[dict[str, Any]] = None,
) -> IndicatorSeries:
    """Module-level shortcut for IndicatorCalculator.calculate."""
    return get_indicator_calculator().calculate(indicator, candles, parameters)
