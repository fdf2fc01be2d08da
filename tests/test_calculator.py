"""
IndicatorCalculator tests: slot alignment, minimum history, parameters.
"""

import pytest

from signal_engine.schemas.indicators import (
    ADXValue,
    BollingerValue,
    IndicatorKind,
    IndicatorRequest,
    MACDValue,
    OBVValue,
    RSIValue,
    SMAValue,
    StochasticValue,
)
from signal_engine.services.base import InvalidParameterError, ServiceError
from signal_engine.services.indicators import IndicatorCalculator, calculate


@pytest.fixture
def calculator():
    return IndicatorCalculator()


# ──────────────────────────────────────────────
# Alignment & values
# ──────────────────────────────────────────────


class TestSeriesShape:
    def test_sma_aligned_with_candles(self, calculator, wave_candles):
        series = calculator.calculate(IndicatorKind.SMA, wave_candles)
        assert len(series) == len(wave_candles)
        assert series.timestamps == [c.timestamp for c in wave_candles]
        assert all(v is None for v in series.values[:19])
        assert isinstance(series[19], SMAValue)

    def test_sma_is_mean_of_closes(self, calculator, wave_candles):
        series = calculator.calculate("SMA", wave_candles, {"length": 5})
        closes = [c.close for c in wave_candles]
        for i in range(4, len(wave_candles)):
            assert series[i].value == pytest.approx(sum(closes[i - 4 : i + 1]) / 5)

    def test_rsi_slots_carry_thresholds(self, calculator, wave_candles):
        series = calculator.calculate("RSI", wave_candles, {"oversold": 25})
        last = series.last()
        assert isinstance(last, RSIValue)
        assert last.oversold == 25
        assert last.overbought == 70
        assert all(0 <= v.value <= 100 for _, v in series.defined())

    def test_macd_signal_warms_up_after_line(self, calculator, wave_candles):
        series = calculator.calculate("MACD", wave_candles)
        assert series[24] is None
        assert isinstance(series[25], MACDValue)
        assert series[25].signal is None
        assert series[32].histogram is None
        assert series[33].signal is not None
        assert series[33].histogram == pytest.approx(series[33].macd - series[33].signal)

    def test_bollinger_band_ordering(self, calculator, wave_candles):
        series = calculator.calculate("bb", wave_candles)
        assert series.kind == IndicatorKind.BOLLINGER
        for _, value in series.defined():
            assert isinstance(value, BollingerValue)
            assert value.upper >= value.middle >= value.lower

    def test_stochastic_d_optional_during_warmup(self, calculator, wave_candles):
        series = calculator.calculate("stoch", wave_candles)
        assert series[14] is None
        assert isinstance(series[15], StochasticValue)
        assert series[15].d is None
        assert series[17].d is not None

    def test_adx_first_value(self, calculator, wave_candles):
        series = calculator.calculate("ADX", wave_candles)
        assert series[26] is None
        assert isinstance(series[27], ADXValue)

    def test_obv_defined_from_first_candle(self, calculator, wave_candles):
        series = calculator.calculate("OBV", wave_candles)
        assert isinstance(series[0], OBVValue)
        assert series[0].value == wave_candles[0].volume

    def test_obv_follows_close_direction(self, calculator, make_candles):
        candles = make_candles([10.0, 11.0, 11.0, 9.0], volume=100.0)
        values = [v.value for v in calculator.calculate("OBV", candles).values]
        # volumes are 100, 101, 102, 103
        assert values == [100.0, 201.0, 201.0, 98.0]

    def test_atr_first_value_at_length_minus_one(self, calculator, wave_candles):
        series = calculator.calculate("ATR", wave_candles)
        assert series[12] is None
        assert series[13] is not None

    def test_source_parameter(self, calculator, wave_candles):
        series = calculator.calculate("EMA", wave_candles, {"length": 3, "source": "high"})
        highs = [c.high for c in wave_candles]
        assert series[2].value == pytest.approx(sum(highs[:3]) / 3)

    def test_request_shortcut(self, calculator, wave_candles):
        request = IndicatorRequest(name="ema", parameters={"length": 9})
        series = calculator.calculate_request(request, wave_candles)
        assert series.kind == IndicatorKind.EMA
        assert series.parameters["length"] == 9
        assert series.parameters["source"] == "close"

    def test_module_level_calculate(self, wave_candles):
        assert not calculate("CCI", wave_candles).is_empty


# ──────────────────────────────────────────────
# Minimum history
# ──────────────────────────────────────────────


class TestMinimumHistory:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (IndicatorKind.SMA, 20),
            (IndicatorKind.EMA, 20),
            (IndicatorKind.MACD, 35),
            (IndicatorKind.RSI, 15),
            (IndicatorKind.BOLLINGER, 20),
            (IndicatorKind.STOCHASTIC, 18),
            (IndicatorKind.ADX, 28),
            (IndicatorKind.CCI, 20),
            (IndicatorKind.OBV, 2),
            (IndicatorKind.ATR, 15),
        ],
    )
    def test_default_minimums(self, calculator, wave_candles, kind, expected):
        assert calculator.minimum_required(kind) == expected
        assert calculator.calculate(kind, wave_candles[: expected - 1]).is_empty
        assert not calculator.calculate(kind, wave_candles[:expected]).is_empty

    def test_minimum_uses_parameters(self, calculator):
        assert calculator.minimum_required(IndicatorKind.RSI, {"length": 5}) == 6

    def test_empty_series_keeps_identity(self, calculator, wave_candles):
        series = calculator.calculate("RSI", wave_candles[:5])
        assert series.is_empty
        assert series.kind == IndicatorKind.RSI
        assert series.parameters["length"] == 14


# ──────────────────────────────────────────────
# Unsupported & invalid input
# ──────────────────────────────────────────────


class TestInvalidInput:
    def test_unknown_indicator_is_empty(self, calculator, wave_candles):
        series = calculator.calculate("VWAP", wave_candles)
        assert series.is_empty
        assert series.kind is None
        assert series.name == "VWAP"

    def test_unknown_indicator_logged(self, calculator, wave_candles, caplog):
        with caplog.at_level("WARNING"):
            calculator.calculate("VWAP", wave_candles)
        assert "Unsupported indicator" in caplog.text

    @pytest.mark.parametrize("length", [0, -5, 2.5])
    def test_bad_length_raises(self, calculator, wave_candles, length):
        with pytest.raises(InvalidParameterError) as exc:
            calculator.calculate("SMA", wave_candles, {"length": length})
        assert exc.value.parameter == "length"
        assert isinstance(exc.value, ServiceError)

    def test_negative_std_dev_raises(self, calculator, wave_candles):
        with pytest.raises(InvalidParameterError):
            calculator.calculate("Bollinger Bands", wave_candles, {"std_dev": -1})

    def test_zero_cci_constant_raises(self, calculator, wave_candles):
        with pytest.raises(InvalidParameterError):
            calculator.calculate("CCI", wave_candles, {"constant": 0})

    def test_unknown_source_raises(self, calculator, wave_candles):
        with pytest.raises(InvalidParameterError):
            calculator.calculate("SMA", wave_candles, {"source": "typical"})

    def test_invalid_parameters_raise_even_with_short_history(self, calculator, wave_candles):
        with pytest.raises(InvalidParameterError):
            calculator.calculate("MACD", wave_candles[:3], {"signal_length": 0})
