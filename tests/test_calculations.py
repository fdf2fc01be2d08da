"""
Indicator kernel tests (NumPy level).
"""

import math

import numpy as np
import pytest

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
    true_range,
    wilder_sum,
)


def _wave(n=60):
    return np.array([100 + 10 * math.sin(i / 5) + i * 0.2 for i in range(n)])


# ──────────────────────────────────────────────
# Moving averages
# ──────────────────────────────────────────────


class TestMovingAverages:
    def test_sma_is_window_mean(self):
        data = np.arange(1, 11, dtype=float)
        result = sma(data, 3)
        assert np.isnan(result[:2]).all()
        assert result[2] == pytest.approx(2.0)
        assert result[9] == pytest.approx(9.0)

    def test_sma_short_input_all_undefined(self):
        assert np.isnan(sma(np.array([1.0, 2.0]), 3)).all()

    def test_ema_seed_equals_sma(self):
        data = _wave(30)
        result = ema(data, 5)
        assert np.isnan(result[:4]).all()
        assert result[4] == pytest.approx(np.mean(data[:5]))
        expected = (data[5] - result[4]) * (2 / 6) + result[4]
        assert result[5] == pytest.approx(expected)

    def test_ema_skips_leading_undefined_values(self):
        data = np.array([np.nan, np.nan, 1.0, 2.0, 3.0, 4.0])
        result = ema(data, 2)
        assert np.isnan(result[:3]).all()
        assert result[3] == pytest.approx(1.5)


# ──────────────────────────────────────────────
# Momentum
# ──────────────────────────────────────────────


class TestMomentum:
    def test_rsi_all_gains_is_100(self):
        data = np.arange(1, 31, dtype=float)
        result = rsi(data, 14)
        assert np.isnan(result[:14]).all()
        assert result[14] == 100.0
        assert result[-1] == 100.0

    def test_rsi_stays_in_range(self):
        result = rsi(_wave(), 14)
        defined = result[~np.isnan(result)]
        assert len(defined) == 60 - 14
        assert (defined >= 0).all() and (defined <= 100).all()

    def test_macd_warmup(self):
        line, signal, hist = macd(_wave(), 12, 26, 9)
        assert np.isnan(line[:25]).all()
        assert not np.isnan(line[25])
        assert np.isnan(signal[:33]).all()
        assert not np.isnan(signal[33])
        assert hist[40] == pytest.approx(line[40] - signal[40])

    def test_stochastic_flat_market_is_50(self):
        flat = np.full(30, 10.0)
        k, d = stochastic(flat, flat, flat, 14, 3, 3)
        assert np.isnan(k[:15]).all()
        assert k[15] == 50
        assert np.isnan(d[:17]).all()
        assert d[17] == 50

    def test_stochastic_without_smoothing(self):
        data = _wave(30)
        k, d = stochastic(data + 1, data - 1, data, 14, 3, 1)
        assert not np.isnan(k[13])
        assert not np.isnan(d[15])
        assert np.isnan(d[14])

    def test_cci_zero_when_no_deviation(self):
        flat = np.full(25, 5.0)
        result = cci(flat, flat, flat, 20)
        assert np.isnan(result[:19]).all()
        assert (result[19:] == 0).all()


# ──────────────────────────────────────────────
# Volatility
# ──────────────────────────────────────────────


class TestVolatility:
    def test_true_range_first_candle_uses_high_low(self):
        highs = np.array([11.0, 15.0])
        lows = np.array([9.0, 12.0])
        closes = np.array([10.0, 14.0])
        tr = true_range(highs, lows, closes)
        assert tr[0] == 2.0
        assert tr[1] == 5.0  # high - previous close

    def test_atr_constant_range(self):
        closes = np.full(20, 10.0)
        result = atr(closes + 1, closes - 1, closes, 14)
        assert np.isnan(result[:13]).all()
        assert result[13] == pytest.approx(2.0)
        assert result[-1] == pytest.approx(2.0)

    def test_bollinger_population_std(self):
        data = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
        upper, middle, lower = bollinger_bands(data, 5, 2)
        assert middle[4] == pytest.approx(3.0)
        assert upper[4] == pytest.approx(3.0 + 2 * math.sqrt(2))
        assert lower[4] == pytest.approx(3.0 - 2 * math.sqrt(2))

    def test_bollinger_ordering(self):
        upper, middle, lower = bollinger_bands(_wave(), 20, 2)
        mask = ~np.isnan(middle)
        assert (upper[mask] >= middle[mask]).all()
        assert (middle[mask] >= lower[mask]).all()


# ──────────────────────────────────────────────
# Volume & trend
# ──────────────────────────────────────────────


class TestVolumeAndTrend:
    def test_obv_direction(self):
        closes = np.array([1.0, 2.0, 2.0, 1.0])
        volumes = np.array([10.0, 20.0, 30.0, 40.0])
        assert obv(closes, volumes).tolist() == [10.0, 30.0, 30.0, -10.0]

    def test_wilder_sum(self):
        result = wilder_sum(np.array([1.0, 1.0, 1.0, 4.0]), 3)
        assert result[0] == 3.0
        assert result[1] == pytest.approx(3.0 - 1.0 + 4.0)

    def test_adx_warmup_alignment(self):
        data = _wave()
        adx_arr, plus_di, minus_di = adx(data + 1, data - 1, data, 14)
        assert np.isnan(plus_di[:14]).all()
        assert not np.isnan(plus_di[14])
        assert np.isnan(adx_arr[:27]).all()
        assert not np.isnan(adx_arr[27])
        defined = adx_arr[~np.isnan(adx_arr)]
        assert (defined >= 0).all() and (defined <= 100).all()

    def test_adx_flat_market_is_zero(self):
        flat = np.full(30, 10.0)
        adx_arr, plus_di, minus_di = adx(flat, flat, flat, 14)
        assert plus_di[14] == 0.0
        assert minus_di[14] == 0.0
        assert adx_arr[27] == 0.0

    def test_adx_short_input(self):
        data = _wave(27)
        adx_arr, _, _ = adx(data + 1, data - 1, data, 14)
        assert np.isnan(adx_arr).all()


class TestOHLCVData:
    def test_from_candles(self, wave_candles):
        data = OHLCVData.from_candles(wave_candles)
        assert len(data) == len(wave_candles)
        assert data.source("close")[0] == wave_candles[0].close
        assert data.source("volume")[-1] == wave_candles[-1].volume

    def test_unknown_source(self, wave_candles):
        with pytest.raises(KeyError):
            OHLCVData.from_candles(wave_candles).source("vwap")
