"""
IndicatorService tests: read-through store, batch calculation.
"""

import pytest

from signal_engine.schemas.indicators import IndicatorBatchRequest, IndicatorRequest
from signal_engine.schemas.market import Timeframe
from signal_engine.services.cache import IndicatorKey, RedisIndicatorStore
from signal_engine.services.indicators import IndicatorCalculator, IndicatorService


class CountingCalculator(IndicatorCalculator):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def calculate(self, indicator, candles, parameters=None):
        self.calls += 1
        return super().calculate(indicator, candles, parameters)


@pytest.fixture
def calculator():
    return CountingCalculator()


@pytest.fixture
def store():
    return RedisIndicatorStore()


@pytest.fixture
def service(store, calculator):
    return IndicatorService(store=store, calculator=calculator)


SMA = IndicatorRequest(name="SMA")


# ──────────────────────────────────────────────
# Read-through
# ──────────────────────────────────────────────


class TestReadThrough:
    @pytest.mark.asyncio
    async def test_second_call_served_from_store(self, service, calculator, wave_candles):
        first = await service.get_series("BTCUSDT", Timeframe.D1, wave_candles, SMA)
        second = await service.get_series("BTCUSDT", Timeframe.D1, wave_candles, SMA)
        assert calculator.calls == 1
        assert second == first

    @pytest.mark.asyncio
    async def test_new_candles_trigger_recalculation(self, service, calculator, wave_candles):
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[:30], SMA)
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[:40], SMA)
        assert calculator.calls == 2

        # the wider run upserted every slot; the shorter window is now covered
        again = await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[:30], SMA)
        assert calculator.calls == 2
        assert again == IndicatorCalculator().calculate("SMA", wave_candles[:30])

    @pytest.mark.asyncio
    async def test_shifted_window_does_not_overwrite_stored_slots(
        self, service, calculator, wave_candles
    ):
        rsi = IndicatorRequest(name="RSI", parameters={"length": 5})
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[0:30], rsi)
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[10:40], rsi)
        full = await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[0:40], rsi)

        fresh = IndicatorCalculator().calculate("RSI", wave_candles[0:40], {"length": 5})
        assert full == fresh
        assert [i for i, v in enumerate(full.values) if v is None] == [0, 1, 2, 3, 4]

        # served from the store on the next call, still identical
        again = await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[0:40], rsi)
        assert calculator.calls == 3
        assert again == fresh

    @pytest.mark.asyncio
    async def test_parameters_are_part_of_the_key(self, service, calculator, wave_candles):
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles, SMA)
        await service.get_series(
            "BTCUSDT", Timeframe.D1, wave_candles, IndicatorRequest(name="SMA", parameters={"length": 10})
        )
        assert calculator.calls == 2

    @pytest.mark.asyncio
    async def test_empty_series_not_persisted(self, service, store, wave_candles):
        series = await service.get_series("BTCUSDT", Timeframe.D1, wave_candles[:5], SMA)
        assert series.is_empty

        key = IndicatorKey(
            indicator="SMA",
            pair="BTCUSDT",
            timeframe=Timeframe.D1,
            parameters={"length": 20, "source": "close"},
            start=wave_candles[0].timestamp,
        )
        assert await store.get(key) is None

    @pytest.mark.asyncio
    async def test_without_store_always_calculates(self, calculator, wave_candles):
        service = IndicatorService(calculator=calculator)
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles, SMA)
        await service.get_series("BTCUSDT", Timeframe.D1, wave_candles, SMA)
        assert calculator.calls == 2


# ──────────────────────────────────────────────
# Batch
# ──────────────────────────────────────────────


class TestCalculateAll:
    @pytest.mark.asyncio
    async def test_results_keyed_by_display_name(self, service, wave_candles):
        results = await service.calculate_all(
            "BTCUSDT",
            Timeframe.D1,
            wave_candles,
            [IndicatorRequest(name="bb"), IndicatorRequest(name="stoch"), SMA],
        )
        assert set(results) == {"Bollinger Bands", "Stochastic", "SMA"}
        assert all(not series.is_empty for series in results.values())

    @pytest.mark.asyncio
    async def test_invalid_request_skipped(self, service, wave_candles, caplog):
        requests = [SMA, IndicatorRequest(name="RSI", parameters={"length": 0})]
        with caplog.at_level("ERROR"):
            results = await service.calculate_all("BTCUSDT", Timeframe.D1, wave_candles, requests)
        assert set(results) == {"SMA"}
        assert "Error calculating RSI" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_indicator_is_empty(self, service, wave_candles):
        results = await service.calculate_all(
            "BTCUSDT", Timeframe.D1, wave_candles, [IndicatorRequest(name="VWAP")]
        )
        assert results["VWAP"].is_empty
        assert results["VWAP"].kind is None

    @pytest.mark.asyncio
    async def test_execute(self, service, wave_candles):
        request = IndicatorBatchRequest(
            pair="BTCUSDT",
            timeframe=Timeframe.D1,
            candles=wave_candles,
            indicators=[IndicatorRequest(name="EMA", parameters={"length": 9})],
        )
        results = await service.execute(request)
        assert results["EMA"].parameters["length"] == 9
        assert len(results["EMA"]) == len(wave_candles)

    @pytest.mark.asyncio
    async def test_health_check(self, service):
        assert await service.health_check() is True
