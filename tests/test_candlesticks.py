"""
Candlestick shape tests.
"""

from signal_engine.schemas.patterns import PatternType, Strength
from signal_engine.services.patterns.candlesticks import (
    detect_candlestick_patterns,
    is_bearish_engulfing,
    is_bullish_engulfing,
    is_doji,
    is_evening_star,
    is_hammer,
    is_hanging_man,
    is_morning_star,
)


class TestSingleCandle:
    def test_hammer(self, make_candle):
        assert is_hammer(make_candle(10.0, 10.25, 9.0, 10.2))

    def test_long_upper_shadow_is_not_hammer(self, make_candle):
        assert not is_hammer(make_candle(10.0, 11.0, 9.0, 10.2))

    def test_doji(self, make_candle):
        assert is_doji(make_candle(10.0, 10.5, 9.5, 10.02))
        assert not is_doji(make_candle(10.0, 10.5, 9.5, 10.3))

    def test_zero_range_never_matches(self, make_candle):
        flat = make_candle(10.0, 10.0, 10.0, 10.0)
        assert not is_hammer(flat)
        assert not is_doji(flat)


class TestTwoCandles:
    def test_hanging_man_needs_previous_close_below_open(self, make_candle):
        hammer = make_candle(10.0, 10.25, 9.0, 10.2, index=1)
        assert is_hanging_man(hammer, make_candle(9.5, 9.9, 9.4, 9.8))
        assert not is_hanging_man(hammer, make_candle(10.5, 10.6, 10.0, 10.1))

    def test_bullish_engulfing(self, make_candle):
        previous = make_candle(10.0, 10.2, 8.8, 9.0)
        current = make_candle(8.8, 10.6, 8.7, 10.5, index=1)
        assert is_bullish_engulfing(current, previous)
        assert not is_bearish_engulfing(current, previous)

    def test_bearish_engulfing(self, make_candle):
        previous = make_candle(9.0, 10.2, 8.9, 10.0)
        current = make_candle(10.2, 10.3, 8.7, 8.8, index=1)
        assert is_bearish_engulfing(current, previous)
        assert not is_bullish_engulfing(current, previous)

    def test_equal_open_is_not_engulfing(self, make_candle):
        previous = make_candle(10.0, 10.2, 8.8, 9.0)
        current = make_candle(9.0, 10.6, 8.7, 10.5, index=1)
        assert not is_bullish_engulfing(current, previous)


class TestStars:
    def test_morning_star(self, make_candle):
        first = make_candle(10.0, 10.1, 7.9, 8.0)
        middle = make_candle(7.6, 7.7, 7.4, 7.5, index=1)
        last = make_candle(7.8, 9.6, 7.7, 9.5, index=2)
        assert is_morning_star(first, middle, last)
        assert not is_evening_star(first, middle, last)

    def test_morning_star_middle_body_at_threshold(self, make_candle):
        # middle body is exactly 0.3 of the first body
        first = make_candle(20.0, 20.5, 9.5, 10.0)
        middle = make_candle(9.0, 9.5, 5.5, 6.0, index=1)
        last = make_candle(7.0, 16.5, 6.5, 16.0, index=2)
        assert is_morning_star(first, middle, last)

    def test_morning_star_needs_close_past_midpoint(self, make_candle):
        first = make_candle(10.0, 10.1, 7.9, 8.0)
        middle = make_candle(7.6, 7.7, 7.4, 7.5, index=1)
        last = make_candle(7.8, 8.9, 7.7, 8.8, index=2)
        assert not is_morning_star(first, middle, last)

    def test_evening_star(self, make_candle):
        first = make_candle(10.0, 20.5, 9.5, 20.0)
        middle = make_candle(21.0, 24.5, 20.5, 24.0, index=1)
        last = make_candle(23.0, 23.5, 13.5, 14.0, index=2)
        assert is_evening_star(first, middle, last)
        assert not is_morning_star(first, middle, last)


class TestScan:
    def test_needs_three_candles(self, make_candle):
        candles = [make_candle(10.0, 10.25, 9.0, 10.2, index=i) for i in range(2)]
        assert detect_candlestick_patterns(candles) == []

    def test_first_two_candles_are_never_evaluated(self, make_candle):
        hammers = [make_candle(10.0, 10.25, 9.0, 10.2, index=i) for i in range(3)]
        patterns = detect_candlestick_patterns(hammers)
        hammer_times = [p.timestamp for p in patterns if p.name == "Hammer"]
        assert hammer_times == [hammers[2].timestamp]

    def test_morning_star_pattern(self, make_candle):
        candles = [
            make_candle(10.0, 10.1, 7.9, 8.0),
            make_candle(7.6, 7.7, 7.4, 7.5, index=1),
            make_candle(7.8, 9.6, 7.7, 9.5, index=2),
        ]
        star = next(p for p in detect_candlestick_patterns(candles) if p.name == "Morning Star")
        assert star.type == PatternType.BULLISH
        assert star.strength == Strength.STRONG
        assert star.timestamp == candles[2].timestamp
        assert star.evidence["candles"]["first"] == {"open": 10.0, "close": 8.0}

    def test_doji_is_neutral_and_weak(self, make_candle):
        candles = [make_candle(10.0, 10.5, 9.5, 10.02, index=i) for i in range(3)]
        doji = [p for p in detect_candlestick_patterns(candles) if p.name == "Doji"]
        assert len(doji) == 1
        assert doji[0].type == PatternType.NEUTRAL
        assert doji[0].strength == Strength.WEAK
