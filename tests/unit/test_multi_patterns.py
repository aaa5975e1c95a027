"""
Unit tests for multi-candlestick pattern rules.

Tests two- and three-candle rules with positive and negative windows, the
engulfing/harami size complement and the invalid-candle short circuit.
"""

from decimal import Decimal

import pytest

from candlesight.models.candles import Candle
from candlesight.patterns.pattern_config import DetectionOptions
from candlesight.patterns.multi_candlestick import (
    detect_dark_cloud_cover,
    detect_engulfing,
    detect_evening_star,
    detect_harami,
    detect_morning_star,
    detect_piercing_line,
    detect_three_black_crows,
    detect_three_white_soldiers,
    detect_tweezer_bottom,
    detect_tweezer_top,
)


def create_test_candle(open_price=100, high=110, low=90, close=105) -> Candle:
    """Create a test candle with specified OHLC values."""
    return Candle(open=open_price, high=high, low=low, close=close)


INVALID = create_test_candle(100, 95, 105, 98)


class TestEngulfing:
    """Test Engulfing detection."""

    def test_bullish_engulfing(self):
        prev = create_test_candle(110, 112, 105, 106)
        curr = create_test_candle(104, 115, 103, 114)

        assert detect_engulfing(prev, curr, DetectionOptions(engulfing_min_size=0.8)) == (True, False)

    def test_bearish_engulfing(self):
        prev = create_test_candle(106, 112, 105, 110)
        curr = create_test_candle(114, 115, 103, 104)

        assert detect_engulfing(prev, curr) == (False, True)

    def test_not_engulfing(self):
        prev = create_test_candle(110, 112, 105, 106)
        curr = create_test_candle(107, 109, 106, 108)

        assert detect_engulfing(prev, curr) == (False, False)

    def test_same_direction_rejected(self):
        prev = create_test_candle(106, 112, 105, 110)
        curr = create_test_candle(104, 115, 103, 114)

        assert detect_engulfing(prev, curr) == (False, False)

    def test_invalid_candle_rejected(self):
        prev = create_test_candle(110, 112, 105, 106)

        assert detect_engulfing(prev, INVALID) == (False, False)
        assert detect_engulfing(INVALID, prev) == (False, False)


class TestHarami:
    """Test Harami detection."""

    def test_bullish_harami(self):
        prev = create_test_candle(110, 115, 95, 98)
        curr = create_test_candle(102, 106, 100, 104)

        assert detect_harami(prev, curr) == (True, False)

    def test_bearish_harami(self):
        prev = create_test_candle(98, 115, 95, 110)
        curr = create_test_candle(106, 108, 102, 104)

        assert detect_harami(prev, curr) == (False, True)

    def test_second_body_too_large(self):
        prev = create_test_candle(110, 115, 95, 98)
        curr = create_test_candle(100, 112, 96, 108)

        assert detect_harami(prev, curr) == (False, False)

    def test_not_contained(self):
        prev = create_test_candle(110, 115, 95, 98)
        curr = create_test_candle(108, 113, 107, 111)

        assert detect_harami(prev, curr) == (False, False)

    def test_no_harami_when_threshold_reaches_one(self):
        prev = create_test_candle(110, 115, 95, 98)
        curr = create_test_candle(103, 104, 102, 103.5)

        assert detect_harami(prev, curr, DetectionOptions(engulfing_min_size=1)) == (False, False)


class TestEngulfingHaramiComplement:
    """Engulfing and harami share the size knob as complements."""

    @pytest.mark.parametrize("threshold", ['0.2', '0.5', '0.8', '0.95'])
    def test_at_most_one_matches(self, threshold):
        options = DetectionOptions(engulfing_min_size=threshold)
        prev = create_test_candle(110, 112, 99, 100)
        for close in ['101', '102', '105', '108', '110', '112', '115']:
            curr = create_test_candle(100, 116, 99, close)
            engulfing = any(detect_engulfing(prev, curr, options))
            harami = any(detect_harami(prev, curr, options))
            assert not (engulfing and harami)

    def test_engulfing_size_boundary(self):
        """curr.body == t * prev.body is the inclusive engulfing boundary."""
        prev = create_test_candle(110, 111, 99, 100)   # body 10
        curr = create_test_candle(100, 111, 99, 110)   # body 10, ratio 1.0

        assert detect_engulfing(prev, curr, DetectionOptions(engulfing_min_size=1)) == (True, False)
        assert detect_engulfing(prev, curr, DetectionOptions(engulfing_min_size='1.01')) == (False, False)

    def test_harami_size_boundary(self):
        """curr.body == (1 - t) * prev.body is the inclusive harami boundary."""
        prev = create_test_candle(110, 111, 99, 100)   # body 10
        curr = create_test_candle(104, 107, 103, 106)  # body 2

        assert detect_harami(prev, curr, DetectionOptions(engulfing_min_size='0.8')) == (True, False)
        assert detect_harami(prev, curr, DetectionOptions(engulfing_min_size='0.81')) == (False, False)


class TestPiercingAndDarkCloud:
    """Test Piercing Line and Dark Cloud Cover detection."""

    def test_piercing_line(self):
        prev = create_test_candle(120, 120, 110, 110)

        assert detect_piercing_line(prev, create_test_candle(108, 118, 108, 116))
        assert not detect_piercing_line(prev, create_test_candle(108, 114, 108, 112))

    def test_piercing_line_needs_gap_down(self):
        prev = create_test_candle(120, 120, 110, 110)

        assert not detect_piercing_line(prev, create_test_candle(111, 118, 110, 116))

    def test_piercing_line_must_close_below_prev_open(self):
        prev = create_test_candle(120, 120, 110, 110)

        assert not detect_piercing_line(prev, create_test_candle(108, 122, 108, 121))

    def test_dark_cloud_cover(self):
        prev = create_test_candle(110, 120, 110, 120)

        assert detect_dark_cloud_cover(prev, create_test_candle(122, 122, 112, 114))
        assert not detect_dark_cloud_cover(prev, create_test_candle(122, 122, 118, 118))

    def test_wrong_directions(self):
        bullish = create_test_candle(110, 120, 110, 120)

        assert not detect_piercing_line(bullish, create_test_candle(108, 118, 108, 116))
        assert not detect_piercing_line(INVALID, create_test_candle(108, 118, 108, 116))


class TestTweezers:
    """Test Tweezer Top and Bottom detection."""

    def test_tweezer_top(self):
        prev = create_test_candle(120, 125, 118, 124)
        curr = create_test_candle(124, 125, 119, 121)

        assert detect_tweezer_top(prev, curr)
        assert not detect_tweezer_bottom(prev, curr)

    def test_tweezer_bottom(self):
        prev = create_test_candle(105, 108, 100, 102)
        curr = create_test_candle(102, 107, 100, 106)

        assert detect_tweezer_bottom(prev, curr)
        assert not detect_tweezer_top(prev, curr)

    def test_tweezer_tolerance(self):
        prev = create_test_candle(120, 125, 118, 124)
        curr = create_test_candle(124, 125.5, 119, 121)   # 0.5 / 125.25 ~ 0.004

        assert detect_tweezer_top(prev, curr)
        assert not detect_tweezer_top(prev, curr, DetectionOptions(tweezer_tolerance='0.003'))


class TestStars:
    """Test Morning and Evening Star detection."""

    def test_morning_star(self):
        first = create_test_candle(120, 125, 105, 108)
        second = create_test_candle(102, 104, 100, 103)
        third = create_test_candle(108, 125, 106, 122)

        assert detect_morning_star(first, second, third)
        assert not detect_evening_star(first, second, third)

    @pytest.mark.parametrize("first, second, third", [
        ((108, 125, 105, 120), (102, 104, 100, 103), (108, 125, 106, 122)),
        ((120, 125, 105, 108), (109, 111, 107, 110), (108, 125, 106, 122)),
        ((120, 125, 105, 108), (102, 104, 100, 103), (108, 110, 105, 107)),
        ((120, 125, 105, 108), (100, 106, 98, 106), (108, 125, 106, 122)),
    ])
    def test_morning_star_rejections(self, first, second, third):
        candles = [create_test_candle(*ohlc) for ohlc in (first, second, third)]

        assert not detect_morning_star(*candles)

    def test_evening_star(self):
        first = create_test_candle(122, 140, 120, 138)
        second = create_test_candle(142, 144, 140, 143)
        third = create_test_candle(138, 140, 115, 118)

        assert detect_evening_star(first, second, third)
        assert not detect_morning_star(first, second, third)

    @pytest.mark.parametrize("first, second, third", [
        ((138, 140, 120, 122), (142, 144, 140, 143), (138, 140, 115, 118)),
        ((122, 140, 120, 138), (136, 140, 134, 139), (138, 140, 115, 118)),
        ((122, 140, 120, 138), (142, 144, 140, 143), (138, 145, 135, 142)),
    ])
    def test_evening_star_rejections(self, first, second, third):
        candles = [create_test_candle(*ohlc) for ohlc in (first, second, third)]

        assert not detect_evening_star(*candles)

    def test_invalid_middle_candle(self):
        first = create_test_candle(120, 125, 105, 108)
        third = create_test_candle(108, 125, 106, 122)

        assert not detect_morning_star(first, INVALID, third)


class TestSoldiersAndCrows:
    """Test Three White Soldiers and Three Black Crows detection."""

    def test_three_white_soldiers(self):
        candles = [
            create_test_candle(100, 105, 99, 104),
            create_test_candle(103, 108, 102, 107),
            create_test_candle(106, 111, 105, 110),
        ]

        assert detect_three_white_soldiers(*candles)
        assert not detect_three_black_crows(*candles)

    def test_soldiers_need_bullish_third(self):
        candles = [
            create_test_candle(100, 105, 99, 104),
            create_test_candle(103, 108, 102, 107),
            create_test_candle(106, 108, 105, 106),
        ]

        assert not detect_three_white_soldiers(*candles)

    def test_soldiers_must_open_within_previous_body(self):
        candles = [
            create_test_candle(100, 105, 99, 104),
            create_test_candle(105, 110, 104.5, 109),
            create_test_candle(108, 113, 107, 112),
        ]

        assert not detect_three_white_soldiers(*candles)

    def test_soldiers_reject_doji_like_bodies(self):
        candles = [
            create_test_candle(100, 110, 95, 101),
            create_test_candle(100.5, 110, 95, 102),
            create_test_candle(101.5, 110, 95, 103),
        ]

        assert not detect_three_white_soldiers(*candles)

    def test_three_black_crows(self):
        candles = [
            create_test_candle(110, 111, 105, 106),
            create_test_candle(107, 108, 102, 103),
            create_test_candle(104, 105, 99, 100),
        ]

        assert detect_three_black_crows(*candles)
        assert not detect_three_white_soldiers(*candles)

    def test_crows_need_bearish_third(self):
        candles = [
            create_test_candle(110, 111, 105, 106),
            create_test_candle(107, 108, 102, 103),
            create_test_candle(104, 108, 99, 107),
        ]

        assert not detect_three_black_crows(*candles)
