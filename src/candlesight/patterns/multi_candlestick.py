"""
Multi-Candlestick Pattern Rules

This module implements the predicates for patterns spanning two or three
consecutive candles:

Two-candle patterns (prev, curr):
- Engulfing and Harami (two-sided: return (bullish, bearish))
- Piercing Line and Dark Cloud Cover
- Tweezer Top and Tweezer Bottom

Three-candle patterns (first, second, third):
- Morning Star and Evening Star
- Three White Soldiers and Three Black Crows

Every candle in the window is validated first; a single invalid candle
means no match for the whole window.
"""

from decimal import Decimal
from typing import Optional, Tuple

from .geometry import CandleLike, CandleGeometry, ZERO, TWO, as_geometry
from .pattern_config import DetectionOptions, resolve_options

# Third star candle must recover at least this fraction of the first body
STAR_CONFIRMATION_RATIO = Decimal('0.5')

NO_MATCH: Tuple[bool, bool] = (False, False)


def _pair(prev: CandleLike, curr: CandleLike) -> Optional[Tuple[CandleGeometry, CandleGeometry]]:
    a, b = as_geometry(prev), as_geometry(curr)
    if a is None or b is None:
        return None
    return a, b


def _triple(
    first: CandleLike, second: CandleLike, third: CandleLike
) -> Optional[Tuple[CandleGeometry, CandleGeometry, CandleGeometry]]:
    a, b, c = as_geometry(first), as_geometry(second), as_geometry(third)
    if a is None or b is None or c is None:
        return None
    return a, b, c


def detect_engulfing(
    prev: CandleLike, curr: CandleLike, options: Optional[DetectionOptions] = None
) -> Tuple[bool, bool]:
    """
    Current body swallows the previous, opposite-coloured body.

    The size floor is inclusive: curr.body == engulfing_min_size * prev.body
    still engulfs.

    Returns:
        (bullish, bearish)
    """
    pair = _pair(prev, curr)
    if pair is None:
        return NO_MATCH
    p, c = pair
    opts = resolve_options(options)

    if c.body_top < p.body_top or c.body_bottom > p.body_bottom:
        return NO_MATCH
    if c.body_size < opts.engulfing_min_size * p.body_size:
        return NO_MATCH

    return (p.is_bearish and c.is_bullish), (p.is_bullish and c.is_bearish)


def detect_harami(
    prev: CandleLike, curr: CandleLike, options: Optional[DetectionOptions] = None
) -> Tuple[bool, bool]:
    """
    Small opposite-coloured body inside the previous body.

    Uses the complement of the engulfing size knob, so with
    engulfing_min_size >= 1 no harami can match.

    Returns:
        (bullish, bearish)
    """
    pair = _pair(prev, curr)
    if pair is None:
        return NO_MATCH
    p, c = pair
    opts = resolve_options(options)

    if c.body_top > p.body_top or c.body_bottom < p.body_bottom:
        return NO_MATCH
    if c.body_size > (1 - opts.engulfing_min_size) * p.body_size:
        return NO_MATCH

    return (p.is_bearish and c.is_bullish), (p.is_bullish and c.is_bearish)


def detect_piercing_line(
    prev: CandleLike, curr: CandleLike, options: Optional[DetectionOptions] = None
) -> bool:
    """Bullish candle opening below prev's low, closing past its midpoint."""
    pair = _pair(prev, curr)
    if pair is None:
        return False
    p, c = pair
    if not (p.is_bearish and c.is_bullish):
        return False
    return c.open < p.low and p.body_midpoint < c.close < p.open


def detect_dark_cloud_cover(
    prev: CandleLike, curr: CandleLike, options: Optional[DetectionOptions] = None
) -> bool:
    """Bearish candle opening above prev's high, closing below its midpoint."""
    pair = _pair(prev, curr)
    if pair is None:
        return False
    p, c = pair
    if not (p.is_bullish and c.is_bearish):
        return False
    return c.open > p.high and p.open < c.close < p.body_midpoint


def _prices_match(a: Decimal, b: Decimal, tolerance: Decimal) -> bool:
    average = (a + b) / TWO
    if average <= ZERO:
        return a == b
    return abs(a - b) / average <= tolerance


def detect_tweezer_top(
    prev: CandleLike, curr: CandleLike, options: Optional[DetectionOptions] = None
) -> bool:
    """Bullish then bearish candle sharing the same high."""
    pair = _pair(prev, curr)
    if pair is None:
        return False
    p, c = pair
    if not (p.is_bullish and c.is_bearish):
        return False
    return _prices_match(p.high, c.high, resolve_options(options).tweezer_tolerance)


def detect_tweezer_bottom(
    prev: CandleLike, curr: CandleLike, options: Optional[DetectionOptions] = None
) -> bool:
    """Bearish then bullish candle sharing the same low."""
    pair = _pair(prev, curr)
    if pair is None:
        return False
    p, c = pair
    if not (p.is_bearish and c.is_bullish):
        return False
    return _prices_match(p.low, c.low, resolve_options(options).tweezer_tolerance)


def detect_morning_star(
    first: CandleLike,
    second: CandleLike,
    third: CandleLike,
    options: Optional[DetectionOptions] = None,
) -> bool:
    """
    Bearish candle, small star gapping down, bullish recovery.

    The star's body must sit below the first body (wicks may overlap), and
    the third candle must open above the star's body and close above the
    first body's midpoint.
    """
    window = _triple(first, second, third)
    if window is None:
        return False
    a, b, c = window
    opts = resolve_options(options)

    if not a.is_bearish or a.body_size <= ZERO:
        return False
    if b.body_size > opts.body_size_ratio * a.body_size:
        return False
    if b.body_top >= a.body_bottom:
        return False
    if not c.is_bullish or c.open <= b.body_top:
        return False
    return (
        c.close > a.body_midpoint
        and c.body_size >= STAR_CONFIRMATION_RATIO * a.body_size
    )


def detect_evening_star(
    first: CandleLike,
    second: CandleLike,
    third: CandleLike,
    options: Optional[DetectionOptions] = None,
) -> bool:
    """Bullish candle, small star gapping up, bearish decline."""
    window = _triple(first, second, third)
    if window is None:
        return False
    a, b, c = window
    opts = resolve_options(options)

    if not a.is_bullish or a.body_size <= ZERO:
        return False
    if b.body_size > opts.body_size_ratio * a.body_size:
        return False
    if b.body_bottom <= a.body_top:
        return False
    if not c.is_bearish or c.open >= b.body_bottom:
        return False
    return (
        c.close < a.body_midpoint
        and c.body_size >= STAR_CONFIRMATION_RATIO * a.body_size
    )


def detect_three_white_soldiers(
    first: CandleLike,
    second: CandleLike,
    third: CandleLike,
    options: Optional[DetectionOptions] = None,
) -> bool:
    """Three rising bullish candles, each opening inside the previous body."""
    window = _triple(first, second, third)
    if window is None:
        return False
    opts = resolve_options(options)

    if not all(g.is_bullish and g.body_ratio >= opts.body_size_ratio for g in window):
        return False
    for prev, curr in zip(window, window[1:]):
        if not (prev.open <= curr.open <= prev.close):
            return False
        if curr.close <= prev.close:
            return False
    return True


def detect_three_black_crows(
    first: CandleLike,
    second: CandleLike,
    third: CandleLike,
    options: Optional[DetectionOptions] = None,
) -> bool:
    """Three falling bearish candles, each opening inside the previous body."""
    window = _triple(first, second, third)
    if window is None:
        return False
    opts = resolve_options(options)

    if not all(g.is_bearish and g.body_ratio >= opts.body_size_ratio for g in window):
        return False
    for prev, curr in zip(window, window[1:]):
        if not (prev.close <= curr.open <= prev.open):
            return False
        if curr.close >= prev.close:
            return False
    return True
