"""
Single Candlestick Pattern Rules

This module implements the shape predicates for single-candle patterns:
- Doji family: Doji, Long-Legged Doji, Gravestone Doji, Dragonfly Doji
- Hammer, Inverted Hammer and Shooting Star
- Marubozu and Belt Hold (two-sided: return (bullish, bearish))
- Spinning Top and High Wave

Every rule takes a Candle or a precomputed CandleGeometry together with
DetectionOptions and is a pure function of them. Invalid candles never
match. Options may be partial; unset thresholds use the defaults.
"""

from decimal import Decimal
from typing import Optional, Tuple

from .geometry import CandleLike, CandleGeometry, ZERO, as_geometry
from .pattern_config import DetectionOptions, resolve_options

# A shadow this small relative to the opposite shadow counts as absent
NEGLIGIBLE_SHADOW_FRACTION = Decimal('0.3')

# High wave shadows must be this many times longer than the spinning-top floor
HIGH_WAVE_SHADOW_MULTIPLIER = Decimal('2')

NO_MATCH: Tuple[bool, bool] = (False, False)


def _negligible(shadow: Decimal, opposite: Decimal) -> bool:
    return shadow <= NEGLIGIBLE_SHADOW_FRACTION * opposite


def _is_doji(geo: CandleGeometry, opts: DetectionOptions) -> bool:
    if geo.total_range <= ZERO:
        return False
    return geo.body_size / geo.total_range <= opts.doji_threshold


def detect_doji(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Body is a tiny fraction of the range."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    return _is_doji(geo, resolve_options(options))


def detect_long_legged_doji(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Doji with long shadows on both sides; one-sided dojis are rejected."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    opts = resolve_options(options)
    if not _is_doji(geo, opts):
        return False

    min_shadow = opts.shadow_ratio * geo.body_size
    if geo.upper_shadow < min_shadow or geo.lower_shadow < min_shadow:
        return False

    # Symmetry: neither side may be negligible next to the other
    return not (
        _negligible(geo.upper_shadow, geo.lower_shadow)
        or _negligible(geo.lower_shadow, geo.upper_shadow)
    )


def detect_gravestone_doji(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Doji with a long upper shadow and no meaningful lower shadow."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    opts = resolve_options(options)
    if not _is_doji(geo, opts):
        return False
    return (
        geo.upper_shadow > ZERO
        and geo.upper_shadow >= opts.shadow_ratio * geo.body_size
        and _negligible(geo.lower_shadow, geo.upper_shadow)
    )


def detect_dragonfly_doji(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Doji with a long lower shadow and no meaningful upper shadow."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    opts = resolve_options(options)
    if not _is_doji(geo, opts):
        return False
    return (
        geo.lower_shadow > ZERO
        and geo.lower_shadow >= opts.shadow_ratio * geo.body_size
        and _negligible(geo.upper_shadow, geo.lower_shadow)
    )


def detect_hammer(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """
    Small body at the top of the range with a long lower shadow.

    The upper shadow must be negligible relative to the lower one, which
    also guarantees upper_shadow < lower_shadow.
    """
    geo = as_geometry(candle)
    if geo is None:
        return False
    opts = resolve_options(options)
    return (
        geo.lower_shadow > ZERO
        and geo.lower_shadow >= opts.shadow_ratio * geo.body_size
        and _negligible(geo.upper_shadow, geo.lower_shadow)
    )


def detect_inverted_hammer(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Small body at the bottom of the range with a long upper shadow."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    opts = resolve_options(options)
    return (
        geo.upper_shadow > ZERO
        and geo.upper_shadow >= opts.shadow_ratio * geo.body_size
        and _negligible(geo.lower_shadow, geo.upper_shadow)
    )


def detect_shooting_star(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """
    Same shape as the inverted hammer.

    The two differ only in the trend they appear in, which is a presentation
    concern handled by presets, so both labels fire on the same candle.
    """
    return detect_inverted_hammer(candle, options)


def detect_marubozu(
    candle: CandleLike, options: Optional[DetectionOptions] = None
) -> Tuple[bool, bool]:
    """
    Full-bodied candle with (almost) no shadows.

    Returns:
        (bullish, bearish); at most one is True
    """
    geo = as_geometry(candle)
    if geo is None or geo.total_range <= ZERO or geo.body_size <= ZERO:
        return NO_MATCH
    opts = resolve_options(options)

    tolerance = opts.shadow_tolerance
    if geo.upper_shadow / geo.total_range > tolerance:
        return NO_MATCH
    if geo.lower_shadow / geo.total_range > tolerance:
        return NO_MATCH
    return geo.is_bullish, geo.is_bearish


def detect_belt_hold(
    candle: CandleLike, options: Optional[DetectionOptions] = None
) -> Tuple[bool, bool]:
    """
    Large body opening on the extreme of the range.

    A bullish belt hold opens at the low, a bearish one at the high, within
    shadow_tolerance of the range. The shadow at the closing end is free.

    Returns:
        (bullish, bearish); at most one is True
    """
    geo = as_geometry(candle)
    if geo is None or geo.total_range <= ZERO:
        return NO_MATCH
    opts = resolve_options(options)

    if geo.body_ratio < 1 - opts.body_size_ratio:
        return NO_MATCH

    tolerance = opts.shadow_tolerance
    bullish = geo.is_bullish and (geo.open - geo.low) / geo.total_range <= tolerance
    bearish = geo.is_bearish and (geo.high - geo.open) / geo.total_range <= tolerance
    return bullish, bearish


def _is_spinning_top(geo: CandleGeometry, opts: DetectionOptions) -> bool:
    if geo.total_range <= ZERO or geo.body_ratio > opts.body_size_ratio:
        return False
    if geo.upper_shadow <= geo.body_size or geo.lower_shadow <= geo.body_size:
        return False
    min_shadow = opts.shadow_ratio * geo.body_size
    return geo.upper_shadow >= min_shadow and geo.lower_shadow >= min_shadow


def detect_spinning_top(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Small body with shadows on both sides that each dwarf the body."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    return _is_spinning_top(geo, resolve_options(options))


def detect_high_wave(candle: CandleLike, options: Optional[DetectionOptions] = None) -> bool:
    """Spinning top whose shadows are at least twice the spinning-top floor."""
    geo = as_geometry(candle)
    if geo is None:
        return False
    opts = resolve_options(options)
    if not _is_spinning_top(geo, opts):
        return False
    min_shadow = HIGH_WAVE_SHADOW_MULTIPLIER * opts.shadow_ratio * geo.body_size
    return geo.upper_shadow >= min_shadow and geo.lower_shadow >= min_shadow
