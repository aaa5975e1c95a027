"""
Candlestick Pattern Recognition Module

This module contains the rules and orchestration for detecting candlestick
patterns over a candle series.

Pattern Types:
- Single candlestick patterns (Doji family, Hammer, Marubozu, Spinning Top, etc.)
- Two candlestick patterns (Engulfing, Harami, Piercing Line, Tweezers, etc.)
- Three candlestick patterns (Morning/Evening Star, Soldiers, Crows)
"""

from .geometry import CandleGeometry, is_valid_ohlc, measure
from .pattern_config import (
    DetectionOptions,
    PatternConfig,
    PRESETS,
    enable_patterns,
    get_preset,
    merge_patterns,
    patterns_all,
    patterns_bearish,
    patterns_bullish,
    patterns_important,
    patterns_indecision,
    patterns_reversal,
    patterns_trend,
)
from .scanner import (
    EmptySeriesError,
    PATTERN_RULES,
    PatternRule,
    PatternScanner,
    scan_patterns,
)

__all__ = [
    "CandleGeometry",
    "is_valid_ohlc",
    "measure",
    "DetectionOptions",
    "PatternConfig",
    "PRESETS",
    "enable_patterns",
    "get_preset",
    "merge_patterns",
    "patterns_all",
    "patterns_bearish",
    "patterns_bullish",
    "patterns_important",
    "patterns_indecision",
    "patterns_reversal",
    "patterns_trend",
    "EmptySeriesError",
    "PATTERN_RULES",
    "PatternRule",
    "PatternScanner",
    "scan_patterns",
]
