"""
Candlesight Models Package

Data models for candle series, recognised patterns and label geometry.
"""

from .candles import (
    Candle,
    CandleSeries,
)

from .patterns import (
    PatternType,
    PatternBias,
    PatternCategory,
    PatternInfo,
    PatternMatch,
    PATTERN_INFO,
)

from .labels import (
    Box,
    CandleBounds,
    LabelAnchor,
    LabelBlock,
)

__all__ = [
    # Candles
    "Candle",
    "CandleSeries",

    # Patterns
    "PatternType",
    "PatternBias",
    "PatternCategory",
    "PatternInfo",
    "PatternMatch",
    "PATTERN_INFO",

    # Labels
    "Box",
    "CandleBounds",
    "LabelAnchor",
    "LabelBlock",
]
