"""
Pattern Catalogue Models

This module defines the closed set of recognised candlestick patterns and
the value objects produced by a scan:
- PatternType: enumeration of every pattern, in rule-definition order
- PatternBias / PatternCategory: directional and thematic classification
- PatternInfo: static display metadata per pattern
- PatternMatch: one pattern recognised at one candle index
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet

from pydantic import BaseModel, ConfigDict, Field


class PatternType(str, Enum):
    """Candlestick pattern type enumeration."""
    # Single candle patterns
    DOJI = "doji"
    LONG_LEGGED_DOJI = "long_legged_doji"
    GRAVESTONE_DOJI = "gravestone_doji"
    DRAGONFLY_DOJI = "dragonfly_doji"
    HAMMER = "hammer"
    INVERTED_HAMMER = "inverted_hammer"
    SHOOTING_STAR = "shooting_star"
    MARUBOZU_BULLISH = "marubozu_bullish"
    MARUBOZU_BEARISH = "marubozu_bearish"
    BELT_HOLD_BULLISH = "belt_hold_bullish"
    BELT_HOLD_BEARISH = "belt_hold_bearish"
    SPINNING_TOP = "spinning_top"
    HIGH_WAVE = "high_wave"

    # Two candle patterns
    ENGULFING_BULLISH = "engulfing_bullish"
    ENGULFING_BEARISH = "engulfing_bearish"
    HARAMI_BULLISH = "harami_bullish"
    HARAMI_BEARISH = "harami_bearish"
    PIERCING_LINE = "piercing_line"
    DARK_CLOUD_COVER = "dark_cloud_cover"
    TWEEZER_TOP = "tweezer_top"
    TWEEZER_BOTTOM = "tweezer_bottom"

    # Three candle patterns
    MORNING_STAR = "morning_star"
    EVENING_STAR = "evening_star"
    THREE_WHITE_SOLDIERS = "three_white_soldiers"
    THREE_BLACK_CROWS = "three_black_crows"

    @property
    def info(self) -> 'PatternInfo':
        return PATTERN_INFO[self]

    @property
    def display_name(self) -> str:
        return PATTERN_INFO[self].display_name

    @property
    def bias(self) -> 'PatternBias':
        return PATTERN_INFO[self].bias

    @property
    def window(self) -> int:
        """Number of consecutive candles the pattern spans."""
        return PATTERN_INFO[self].window


class PatternBias(str, Enum):
    """Directional implication of a pattern."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PatternCategory(str, Enum):
    """Thematic grouping used by configuration presets."""
    REVERSAL = "reversal"
    INDECISION = "indecision"
    TREND = "trend"


@dataclass(frozen=True)
class PatternInfo:
    """Static metadata for one pattern type."""
    display_name: str
    short_name: str
    glyph: str
    bias: PatternBias
    window: int
    categories: FrozenSet[PatternCategory]

    @property
    def label(self) -> str:
        """Compact chart label, glyph followed by the short name."""
        return f"{self.glyph} {self.short_name}"


_R = frozenset({PatternCategory.REVERSAL})
_I = frozenset({PatternCategory.INDECISION})
_T = frozenset({PatternCategory.TREND})

PATTERN_INFO: Dict[PatternType, PatternInfo] = {
    PatternType.DOJI: PatternInfo(
        "Doji", "Doji", "±", PatternBias.NEUTRAL, 1, _I),
    PatternType.LONG_LEGGED_DOJI: PatternInfo(
        "Long-Legged Doji", "Long Doji", "‡", PatternBias.NEUTRAL, 1, _I),
    PatternType.GRAVESTONE_DOJI: PatternInfo(
        "Gravestone Doji", "Gravestone", "†", PatternBias.BEARISH, 1, _R),
    PatternType.DRAGONFLY_DOJI: PatternInfo(
        "Dragonfly Doji", "Dragonfly", "ψ", PatternBias.BULLISH, 1, _R),
    PatternType.HAMMER: PatternInfo(
        "Hammer", "Hammer", "Γ", PatternBias.BULLISH, 1, _R),
    PatternType.INVERTED_HAMMER: PatternInfo(
        "Inverted Hammer", "Inv. Hammer", "Ʇ", PatternBias.BULLISH, 1, _R),
    PatternType.SHOOTING_STAR: PatternInfo(
        "Shooting Star", "Shooting Star", "※", PatternBias.BEARISH, 1, _R),
    PatternType.MARUBOZU_BULLISH: PatternInfo(
        "Bullish Marubozu", "Bull Marubozu", "^", PatternBias.BULLISH, 1, _T),
    PatternType.MARUBOZU_BEARISH: PatternInfo(
        "Bearish Marubozu", "Bear Marubozu", "v", PatternBias.BEARISH, 1, _T),
    PatternType.BELT_HOLD_BULLISH: PatternInfo(
        "Bullish Belt Hold", "Bull Belt Hold", "⌊", PatternBias.BULLISH, 1, _R),
    PatternType.BELT_HOLD_BEARISH: PatternInfo(
        "Bearish Belt Hold", "Bear Belt Hold", "⌈", PatternBias.BEARISH, 1, _R),
    PatternType.SPINNING_TOP: PatternInfo(
        "Spinning Top", "Spinning Top", "◌", PatternBias.NEUTRAL, 1, _I),
    PatternType.HIGH_WAVE: PatternInfo(
        "High Wave", "High Wave", "≈", PatternBias.NEUTRAL, 1, _I),
    PatternType.ENGULFING_BULLISH: PatternInfo(
        "Bullish Engulfing", "Bull Engulfing", "Λ", PatternBias.BULLISH, 2, _R),
    PatternType.ENGULFING_BEARISH: PatternInfo(
        "Bearish Engulfing", "Bear Engulfing", "V", PatternBias.BEARISH, 2, _R),
    PatternType.HARAMI_BULLISH: PatternInfo(
        "Bullish Harami", "Bull Harami", "ʘ", PatternBias.BULLISH, 2, _R),
    PatternType.HARAMI_BEARISH: PatternInfo(
        "Bearish Harami", "Bear Harami", "θ", PatternBias.BEARISH, 2, _R),
    PatternType.PIERCING_LINE: PatternInfo(
        "Piercing Line", "Piercing Line", "|", PatternBias.BULLISH, 2, _R),
    PatternType.DARK_CLOUD_COVER: PatternInfo(
        "Dark Cloud Cover", "Dark Cloud", "Ξ", PatternBias.BEARISH, 2, _R),
    PatternType.TWEEZER_TOP: PatternInfo(
        "Tweezer Top", "Tweezer Top", "‖", PatternBias.BEARISH, 2, _R),
    PatternType.TWEEZER_BOTTOM: PatternInfo(
        "Tweezer Bottom", "Tweezer Bottom", "ǁ", PatternBias.BULLISH, 2, _R),
    PatternType.MORNING_STAR: PatternInfo(
        "Morning Star", "Morning Star", "*", PatternBias.BULLISH, 3, _R),
    PatternType.EVENING_STAR: PatternInfo(
        "Evening Star", "Evening Star", "⁎", PatternBias.BEARISH, 3, _R),
    PatternType.THREE_WHITE_SOLDIERS: PatternInfo(
        "Three White Soldiers", "Three Soldiers", "Ш", PatternBias.BULLISH, 3, _T),
    PatternType.THREE_BLACK_CROWS: PatternInfo(
        "Three Black Crows", "Three Crows", "ω", PatternBias.BEARISH, 3, _T),
}


class PatternMatch(BaseModel):
    """
    A pattern recognised at a candle index.

    For multi-candle patterns the index is that of the last candle in the
    window, the candle that completes the formation.
    """

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., description="Index of the completing candle", ge=0)
    pattern_type: PatternType = Field(..., description="Recognised pattern")
    display_name: str = Field(..., description="Human-readable pattern name")

    @classmethod
    def create(cls, index: int, pattern_type: PatternType) -> 'PatternMatch':
        return cls(index=index, pattern_type=pattern_type,
                   display_name=pattern_type.display_name)

    @property
    def bias(self) -> PatternBias:
        return self.pattern_type.bias

    @property
    def label(self) -> str:
        return self.pattern_type.info.label

    @property
    def first_index(self) -> int:
        """Index of the first candle in the pattern window."""
        return self.index - self.pattern_type.window + 1
