"""
Pattern Detection Configuration

This module defines the configurable parameters for candlestick pattern
detection:
- DetectionOptions: the six numeric thresholds shared by every rule
- PatternConfig: enabled-pattern set, thresholds and the label-replacement flag
- Preset factories (all, important, bullish, bearish, reversal, indecision, trend)
- merge_patterns: ordered union of two configurations

All values are immutable. Thresholds left unset (None, zero or negative)
resolve to the documented defaults when a rule runs, so a partial
configuration only overrides the fields it actually sets.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.patterns import (
    PATTERN_INFO,
    PatternBias,
    PatternCategory,
    PatternType,
)

logger = logging.getLogger(__name__)


DEFAULT_DOJI_THRESHOLD = Decimal('0.001')      # body/range
DEFAULT_SHADOW_RATIO = Decimal('2.0')          # shadow/body
DEFAULT_ENGULFING_MIN_SIZE = Decimal('0.8')    # curr.body/prev.body
DEFAULT_SHADOW_TOLERANCE = Decimal('0.01')     # shadow/range
DEFAULT_BODY_SIZE_RATIO = Decimal('0.3')       # body/range
DEFAULT_TWEEZER_TOLERANCE = Decimal('0.005')   # relative price difference

_THRESHOLD_DEFAULTS: Dict[str, Decimal] = {
    'doji_threshold': DEFAULT_DOJI_THRESHOLD,
    'shadow_ratio': DEFAULT_SHADOW_RATIO,
    'engulfing_min_size': DEFAULT_ENGULFING_MIN_SIZE,
    'shadow_tolerance': DEFAULT_SHADOW_TOLERANCE,
    'body_size_ratio': DEFAULT_BODY_SIZE_RATIO,
    'tweezer_tolerance': DEFAULT_TWEEZER_TOLERANCE,
}

PatternName = Union[PatternType, str]


class DetectionOptions(BaseModel):
    """Numeric thresholds for pattern rules. None means "use the default"."""

    model_config = ConfigDict(frozen=True)

    doji_threshold: Optional[Decimal] = Field(
        None, description="Maximum body/range ratio for a doji")
    shadow_ratio: Optional[Decimal] = Field(
        None, description="Minimum shadow/body ratio for long-shadow patterns")
    engulfing_min_size: Optional[Decimal] = Field(
        None, description="Minimum curr/prev body ratio for engulfing; harami uses 1 - value")
    shadow_tolerance: Optional[Decimal] = Field(
        None, description="Maximum shadow/range ratio counted as 'no shadow'")
    body_size_ratio: Optional[Decimal] = Field(
        None, description="Maximum body/range ratio for small-body patterns")
    tweezer_tolerance: Optional[Decimal] = Field(
        None, description="Maximum relative difference for matching tweezer highs/lows")

    @field_validator(*_THRESHOLD_DEFAULTS.keys(), mode='before')
    @classmethod
    def validate_threshold(cls, v) -> Optional[Decimal]:
        """Convert to Decimal; zero and negative values count as unset."""
        if v is None:
            return None
        try:
            value = v if isinstance(v, Decimal) else Decimal(str(v).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid threshold value: {v!r}") from None
        if not value.is_finite() or value <= 0:
            return None
        return value

    @property
    def is_resolved(self) -> bool:
        return all(getattr(self, name) is not None for name in _THRESHOLD_DEFAULTS)

    def resolve(self) -> 'DetectionOptions':
        """Return a copy with every unset threshold replaced by its default."""
        if self.is_resolved:
            return self
        return self.model_copy(update={
            name: default
            for name, default in _THRESHOLD_DEFAULTS.items()
            if getattr(self, name) is None
        })

    def overlay(self, base: Optional['DetectionOptions']) -> 'DetectionOptions':
        """Fields set here win; unset fields are taken from ``base``."""
        if base is None:
            return self
        return self.model_copy(update={
            name: getattr(base, name)
            for name in _THRESHOLD_DEFAULTS
            if getattr(self, name) is None
        })

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            name: None if getattr(self, name) is None else str(getattr(self, name))
            for name in _THRESHOLD_DEFAULTS
        }


DEFAULT_OPTIONS = DetectionOptions().resolve()


def resolve_options(options: Optional[DetectionOptions]) -> DetectionOptions:
    """Resolve possibly-partial options; None gives the defaults."""
    if options is None:
        return DEFAULT_OPTIONS
    return options.resolve()


def _coerce_pattern(value: PatternName) -> PatternType:
    if isinstance(value, PatternType):
        return value
    name = str(value).strip()
    try:
        return PatternType(name.lower())
    except ValueError:
        pass
    try:
        return PatternType[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown pattern type: {value!r}") from None


class PatternConfig(BaseModel):
    """
    Immutable scan configuration.

    ``enabled_patterns`` is an ordered, duplicate-free tuple. Names given as
    strings are accepted by value ("hammer") or enum name ("HAMMER").
    ``replace_series_label`` decides whether detected-pattern text replaces
    (True) or is appended to (False) an existing per-candle label.
    """

    model_config = ConfigDict(frozen=True)

    enabled_patterns: Tuple[PatternType, ...] = Field(
        default=(), description="Patterns evaluated by a scan, in insertion order")
    detection_options: DetectionOptions = Field(
        default_factory=DetectionOptions, description="Rule thresholds")
    replace_series_label: bool = Field(
        default=True, description="Replace (True) or complement (False) existing labels")

    @field_validator('enabled_patterns', mode='before')
    @classmethod
    def validate_enabled_patterns(cls, v) -> Tuple[PatternType, ...]:
        """Coerce names and drop duplicates, keeping first occurrences."""
        if v is None:
            return ()
        if isinstance(v, (str, PatternType)):
            v = [v]
        seen = []
        for item in v:
            pattern = _coerce_pattern(item)
            if pattern not in seen:
                seen.append(pattern)
        return tuple(seen)

    @property
    def is_empty(self) -> bool:
        return not self.enabled_patterns

    def is_enabled(self, pattern: PatternName) -> bool:
        return _coerce_pattern(pattern) in self.enabled_patterns

    def resolved_options(self) -> DetectionOptions:
        return self.detection_options.resolve()

    def with_options(self, **thresholds: Any) -> 'PatternConfig':
        """Return a copy whose given thresholds override the current ones."""
        override = DetectionOptions(**thresholds)
        return self.model_copy(update={
            'detection_options': override.overlay(self.detection_options)
        })

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return {
            'enabled_patterns': [p.value for p in self.enabled_patterns],
            'detection_options': self.detection_options.to_dict(),
            'replace_series_label': self.replace_series_label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PatternConfig':
        """Create configuration from dictionary."""
        return cls(
            enabled_patterns=data.get('enabled_patterns', ()),
            detection_options=DetectionOptions(**(data.get('detection_options') or {})),
            replace_series_label=data.get('replace_series_label', True),
        )

    def save_to_file(self, filepath: Path):
        """Save configuration to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved pattern configuration to {filepath}")

    @classmethod
    def load_from_file(cls, filepath: Path) -> 'PatternConfig':
        """Load configuration from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)


# Preset factories

def _build(
    patterns: Iterable[PatternType],
    replace_series_label: bool,
    detection_options: Optional[DetectionOptions],
) -> PatternConfig:
    return PatternConfig(
        enabled_patterns=tuple(patterns),
        detection_options=detection_options or DetectionOptions(),
        replace_series_label=replace_series_label,
    )


def _with_bias(bias: PatternBias) -> Tuple[PatternType, ...]:
    return tuple(p for p in PatternType if PATTERN_INFO[p].bias == bias)


def _with_category(category: PatternCategory) -> Tuple[PatternType, ...]:
    return tuple(p for p in PatternType if category in PATTERN_INFO[p].categories)


IMPORTANT_PATTERNS: Tuple[PatternType, ...] = (
    PatternType.ENGULFING_BULLISH,
    PatternType.ENGULFING_BEARISH,
    PatternType.MORNING_STAR,
    PatternType.EVENING_STAR,
    PatternType.HAMMER,
    PatternType.SHOOTING_STAR,
)


def patterns_all(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    """Every supported pattern, in rule-definition order."""
    return _build(PatternType, replace_series_label, detection_options)


def patterns_important(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    """The most reliable reversal signals only."""
    return _build(IMPORTANT_PATTERNS, replace_series_label, detection_options)


def patterns_bullish(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    """Patterns with a bullish connotation; bearish counterparts are excluded."""
    return _build(_with_bias(PatternBias.BULLISH), replace_series_label, detection_options)


def patterns_bearish(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    return _build(_with_bias(PatternBias.BEARISH), replace_series_label, detection_options)


def patterns_reversal(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    return _build(_with_category(PatternCategory.REVERSAL), replace_series_label, detection_options)


def patterns_indecision(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    return _build(_with_category(PatternCategory.INDECISION), replace_series_label, detection_options)


def patterns_trend(
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    return _build(_with_category(PatternCategory.TREND), replace_series_label, detection_options)


def enable_patterns(
    *patterns: PatternName,
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    """Enable an explicit list of patterns, in the given order."""
    return _build(
        (_coerce_pattern(p) for p in patterns), replace_series_label, detection_options
    )


PRESETS: Dict[str, Callable[..., PatternConfig]] = {
    'all': patterns_all,
    'important': patterns_important,
    'bullish': patterns_bullish,
    'bearish': patterns_bearish,
    'reversal': patterns_reversal,
    'indecision': patterns_indecision,
    'trend': patterns_trend,
}


def get_preset(
    name: str,
    replace_series_label: bool = True,
    detection_options: Optional[DetectionOptions] = None,
) -> PatternConfig:
    """Look up a preset factory by name and build its configuration."""
    factory = PRESETS.get(name.strip().lower())
    if factory is None:
        raise ValueError(
            f"Unknown pattern preset: {name!r} (available: {', '.join(PRESETS)})"
        )
    return factory(replace_series_label=replace_series_label,
                   detection_options=detection_options)


def merge_patterns(
    a: Optional[PatternConfig],
    b: Optional[PatternConfig],
) -> Optional[PatternConfig]:
    """
    Merge two configurations.

    If either side is None or enables nothing, the other side is returned
    as-is. Otherwise the result keeps ``a``'s replace flag, takes each
    threshold from ``a`` when set (falling back to ``b``), and enables
    ``a``'s patterns followed by ``b``'s patterns not already present.
    """
    if a is None or a.is_empty:
        return b if b is not None else a
    if b is None or b.is_empty:
        return a

    return PatternConfig(
        enabled_patterns=a.enabled_patterns + b.enabled_patterns,
        detection_options=a.detection_options.overlay(b.detection_options),
        replace_series_label=a.replace_series_label,
    )
