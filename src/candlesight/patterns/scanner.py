"""
Pattern Scan Orchestrator

Runs every enabled pattern rule over a candle series and collects the
matches per candle index.

For each index i the scanner tests the single-candle rules on candle i,
the two-candle rules on (i-1, i) and the three-candle rules on
(i-2, i-1, i). Matches at one index keep rule-definition order and no
rule suppresses another, so one candle may carry several labels.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..models.candles import Candle, CandleRecord, CandleSeries
from ..models.patterns import PatternBias, PatternMatch, PatternType
from . import multi_candlestick as multi
from . import single_candlestick as single
from .geometry import CandleGeometry, measure
from .pattern_config import DetectionOptions, PatternConfig, patterns_all

logger = logging.getLogger(__name__)

Window = Sequence[Optional[CandleGeometry]]
ScanResult = Dict[int, List[PatternMatch]]
CandleInput = Union[CandleSeries, Sequence[CandleRecord]]


class EmptySeriesError(ValueError):
    """Raised when a scan is requested on a series without candles."""


@dataclass(frozen=True)
class PatternRule:
    """A rule function and the number of candles it consumes."""
    window: int
    detect: Callable[[Window, DetectionOptions], bool]


def _one(fn) -> Callable[[Window, DetectionOptions], bool]:
    return lambda w, opts: fn(w[0], opts)


def _one_sided(fn, side: int) -> Callable[[Window, DetectionOptions], bool]:
    return lambda w, opts: fn(w[0], opts)[side]


def _two(fn) -> Callable[[Window, DetectionOptions], bool]:
    return lambda w, opts: fn(w[0], w[1], opts)


def _two_sided(fn, side: int) -> Callable[[Window, DetectionOptions], bool]:
    return lambda w, opts: fn(w[0], w[1], opts)[side]


def _three(fn) -> Callable[[Window, DetectionOptions], bool]:
    return lambda w, opts: fn(w[0], w[1], w[2], opts)


BULLISH, BEARISH = 0, 1

# Insertion order is rule-definition order and fixes per-index match order
PATTERN_RULES: Dict[PatternType, PatternRule] = {
    PatternType.DOJI: PatternRule(1, _one(single.detect_doji)),
    PatternType.LONG_LEGGED_DOJI: PatternRule(1, _one(single.detect_long_legged_doji)),
    PatternType.GRAVESTONE_DOJI: PatternRule(1, _one(single.detect_gravestone_doji)),
    PatternType.DRAGONFLY_DOJI: PatternRule(1, _one(single.detect_dragonfly_doji)),
    PatternType.HAMMER: PatternRule(1, _one(single.detect_hammer)),
    PatternType.INVERTED_HAMMER: PatternRule(1, _one(single.detect_inverted_hammer)),
    PatternType.SHOOTING_STAR: PatternRule(1, _one(single.detect_shooting_star)),
    PatternType.MARUBOZU_BULLISH: PatternRule(1, _one_sided(single.detect_marubozu, BULLISH)),
    PatternType.MARUBOZU_BEARISH: PatternRule(1, _one_sided(single.detect_marubozu, BEARISH)),
    PatternType.BELT_HOLD_BULLISH: PatternRule(1, _one_sided(single.detect_belt_hold, BULLISH)),
    PatternType.BELT_HOLD_BEARISH: PatternRule(1, _one_sided(single.detect_belt_hold, BEARISH)),
    PatternType.SPINNING_TOP: PatternRule(1, _one(single.detect_spinning_top)),
    PatternType.HIGH_WAVE: PatternRule(1, _one(single.detect_high_wave)),
    PatternType.ENGULFING_BULLISH: PatternRule(2, _two_sided(multi.detect_engulfing, BULLISH)),
    PatternType.ENGULFING_BEARISH: PatternRule(2, _two_sided(multi.detect_engulfing, BEARISH)),
    PatternType.HARAMI_BULLISH: PatternRule(2, _two_sided(multi.detect_harami, BULLISH)),
    PatternType.HARAMI_BEARISH: PatternRule(2, _two_sided(multi.detect_harami, BEARISH)),
    PatternType.PIERCING_LINE: PatternRule(2, _two(multi.detect_piercing_line)),
    PatternType.DARK_CLOUD_COVER: PatternRule(2, _two(multi.detect_dark_cloud_cover)),
    PatternType.TWEEZER_TOP: PatternRule(2, _two(multi.detect_tweezer_top)),
    PatternType.TWEEZER_BOTTOM: PatternRule(2, _two(multi.detect_tweezer_bottom)),
    PatternType.MORNING_STAR: PatternRule(3, _three(multi.detect_morning_star)),
    PatternType.EVENING_STAR: PatternRule(3, _three(multi.detect_evening_star)),
    PatternType.THREE_WHITE_SOLDIERS: PatternRule(3, _three(multi.detect_three_white_soldiers)),
    PatternType.THREE_BLACK_CROWS: PatternRule(3, _three(multi.detect_three_black_crows)),
}


def _as_candles(candles: CandleInput) -> List[Candle]:
    if isinstance(candles, CandleSeries):
        return list(candles.candles)
    return [Candle.from_record(c) for c in candles]


class PatternScanner:
    """
    Scans candle series for the patterns enabled in a configuration.

    A scanner holds only its configuration, so one instance can be reused
    across series and scans never share state.
    """

    def __init__(self, config: Optional[PatternConfig] = None):
        """
        Initialize scanner.

        Args:
            config: Pattern configuration; None enables every pattern
        """
        self.config = config if config is not None else patterns_all()
        self.options = self.config.resolved_options()
        enabled = set(self.config.enabled_patterns)
        self.rules: List[Tuple[PatternType, PatternRule]] = [
            (pattern, rule) for pattern, rule in PATTERN_RULES.items() if pattern in enabled
        ]

    def scan(self, candles: CandleInput) -> ScanResult:
        """
        Scan a series and return matches keyed by candle index.

        Args:
            candles: Candles in chronological order

        Returns:
            Mapping of index to matches; indices without matches are absent

        Raises:
            EmptySeriesError: If the series has no candles
        """
        series = _as_candles(candles)
        if not series:
            raise EmptySeriesError("Cannot scan an empty candle series")

        if not self.rules:
            return {}

        geometry = [measure(candle) for candle in series]
        results: ScanResult = {}

        for i in range(len(series)):
            matches = []
            for pattern, rule in self.rules:
                start = i - rule.window + 1
                if start < 0:
                    continue
                if rule.detect(geometry[start:i + 1], self.options):
                    matches.append(PatternMatch.create(i, pattern))
            if matches:
                results[i] = matches

        invalid = sum(1 for g in geometry if g is None)
        logger.debug(
            f"Scanned {len(series)} candles ({invalid} invalid) with "
            f"{len(self.rules)} rules: {sum(len(m) for m in results.values())} matches "
            f"at {len(results)} indices"
        )
        return results

    def scan_flat(self, candles: CandleInput) -> List[PatternMatch]:
        """Scan and return all matches as one list ordered by index."""
        results = self.scan(candles)
        return [match for index in sorted(results) for match in results[index]]

    def get_pattern_summary(self, candles: CandleInput) -> Dict[str, Any]:
        """
        Get summary statistics for a scan.

        Returns:
            Summary dictionary with totals per bias and per pattern type
        """
        matches = self.scan_flat(candles)

        by_type: Dict[str, int] = {}
        for match in matches:
            by_type[match.pattern_type.value] = by_type.get(match.pattern_type.value, 0) + 1

        return {
            "total_patterns": len(matches),
            "matched_indices": len({m.index for m in matches}),
            "bullish_patterns": sum(1 for m in matches if m.bias == PatternBias.BULLISH),
            "bearish_patterns": sum(1 for m in matches if m.bias == PatternBias.BEARISH),
            "neutral_patterns": sum(1 for m in matches if m.bias == PatternBias.NEUTRAL),
            "by_type": by_type,
        }


def scan_patterns(candles: CandleInput, config: Optional[PatternConfig] = None) -> ScanResult:
    """Scan ``candles`` with ``config`` (every pattern when None)."""
    return PatternScanner(config).scan(candles)
