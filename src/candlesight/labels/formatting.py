"""
Label text formatting for detected patterns.
"""

from collections import Counter
from typing import Callable, List, Optional, Sequence

from ..models.patterns import PatternBias, PatternMatch

# Custom formatter: matches at one index -> label lines
LabelFormatter = Callable[[Sequence[PatternMatch]], List[str]]


def format_pattern_lines(matches: Sequence[PatternMatch]) -> List[str]:
    """Default formatter: one "<glyph> <short name>" line per match."""
    return [match.label for match in matches]


def dominant_bias(matches: Sequence[PatternMatch]) -> PatternBias:
    """Most frequent bias among the matches; ties and empty input are neutral."""
    counts = Counter(match.bias for match in matches)
    if not counts:
        return PatternBias.NEUTRAL

    ranked = counts.most_common()
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return PatternBias.NEUTRAL
    return ranked[0][0]


def compose_label_lines(
    matches: Sequence[PatternMatch],
    existing: Optional[str] = None,
    replace: bool = True,
    formatter: Optional[LabelFormatter] = None,
) -> List[str]:
    """
    Build the text lines for one candle's label.

    Args:
        matches: Patterns matched at the candle
        existing: Label the series already carries at that candle, if any
        replace: True drops ``existing``; False keeps it above the pattern lines
        formatter: Overrides ``format_pattern_lines``

    Returns:
        Non-empty text lines, top to bottom
    """
    lines = list((formatter or format_pattern_lines)(matches))
    if not replace and existing:
        lines = existing.splitlines() + lines
    return [line for line in lines if line]
