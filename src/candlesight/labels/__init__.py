"""
Chart Label Module

Formats detected patterns as text and places the resulting label blocks on
the chart canvas without overlap.
"""

from .formatting import (
    LabelFormatter,
    compose_label_lines,
    dominant_bias,
    format_pattern_lines,
)
from .placement import (
    LabelLayoutOptions,
    LabelPlacer,
    compute_candle_bounds,
    place_labels,
)

__all__ = [
    "LabelFormatter",
    "compose_label_lines",
    "dominant_bias",
    "format_pattern_lines",
    "LabelLayoutOptions",
    "LabelPlacer",
    "compute_candle_bounds",
    "place_labels",
]
