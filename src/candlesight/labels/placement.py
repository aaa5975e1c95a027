"""
Label Placement Engine

Turns per-candle pattern matches into positioned text blocks that do not
overlap each other and stay on the canvas.

Placement runs in one left-to-right pass over the matched indices:

1. Size the block from its text lines (widest line plus padding, one line
   height per line plus padding).
2. Centre it horizontally on the candle, clamped to the canvas.
3. Anchor it above the upper wick when it fits there, else below the lower
   wick when it fits there, else on the side with more room.
4. While it intersects an already placed block, jump past the colliding
   blocks in the anchor's direction (up when above, down when below). If
   that runs off the canvas or beyond ``max_shift``, retry from the other
   side's anchor moving the other way.
5. If neither direction finds a free slot, keep the probed position with
   the least total overlap and flag the block as overlapping.

Earlier (left) blocks never move once placed, so the layout of a prefix of
the chart is stable when more candles are appended.
"""

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..models.candles import Candle
from ..models.labels import Box, CandleBounds, LabelAnchor, LabelBlock
from ..models.patterns import PatternMatch
from .formatting import LabelFormatter, compose_label_lines, dominant_bias

logger = logging.getLogger(__name__)

# Text width estimator supplied by the renderer: text -> pixel width
TextMeasurer = Callable[[str], float]

BoundsInput = Union[Mapping[int, Optional[CandleBounds]], Sequence[Optional[CandleBounds]]]


class LabelLayoutOptions(BaseModel):
    """Pixel metrics used to size and space label blocks."""

    model_config = ConfigDict(frozen=True)

    font_size: float = Field(default=10.0, gt=0, description="Label font size in pixels")
    line_height: Optional[float] = Field(default=None, gt=0, description="Defaults to font_size + 4")
    char_width: Optional[float] = Field(default=None, gt=0, description="Defaults to 0.6 * font_size")
    padding: float = Field(default=4.0, ge=0, description="Inner padding on each side of the text")
    gap: float = Field(default=4.0, ge=0, description="Distance between wick tip and block")
    spacing: float = Field(default=2.0, ge=0, description="Minimum distance between two blocks")
    max_shift: Optional[float] = Field(
        default=None, gt=0, description="Largest vertical displacement from the anchor; canvas height when unset"
    )

    @property
    def effective_line_height(self) -> float:
        return self.line_height if self.line_height is not None else self.font_size + 4

    @property
    def effective_char_width(self) -> float:
        return self.char_width if self.char_width is not None else 0.6 * self.font_size


def _lookup_bounds(candle_bounds: BoundsInput, index: int) -> Optional[CandleBounds]:
    if isinstance(candle_bounds, Mapping):
        return candle_bounds.get(index)
    if 0 <= index < len(candle_bounds):
        return candle_bounds[index]
    return None


def _clamp(value: float, low: float, high: float) -> float:
    # Oversized blocks pin to the low edge
    if high < low:
        return low
    return max(low, min(value, high))


class LabelPlacer:
    """
    Positions pattern labels around candles without overlaps.

    The placer is stateless between calls; each ``place`` call starts from
    an empty canvas.
    """

    def __init__(
        self,
        options: Optional[LabelLayoutOptions] = None,
        measure_text: Optional[TextMeasurer] = None,
        formatter: Optional[LabelFormatter] = None,
    ):
        """
        Initialize placer.

        Args:
            options: Layout metrics, defaults when None
            measure_text: Renderer text-width function; estimated from
                char_width when None
            formatter: Custom label text formatter
        """
        self.options = options or LabelLayoutOptions()
        self.measure_text = measure_text or self._estimate_text_width
        self.formatter = formatter

    def _estimate_text_width(self, text: str) -> float:
        return len(text) * self.options.effective_char_width

    def block_size(self, lines: Sequence[str]) -> Tuple[float, float]:
        """Pixel (width, height) of a block holding ``lines``."""
        padding = 2 * self.options.padding
        width = max((self.measure_text(line) for line in lines), default=0.0) + padding
        height = len(lines) * self.options.effective_line_height + padding
        return width, height

    def place(
        self,
        matches: Mapping[int, Sequence[PatternMatch]],
        candle_bounds: BoundsInput,
        canvas: Box,
        existing_labels: Optional[Mapping[int, str]] = None,
        replace_series_label: bool = True,
    ) -> List[LabelBlock]:
        """
        Place one label block per matched candle.

        Args:
            matches: Scan result, candle index -> matches
            candle_bounds: Pixel bounds of each candle (mapping or list by index)
            canvas: Drawable area
            existing_labels: Labels the series already carries, by index
            replace_series_label: Replace (True) or complement (False) them

        Returns:
            Label blocks ordered by candle index
        """
        existing_labels = existing_labels or {}
        placed: List[Box] = []
        blocks: List[LabelBlock] = []

        for index in sorted(matches):
            index_matches = matches[index]
            if not index_matches:
                continue

            bounds = _lookup_bounds(candle_bounds, index)
            if bounds is None:
                logger.warning(f"No candle bounds for index {index}, label skipped")
                continue

            lines = compose_label_lines(
                index_matches,
                existing=existing_labels.get(index),
                replace=replace_series_label,
                formatter=self.formatter,
            )
            if not lines:
                continue

            width, height = self.block_size(lines)
            box, anchor, overlapping = self._position(bounds, width, height, canvas, placed)
            if overlapping:
                logger.debug(f"Label at index {index} could not avoid overlap")

            placed.append(box)
            blocks.append(LabelBlock(
                index=index,
                lines=lines,
                anchor=anchor,
                box=box,
                bias=dominant_bias(index_matches),
                overlapping=overlapping,
            ))

        return blocks

    def _preferred_anchor(
        self, bounds: CandleBounds, height: float, canvas: Box
    ) -> LabelAnchor:
        space_above = bounds.top - canvas.top - self.options.gap
        space_below = canvas.bottom - bounds.bottom - self.options.gap
        if height <= space_above:
            return LabelAnchor.ABOVE
        if height <= space_below:
            return LabelAnchor.BELOW
        return LabelAnchor.ABOVE if space_above >= space_below else LabelAnchor.BELOW

    def _anchor_box(
        self, anchor: LabelAnchor, bounds: CandleBounds, left: float,
        width: float, height: float, canvas: Box,
    ) -> Box:
        if anchor == LabelAnchor.ABOVE:
            top = bounds.top - self.options.gap - height
        else:
            top = bounds.bottom + self.options.gap
        top = _clamp(top, canvas.top, canvas.bottom - height)
        return Box(left, top, left + width, top + height)

    def _search(
        self, start: Box, upward: bool, canvas: Box, placed: List[Box], probed: List[Box]
    ) -> Optional[Box]:
        """Jump past colliding blocks until free; None when the room runs out."""
        spacing = self.options.spacing
        max_shift = self.options.max_shift or canvas.height
        box = start

        for _ in range(len(placed) + 1):
            probed.append(box)
            colliding = [other for other in placed if box.intersects(other, spacing)]
            if not colliding:
                return box

            if upward:
                top = min(other.top for other in colliding) - spacing - box.height
            else:
                top = max(other.bottom for other in colliding) + spacing

            if abs(top - start.top) > max_shift:
                return None
            if top < canvas.top or top + box.height > canvas.bottom:
                return None
            box = box.moved_to(box.left, top)

        return None

    def _position(
        self, bounds: CandleBounds, width: float, height: float,
        canvas: Box, placed: List[Box],
    ) -> Tuple[Box, LabelAnchor, bool]:
        left = _clamp(bounds.center_x - width / 2, canvas.left, canvas.right - width)

        first = self._preferred_anchor(bounds, height, canvas)
        second = LabelAnchor.BELOW if first == LabelAnchor.ABOVE else LabelAnchor.ABOVE

        probed: List[Tuple[Box, LabelAnchor]] = []
        for anchor in (first, second):
            start = self._anchor_box(anchor, bounds, left, width, height, canvas)
            tried: List[Box] = []
            box = self._search(start, anchor == LabelAnchor.ABOVE, canvas, placed, tried)
            if box is not None:
                return box, anchor, False
            probed.extend((candidate, anchor) for candidate in tried)

        # Best effort: least total overlap, earliest probe wins ties
        best_box, best_anchor = min(
            probed,
            key=lambda item: sum(item[0].overlap_area(other) for other in placed),
        )
        overlapping = any(best_box.intersects(other) for other in placed)
        return best_box, best_anchor, overlapping


def place_labels(
    matches: Mapping[int, Sequence[PatternMatch]],
    candle_bounds: BoundsInput,
    canvas: Box,
    options: Optional[LabelLayoutOptions] = None,
    existing_labels: Optional[Mapping[int, str]] = None,
    replace_series_label: bool = True,
) -> List[LabelBlock]:
    """Place labels with a default-configured LabelPlacer."""
    return LabelPlacer(options).place(
        matches, candle_bounds, canvas,
        existing_labels=existing_labels,
        replace_series_label=replace_series_label,
    )


def compute_candle_bounds(
    candles: Sequence[Candle],
    canvas: Box,
    candle_width_ratio: float = 0.8,
    vertical_margin: float = 0.15,
) -> List[Optional[CandleBounds]]:
    """
    Map candles onto the canvas with a linear price scale.

    Each candle gets an equal horizontal slot; ``vertical_margin`` of the
    canvas height is kept free at the top and bottom. Invalid candles get
    None. Intended for previews and tests where no renderer supplies
    real geometry.
    """
    if not candles:
        return []

    valid = [c for c in candles if c.is_valid]
    if not valid:
        return [None] * len(candles)

    price_high = max(c.high for c in valid)
    price_low = min(c.low for c in valid)
    price_span = price_high - price_low

    margin = canvas.height * vertical_margin
    plot_top = canvas.top + margin
    plot_height = canvas.height - 2 * margin

    def to_y(price: Decimal) -> float:
        if price_span == 0:
            return plot_top + plot_height / 2
        return plot_top + float((price_high - price) / price_span) * plot_height

    slot = canvas.width / len(candles)
    half_width = slot * candle_width_ratio / 2

    bounds: List[Optional[CandleBounds]] = []
    for i, candle in enumerate(candles):
        if not candle.is_valid:
            bounds.append(None)
            continue
        center = canvas.left + (i + 0.5) * slot
        bounds.append(Box(center - half_width, to_y(candle.high), center + half_width, to_y(candle.low)))
    return bounds
