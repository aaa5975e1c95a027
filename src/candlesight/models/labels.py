"""
Label Geometry Models

Pixel-space value objects shared by the label placement engine and the
chart renderer. Coordinates follow screen convention: y grows downward, so
a box's ``top`` is numerically smaller than its ``bottom``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from .patterns import PatternBias


@dataclass(frozen=True)
class Box:
    """Axis-aligned rectangle in pixel coordinates."""
    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    def intersects(self, other: 'Box', padding: float = 0.0) -> bool:
        """True when the boxes overlap; touching edges do not count."""
        return (
            self.left < other.right + padding
            and other.left < self.right + padding
            and self.top < other.bottom + padding
            and other.top < self.bottom + padding
        )

    def overlap_area(self, other: 'Box') -> float:
        width = min(self.right, other.right) - max(self.left, other.left)
        height = min(self.bottom, other.bottom) - max(self.top, other.top)
        if width <= 0 or height <= 0:
            return 0.0
        return width * height

    def contains(self, other: 'Box') -> bool:
        return (
            self.left <= other.left
            and self.top <= other.top
            and other.right <= self.right
            and other.bottom <= self.bottom
        )

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> 'Box':
        return Box(self.left + dx, self.top + dy, self.right + dx, self.bottom + dy)

    def moved_to(self, left: float, top: float) -> 'Box':
        return Box(left, top, left + self.width, top + self.height)


# A candle's drawn extent: body plus both wicks
CandleBounds = Box


class LabelAnchor(str, Enum):
    """Which side of the candle a label block sits on."""
    ABOVE = "above"
    BELOW = "below"


class LabelBlock(BaseModel):
    """Positioned multi-line label for one candle index."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., description="Candle index the label annotates", ge=0)
    lines: List[str] = Field(..., description="Text lines, top to bottom")
    anchor: LabelAnchor = Field(..., description="Side of the candle")
    box: Box = Field(..., description="Final pixel bounds of the block")
    bias: PatternBias = Field(default=PatternBias.NEUTRAL, description="Dominant bias, for colouring")
    overlapping: bool = Field(
        default=False,
        description="Best-effort placement that still intersects an earlier block"
    )
