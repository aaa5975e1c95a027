"""
Candle Geometry Classifier

Derives the body/shadow measurements every pattern rule works from. A
geometry is only produced for valid candles, which is how rule functions
absorb bad input: an invalid candle yields None and None never matches.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from ..models.candles import Candle

ZERO = Decimal('0')
TWO = Decimal('2')


@dataclass(frozen=True)
class CandleGeometry:
    """Derived measurements of one valid candle."""
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    body_size: Decimal
    body_top: Decimal
    body_bottom: Decimal
    upper_shadow: Decimal
    lower_shadow: Decimal
    total_range: Decimal

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open

    @property
    def body_ratio(self) -> Decimal:
        """Body as a fraction of the full range; zero for a flat candle."""
        if self.total_range == ZERO:
            return ZERO
        return self.body_size / self.total_range

    @property
    def body_midpoint(self) -> Decimal:
        return (self.body_top + self.body_bottom) / TWO


CandleLike = Union[Candle, CandleGeometry, None]


def is_valid_ohlc(candle: Optional[Candle]) -> bool:
    """True when the candle exists and its OHLC values are consistent."""
    return candle is not None and candle.is_valid


def measure(candle: Optional[Candle]) -> Optional[CandleGeometry]:
    """Compute the geometry of a candle, or None when it is invalid."""
    if not is_valid_ohlc(candle):
        return None

    body_top = max(candle.open, candle.close)
    body_bottom = min(candle.open, candle.close)
    return CandleGeometry(
        open=candle.open,
        high=candle.high,
        low=candle.low,
        close=candle.close,
        body_size=body_top - body_bottom,
        body_top=body_top,
        body_bottom=body_bottom,
        upper_shadow=candle.high - body_top,
        lower_shadow=body_bottom - candle.low,
        total_range=candle.high - candle.low,
    )


def as_geometry(candle: CandleLike) -> Optional[CandleGeometry]:
    """Accept either a raw candle or an already measured geometry."""
    if candle is None or isinstance(candle, CandleGeometry):
        return candle
    return measure(candle)
