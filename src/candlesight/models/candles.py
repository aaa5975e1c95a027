"""
Candle Data Models

This module contains the Pydantic models for OHLC price data:
- Candle: a single open/high/low/close record
- CandleSeries: an ordered, named sequence of candles with helpers for
  close-price extraction and time-frame aggregation

Unlike exchange-facing models, a Candle never rejects an inconsistent OHLC
tuple at construction time. Chart data routinely contains gaps (None) and
bad ticks, so consistency is exposed through ``Candle.is_valid`` and every
pattern rule treats invalid candles as non-matching.
"""

import csv
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


CandleRecord = Union[Mapping[str, Any], Sequence[Any], "Candle"]

# Accepted keys per OHLC field, long form first then HyperLiquid short form
_RECORD_KEYS = {
    'open': ('open', 'o'),
    'high': ('high', 'h'),
    'low': ('low', 'l'),
    'close': ('close', 'c'),
}


class Candle(BaseModel):
    """
    One OHLC candle.

    Prices are stored as Decimal so ratio thresholds compare exactly:
    a float input such as ``100.1`` becomes ``Decimal('100.1')``.
    """

    model_config = ConfigDict(frozen=True)

    open: Optional[Decimal] = Field(None, description="Opening price", allow_inf_nan=True)
    high: Optional[Decimal] = Field(None, description="Highest price", allow_inf_nan=True)
    low: Optional[Decimal] = Field(None, description="Lowest price", allow_inf_nan=True)
    close: Optional[Decimal] = Field(None, description="Closing price", allow_inf_nan=True)

    @field_validator('open', 'high', 'low', 'close', mode='before')
    @classmethod
    def validate_price_fields(cls, v) -> Optional[Decimal]:
        """Convert price fields to Decimal without rounding."""
        if v is None:
            return v
        if isinstance(v, Decimal):
            return v
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
        try:
            return Decimal(str(v))
        except InvalidOperation:
            raise ValueError(f"Invalid price value: {v!r}") from None

    @property
    def is_valid(self) -> bool:
        """
        Check OHLC consistency.

        A candle is valid when all four prices are present and finite,
        high >= max(open, close), low <= min(open, close) and high >= low.
        """
        prices = (self.open, self.high, self.low, self.close)
        if any(p is None or not p.is_finite() for p in prices):
            return False

        if self.high < max(self.open, self.close):
            return False
        if self.low > min(self.open, self.close):
            return False
        return self.high >= self.low

    @classmethod
    def from_record(cls, record: CandleRecord) -> 'Candle':
        """
        Build a candle from a loosely-typed record.

        Accepts an existing Candle, a mapping keyed by ``open/high/low/close``
        or ``o/h/l/c``, or a sequence ordered ``[open, high, low, close]``.
        """
        if isinstance(record, Candle):
            return record

        if isinstance(record, Mapping):
            lowered = {str(k).strip().lower(): v for k, v in record.items()}
            values: Dict[str, Any] = {}
            for field_name, keys in _RECORD_KEYS.items():
                for key in keys:
                    if key in lowered:
                        values[field_name] = lowered[key]
                        break
            return cls(**values)

        if isinstance(record, (str, bytes)):
            raise ValueError(f"Cannot build a candle from {record!r}")

        items = list(record)
        if len(items) != 4:
            raise ValueError(
                f"Candle sequence must have 4 values [open, high, low, close], got {len(items)}"
            )
        return cls(open=items[0], high=items[1], low=items[2], close=items[3])

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Serialize prices as strings to keep Decimal precision."""
        return {
            'open': None if self.open is None else str(self.open),
            'high': None if self.high is None else str(self.high),
            'low': None if self.low is None else str(self.low),
            'close': None if self.close is None else str(self.close),
        }


class CandleSeries(BaseModel):
    """Named, ordered sequence of candles."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", description="Series name")
    candles: List[Candle] = Field(default_factory=list, description="Candles in time order")

    @classmethod
    def from_records(cls, records: Sequence[CandleRecord], name: str = "") -> 'CandleSeries':
        return cls(name=name, candles=[Candle.from_record(r) for r in records])

    @classmethod
    def load_from_file(cls, filepath: Path, name: Optional[str] = None) -> 'CandleSeries':
        """
        Load candles from a JSON or CSV file.

        JSON files hold a list of records (or an object with a "candles"
        list and an optional "name"). CSV files need an open,high,low,close
        header; other columns are ignored.
        """
        filepath = Path(filepath)
        with open(filepath, 'r', newline='') as f:
            if filepath.suffix.lower() == '.csv':
                records = list(csv.DictReader(f))
                series_name = filepath.stem
            else:
                data = json.load(f)
                if isinstance(data, dict):
                    records = data.get('candles', [])
                    series_name = data.get('name', filepath.stem)
                else:
                    records = data
                    series_name = filepath.stem
        return cls.from_records(records, name=name if name is not None else series_name)

    def close_prices(self) -> List[Optional[Decimal]]:
        """Return close prices in order; gaps stay None."""
        return [candle.close for candle in self.candles]

    def aggregate(self, factor: int) -> 'CandleSeries':
        """
        Combine every ``factor`` consecutive candles into one.

        Each group takes the first open, the highest high, the lowest low and
        the last close of its valid members. A trailing group holding a
        single candle is copied unchanged. A group without any valid candle
        becomes an empty candle so the output stays index-aligned.

        Args:
            factor: Number of candles per group (1 returns an equal series)

        Returns:
            New series named "<name> (Aggregated)"
        """
        if factor < 1:
            raise ValueError(f"Aggregation factor must be >= 1, got {factor}")

        aggregated: List[Candle] = []
        for start in range(0, len(self.candles), factor):
            group = self.candles[start:start + factor]
            if len(group) == 1:
                aggregated.append(group[0])
                continue

            valid = [c for c in group if c.is_valid]
            if not valid:
                aggregated.append(Candle())
                continue

            aggregated.append(Candle(
                open=valid[0].open,
                high=max(c.high for c in valid),
                low=min(c.low for c in valid),
                close=valid[-1].close,
            ))

        name = f"{self.name} (Aggregated)" if self.name else "(Aggregated)"
        return CandleSeries(name=name, candles=aggregated)
