"""
Candlesight: Candlestick Pattern Classification and Chart Annotation

Classifies OHLC candle series into named technical-analysis patterns and
lays out the resulting labels so a chart renderer can draw them without
overlap.
"""

__version__ = "0.1.0"
__author__ = "Candlesight Team"
__description__ = "Candlestick pattern classification and chart label placement"

# Package-level imports for convenience
from .config import Config
from .logger import get_logger

__all__ = ["Config", "get_logger", "__version__"]
