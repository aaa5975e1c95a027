"""
Pytest configuration and fixtures for Candlesight tests.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator, List

import pytest
from unittest.mock import patch

from candlesight.config import Config
from candlesight.models.candles import Candle


def make_candle(open_price, high, low, close) -> Candle:
    """Create a candle from plain numbers."""
    return Candle(open=open_price, high=high, low=low, close=close)


# 27 candles, one formation per block; expected matches listed below.
# Scanned with doji_threshold=0.01.
COMPREHENSIVE_OHLC = [
    (100, 110, 95, 105),       # 0  normal
    (105, 108, 102, 105.05),   # 1  doji
    (108, 109, 98, 107),       # 2  hammer
    (106, 125, 105, 107),      # 3  shooting star
    (108, 120, 107, 108.1),    # 4  gravestone doji
    (109, 110, 90, 108.9),     # 5  dragonfly doji
    (120, 125, 105, 108),      # 6  morning star 1/3
    (102, 104, 100, 103),      # 7  morning star 2/3
    (108, 125, 106, 122),      # 8  morning star 3/3
    (122, 140, 120, 138),      # 9  evening star 1/3
    (142, 144, 140, 143),      # 10 evening star 2/3
    (138, 140, 115, 118),      # 11 evening star 3/3
    (120, 135, 120, 135),      # 12 bullish marubozu
    (135, 135, 115, 115),      # 13 bearish marubozu
    (118, 125, 110, 119),      # 14 spinning top
    (120, 121, 115, 115),      # 15 piercing line 1/2
    (112, 119, 112, 118),      # 16 piercing line 2/2
    (118, 125, 118, 125),      # 17 dark cloud cover 1/2
    (127, 127, 120, 121),      # 18 dark cloud cover 2/2
    (125, 126, 100, 102),      # 19 tweezer bottom 1/2
    (102, 108, 100, 107),      # 20 tweezer bottom 2/2
    (110, 115, 109, 114),      # 21 three white soldiers 1/3
    (113, 118, 112, 117),      # 22 three white soldiers 2/3
    (116, 121, 115, 120),      # 23 three white soldiers 3/3
    (120, 121, 115, 116),      # 24 three black crows 1/3
    (117, 118, 112, 113),      # 25 three black crows 2/3
    (114, 115, 108, 109),      # 26 three black crows 3/3
]


@pytest.fixture
def comprehensive_candles() -> List[Candle]:
    """Candle series exercising every classic pattern once."""
    return [make_candle(*ohlc) for ohlc in COMPREHENSIVE_OHLC]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def mock_env_vars() -> Generator[dict, None, None]:
    """Mock environment variables for testing."""
    test_env = {
        "DOJI_THRESHOLD": "0.01",
        "SHADOW_RATIO": "2.5",
        "PATTERN_PRESET": "important",
        "REPLACE_SERIES_LABEL": "false",
        "LABEL_FONT_SIZE": "12",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, test_env, clear=False):
        yield test_env


@pytest.fixture
def test_config(mock_env_vars: dict) -> Config:
    """Create a test configuration instance."""
    return Config.load_from_env()
