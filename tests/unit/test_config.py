"""
Unit tests for configuration management.
"""

import os
from decimal import Decimal
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from candlesight.config import Config, DetectionConfig, LabelLayoutConfig
from candlesight.models.patterns import PatternType


class TestConfig:
    """Test configuration loading and validation."""

    def test_config_loads_defaults(self) -> None:
        """Test that configuration loads with default values."""
        config = Config()

        assert config.detection.preset == "all"
        assert config.detection.doji_threshold is None
        assert config.detection.replace_series_label is True
        assert config.labels.font_size == 10.0
        assert config.logging.level == "INFO"
        assert config.logging.file_path is None

    def test_config_loads_from_env(self, mock_env_vars: dict) -> None:
        """Test that configuration loads from environment variables."""
        config = Config.load_from_env()

        assert config.detection.doji_threshold == Decimal('0.01')
        assert config.detection.shadow_ratio == Decimal('2.5')
        assert config.detection.preset == "important"
        assert config.detection.replace_series_label is False
        assert config.labels.font_size == 12.0
        assert config.logging.level == "DEBUG"

    def test_pattern_config_from_env(self, test_config: Config) -> None:
        """Test that the configured preset carries the configured thresholds."""
        pattern_config = test_config.pattern_config()
        options = pattern_config.resolved_options()

        assert PatternType.MORNING_STAR in pattern_config.enabled_patterns
        assert PatternType.DOJI not in pattern_config.enabled_patterns
        assert pattern_config.replace_series_label is False
        assert options.doji_threshold == Decimal('0.01')
        assert options.shadow_ratio == Decimal('2.5')
        assert options.engulfing_min_size == Decimal('0.8')

    def test_blank_threshold_uses_default(self) -> None:
        """Test that empty threshold variables are treated as unset."""
        with patch.dict(os.environ, {"DOJI_THRESHOLD": "  "}, clear=False):
            config = Config.load_from_env()

        assert config.detection.doji_threshold is None
        assert config.pattern_config().resolved_options().doji_threshold == Decimal('0.001')

    def test_env_file(self, temp_dir) -> None:
        """Test loading variables from an explicit .env file."""
        env_file = temp_dir / "test.env"
        env_file.write_text("TWEEZER_TOLERANCE=0.002\nLABEL_PADDING=6\n")

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("TWEEZER_TOLERANCE", None)
            os.environ.pop("LABEL_PADDING", None)
            config = Config.load_from_env(str(env_file))

        assert config.detection.tweezer_tolerance == Decimal('0.002')
        assert config.labels.padding == 6.0

    def test_unknown_preset_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DetectionConfig(preset="exotic")

    def test_label_layout_validation(self) -> None:
        with pytest.raises(ValidationError):
            LabelLayoutConfig(font_size=0)

    def test_label_layout_options(self) -> None:
        config = Config(labels=LabelLayoutConfig(font_size=20, padding=1))

        options = config.label_layout_options()

        assert options.font_size == 20
        assert options.padding == 1
        assert options.effective_char_width == 12.0
