"""
Configuration management for Candlesight.
"""

import os
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from .labels.placement import LabelLayoutOptions
from .patterns.pattern_config import DetectionOptions, PatternConfig, PRESETS, get_preset


class DetectionConfig(BaseModel):
    """Pattern detection thresholds and preset selection."""

    doji_threshold: Optional[Decimal] = None
    shadow_ratio: Optional[Decimal] = None
    engulfing_min_size: Optional[Decimal] = None
    shadow_tolerance: Optional[Decimal] = None
    body_size_ratio: Optional[Decimal] = None
    tweezer_tolerance: Optional[Decimal] = None
    preset: str = Field(default="all")
    replace_series_label: bool = Field(default=True)

    @field_validator('preset')
    @classmethod
    def validate_preset(cls, v: str) -> str:
        name = v.strip().lower()
        if name not in PRESETS:
            raise ValueError(f"Unknown pattern preset: {v!r}")
        return name

    def detection_options(self) -> DetectionOptions:
        return DetectionOptions(
            doji_threshold=self.doji_threshold,
            shadow_ratio=self.shadow_ratio,
            engulfing_min_size=self.engulfing_min_size,
            shadow_tolerance=self.shadow_tolerance,
            body_size_ratio=self.body_size_ratio,
            tweezer_tolerance=self.tweezer_tolerance,
        )


class LabelLayoutConfig(BaseModel):
    """Label block metrics in pixels."""

    font_size: float = Field(default=10.0, gt=0)
    padding: float = Field(default=4.0, ge=0)
    gap: float = Field(default=4.0, ge=0)
    spacing: float = Field(default=2.0, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file_path: Optional[str] = Field(default=None)
    max_size: str = Field(default="10MB")
    backup_count: int = Field(default=5)


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


class Config(BaseModel):
    """Main configuration class."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    labels: LabelLayoutConfig = Field(default_factory=LabelLayoutConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load_from_env(cls, env_file: Optional[str] = None) -> "Config":
        """Load configuration from environment variables."""
        if env_file:
            load_dotenv(env_file)
        else:
            # Try to load from .env file in current directory
            env_path = Path(".env")
            if env_path.exists():
                load_dotenv(env_path)

        # Detection config
        detection = DetectionConfig(
            doji_threshold=_optional_env("DOJI_THRESHOLD"),
            shadow_ratio=_optional_env("SHADOW_RATIO"),
            engulfing_min_size=_optional_env("ENGULFING_MIN_SIZE"),
            shadow_tolerance=_optional_env("SHADOW_TOLERANCE"),
            body_size_ratio=_optional_env("BODY_SIZE_RATIO"),
            tweezer_tolerance=_optional_env("TWEEZER_TOLERANCE"),
            preset=os.getenv("PATTERN_PRESET", "all"),
            replace_series_label=os.getenv("REPLACE_SERIES_LABEL", "true").lower() == "true"
        )

        # Label layout config
        labels = LabelLayoutConfig(
            font_size=float(os.getenv("LABEL_FONT_SIZE", "10.0")),
            padding=float(os.getenv("LABEL_PADDING", "4.0")),
            gap=float(os.getenv("LABEL_GAP", "4.0")),
            spacing=float(os.getenv("LABEL_SPACING", "2.0"))
        )

        # Logging config
        logging = LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO"),
            file_path=_optional_env("LOG_FILE_PATH"),
            max_size=os.getenv("LOG_MAX_SIZE", "10MB"),
            backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5"))
        )

        return cls(
            detection=detection,
            labels=labels,
            logging=logging
        )

    def pattern_config(self) -> PatternConfig:
        """Build the configured preset with the configured thresholds."""
        return get_preset(
            self.detection.preset,
            replace_series_label=self.detection.replace_series_label,
            detection_options=self.detection.detection_options(),
        )

    def label_layout_options(self) -> LabelLayoutOptions:
        return LabelLayoutOptions(
            font_size=self.labels.font_size,
            padding=self.labels.padding,
            gap=self.labels.gap,
            spacing=self.labels.spacing,
        )
