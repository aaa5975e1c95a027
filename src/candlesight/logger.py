"""
Logging infrastructure for Candlesight.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = levelname


class StructuredFormatter(logging.Formatter):
    """Structured formatter for file output."""

    def format(self, record: logging.LogRecord) -> str:
        # Prefix scan context
        prefix = ""
        if hasattr(record, 'series'):
            prefix += f"[{record.series}] "
        if hasattr(record, 'preset'):
            prefix += f"[preset:{record.preset}] "

        message = super().format(record)
        if not prefix:
            return message
        head, sep, tail = message.rpartition(" | ")
        return f"{head}{sep}{prefix}{tail}" if sep else f"{prefix}{message}"


def setup_logger(
    name: str,
    level: str = "INFO",
    log_file: Optional[str] = None,
    max_size: str = "10MB",
    backup_count: int = 5,
    console_output: bool = True
) -> logging.Logger:
    """
    Set up a logger with file rotation and optional console output.

    Args:
        name: Logger name
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (optional)
        max_size: Maximum log file size before rotation
        backup_count: Number of backup files to keep
        console_output: Whether to output to console

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Clear existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Set level
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    # Console handler; stderr keeps command output clean
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)

        console_format = ColoredFormatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        console_handler.setFormatter(console_format)
        logger.addHandler(console_handler)

    # File handler with rotation
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Parse max_size
        size_bytes = _parse_size(max_size)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=size_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)

        file_format = StructuredFormatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_format)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger


def get_logger(name: str = "candlesight", level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance with default configuration.

    Library modules log through ``logging.getLogger(__name__)``, so
    configuring the "candlesight" logger here also routes their records.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional rotating log file

    Returns:
        Logger instance
    """
    return setup_logger(
        name=name,
        level=level,
        log_file=log_file,
        console_output=True
    )


def _parse_size(size_str: str) -> int:
    """
    Parse size string (e.g., '10MB', '1GB') to bytes.

    Args:
        size_str: Size string with unit

    Returns:
        Size in bytes
    """
    size_str = size_str.upper().strip()

    # Longest units first so 'MB' is not read as 'B'
    size_map = {
        'GB': 1024 * 1024 * 1024,
        'MB': 1024 * 1024,
        'KB': 1024,
        'B': 1,
    }

    for unit, multiplier in size_map.items():
        if size_str.endswith(unit):
            number = size_str[:-len(unit)].strip()
            try:
                return int(float(number) * multiplier)
            except ValueError:
                break

    # Default to bytes if no unit or invalid format
    try:
        return int(size_str)
    except ValueError:
        return 10 * 1024 * 1024  # Default 10MB


class ScanLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter for pattern scans with series context."""

    def __init__(self, logger: logging.Logger, extra: dict):
        super().__init__(logger, extra)

    def process(self, msg: str, kwargs: dict) -> tuple:
        # Merge call-site extras over the adapter context
        extra = dict(self.extra)
        extra.update(kwargs.get('extra', {}))
        kwargs['extra'] = extra
        return msg, kwargs


def get_scan_adapter(
    logger: Optional[logging.Logger] = None,
    series: Optional[str] = None,
    preset: Optional[str] = None
) -> ScanLoggerAdapter:
    """
    Get a scan logger adapter with context.

    Args:
        logger: Base logger, "candlesight.scan" when None
        series: Series name being scanned
        preset: Pattern preset in use

    Returns:
        Logger adapter with scan context
    """
    extra = {}

    if series:
        extra['series'] = series
    if preset:
        extra['preset'] = preset

    return ScanLoggerAdapter(logger or logging.getLogger("candlesight.scan"), extra)
