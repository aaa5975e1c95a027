"""
Unit tests for logging infrastructure.
"""

import logging

from candlesight.logger import (
    ScanLoggerAdapter,
    StructuredFormatter,
    _parse_size,
    get_scan_adapter,
    setup_logger,
)


class TestLogger:
    """Test logger setup and formatting."""

    def test_parse_size(self):
        assert _parse_size("10MB") == 10 * 1024 * 1024
        assert _parse_size("512kb") == 512 * 1024
        assert _parse_size("1GB") == 1024 * 1024 * 1024
        assert _parse_size("2048") == 2048
        assert _parse_size("junk") == 10 * 1024 * 1024

    def test_setup_logger_replaces_handlers(self):
        logger = setup_logger("candlesight.test.handlers", level="DEBUG")
        logger = setup_logger("candlesight.test.handlers", level="WARNING")

        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
        assert logger.propagate is False

    def test_file_output_includes_context(self, temp_dir):
        log_file = temp_dir / "logs" / "scan.log"
        logger = setup_logger("candlesight.test.file", log_file=str(log_file), console_output=False)
        adapter = get_scan_adapter(logger, series="BTC 1h", preset="important")

        adapter.info("Scanned 10 candles")
        for handler in logger.handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "[BTC 1h] [preset:important] Scanned 10 candles" in content

    def test_structured_formatter_without_context(self):
        formatter = StructuredFormatter("%(levelname)s | %(message)s")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "plain", None, None)

        assert formatter.format(record) == "INFO | plain"

    def test_adapter_merges_extra(self):
        adapter = get_scan_adapter(series="ETH")

        msg, kwargs = adapter.process("hello", {"extra": {"preset": "all"}})

        assert isinstance(adapter, ScanLoggerAdapter)
        assert kwargs["extra"] == {"series": "ETH", "preset": "all"}
        assert adapter.logger.name == "candlesight.scan"
