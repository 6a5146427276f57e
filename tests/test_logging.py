"""Tests for logging setup."""

import logging

from relcount.logging import get_logger, setup_logging


class TestSetupLogging:
    """Tests for CLI logging configuration."""

    def test_default_level(self):
        """Without flags the logger shows INFO messages."""
        setup_logging()
        assert get_logger().level == logging.INFO
        assert len(get_logger().handlers) == 1

    def test_verbose(self):
        """Verbose mode enables DEBUG with a level prefix."""
        setup_logging(verbose=True)
        handler = get_logger().handlers[0]
        assert get_logger().level == logging.DEBUG
        assert handler.formatter._fmt == "%(levelname)s: %(message)s"

    def test_quiet(self):
        """Quiet mode only shows warnings."""
        setup_logging(quiet=True)
        assert get_logger().level == logging.WARNING

    def test_repeated_setup_replaces_handler(self):
        """Calling setup twice does not duplicate handlers."""
        setup_logging()
        setup_logging()
        assert len(get_logger().handlers) == 1
