"""Tests for structured logging setup."""

import logging

import pytest

from lazysingleton.config import LoggingConfig
from lazysingleton.infrastructure.logging import get_logger, setup_logging
from lazysingleton.infrastructure.logging.logger import _HANDLER_MARKER


@pytest.fixture
def restore_logging():
    yield
    setup_logging(LoggingConfig(level="DEBUG", destination="stdout"))


def _own_handlers():
    return [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_MARKER, False)]


class TestSetupLogging:
    """Test handler installation."""

    def test_file_destination_writes_log_file(self, tmp_path, restore_logging):
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(
            LoggingConfig(level="INFO", destination="file", file_path=str(log_file), renderer="json")
        )

        get_logger("lazysingleton.test").info("File logging works", component="test")
        for handler in _own_handlers():
            handler.flush()

        content = log_file.read_text()
        assert "File logging works" in content
        assert '"component": "test"' in content

    def test_both_destinations(self, tmp_path, restore_logging):
        setup_logging(
            LoggingConfig(destination="both", file_path=str(tmp_path / "app.log"))
        )

        assert len(_own_handlers()) == 2

    def test_repeated_setup_replaces_own_handlers(self, restore_logging):
        setup_logging(LoggingConfig())
        setup_logging(LoggingConfig())

        assert len(_own_handlers()) == 1

    def test_foreign_handlers_preserved(self, restore_logging):
        foreign = logging.NullHandler()
        root = logging.getLogger()
        root.addHandler(foreign)
        try:
            setup_logging(LoggingConfig())
            assert foreign in root.handlers
        finally:
            root.removeHandler(foreign)

    def test_level_applied_to_root(self, restore_logging):
        setup_logging(LoggingConfig(level="WARNING"))
        assert logging.getLogger().level == logging.WARNING
