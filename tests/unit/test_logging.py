"""
Unit tests for logging utilities.
"""

import logging

import pytest

from bgcdb.utils.logging import ROOT_LOGGER, LogContext, get_logger, set_level, setup_logger


@pytest.fixture(autouse=True)
def restore_level():
    root = logging.getLogger(ROOT_LOGGER)
    level = root.level
    yield
    root.setLevel(level)


class TestLoggers:
    """Test logger naming and configuration."""

    def test_package_logger(self):
        assert get_logger("bgcdb.query.parser").name == "bgcdb.query.parser"

    def test_foreign_name_nested(self):
        assert get_logger("__main__").name == "bgcdb.__main__"

    def test_setup_replaces_handlers(self, tmp_path):
        root = setup_logger("WARNING", log_file=str(tmp_path / "bgcdb.log"))
        assert len(root.handlers) == 2
        assert root.level == logging.WARNING

        root = setup_logger()
        assert len(root.handlers) == 1
        assert root.propagate is False

    def test_set_level(self):
        set_level("debug")
        assert logging.getLogger(ROOT_LOGGER).level == logging.DEBUG

    def test_unknown_level(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            set_level("LOUD")


class TestLogContext:
    """Test temporary level changes."""

    def test_restores_level(self):
        set_level("INFO")

        with LogContext("DEBUG") as logger:
            assert logger.level == logging.DEBUG

        assert logging.getLogger(ROOT_LOGGER).level == logging.INFO

    def test_restores_after_error(self):
        logger = get_logger("bgcdb.storage.sql")
        logger.setLevel(logging.ERROR)

        with pytest.raises(RuntimeError):
            with LogContext("DEBUG", logger):
                raise RuntimeError("boom")

        assert logger.level == logging.ERROR
        logger.setLevel(logging.NOTSET)
