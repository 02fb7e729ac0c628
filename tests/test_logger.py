"""Tests for the structured logging setup."""

import logging
from pathlib import Path

import pytest

from src.utils.config import LoggingConfig
from src.utils.logger import setup_logger, setup_logging_from_config


@pytest.fixture
def fresh_src_logger():
    """Detach handlers from the ``src`` logger for the duration of a test."""
    logger = logging.getLogger("src")
    saved_handlers, saved_level = logger.handlers[:], logger.level
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved_handlers
    logger.setLevel(saved_level)


class TestSetupLogger:
    """Tests for the setup_logger function."""

    def test_default_level_is_info(self) -> None:
        logger = setup_logger("occupancy_level_info")
        assert logger.name == "occupancy_level_info"
        assert logger.level == logging.INFO

    def test_custom_level(self) -> None:
        logger = setup_logger("occupancy_level_debug", level="debug")
        assert logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self) -> None:
        logger = setup_logger("occupancy_level_unknown", level="LOUD")
        assert logger.level == logging.INFO

    def test_console_only_without_file(self) -> None:
        logger = setup_logger("occupancy_console")
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_file_handler_created(self, tmp_path: Path) -> None:
        """A file handler is added and its directory created."""
        log_file = tmp_path / "logs" / "occupancy.log"
        logger = setup_logger("occupancy_file", log_file=str(log_file))
        file_handlers = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert log_file.parent.exists()

    def test_idempotent_handler_setup(self) -> None:
        """Configuring the same name twice doesn't duplicate handlers."""
        first = setup_logger("occupancy_idempotent")
        count = len(first.handlers)
        second = setup_logger("occupancy_idempotent", level="DEBUG")
        assert second is first
        assert len(second.handlers) == count
        assert second.level == logging.INFO

    def test_log_format(self, tmp_path: Path) -> None:
        """Records are written pipe-separated with name and level."""
        log_file = tmp_path / "format.log"
        logger = setup_logger("occupancy_format", log_file=str(log_file))
        logger.warning("week flushed")
        line = log_file.read_text().strip()
        assert " | occupancy_format | WARNING | week flushed" in line


class TestSetupLoggingFromConfig:
    """Tests for configuring the ``src`` logger from LoggingConfig."""

    def test_config_level_and_file(self, fresh_src_logger, tmp_path: Path) -> None:
        log_file = tmp_path / "app.log"
        logger = setup_logging_from_config(LoggingConfig(level="WARNING", file=str(log_file)))
        assert logger is fresh_src_logger
        assert logger.level == logging.WARNING
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    def test_verbose_forces_debug(self, fresh_src_logger) -> None:
        logger = setup_logging_from_config(LoggingConfig(level="ERROR"), verbose=True)
        assert logger.level == logging.DEBUG
