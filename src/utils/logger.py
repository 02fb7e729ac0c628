"""Structured logging setup for occupancy heatmaps.

Console and optional file output in a pipe-separated format, shared by
the CLI and the dashboard.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import LoggingConfig

LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: str = "INFO",
) -> logging.Logger:
    """Create and configure a structured logger.

    Handlers are attached once per logger name; later calls return the
    already configured logger unchanged.

    Args:
        name: Logger name, typically the module ``__name__`` or ``"src"``.
        log_file: Optional path to a log file. Parent directories are created.
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        Configured logging.Logger instance.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def setup_logging_from_config(
    logging_config: LoggingConfig, verbose: bool = False
) -> logging.Logger:
    """Configure the application's root ``src`` logger from config.

    Args:
        logging_config: Level and optional log file.
        verbose: Force DEBUG level regardless of the configured level.

    Returns:
        The configured ``src`` logger.
    """
    level = "DEBUG" if verbose else logging_config.level
    return setup_logger("src", log_file=logging_config.file, level=level)
