"""
Logging setup for station-wind.

Search output goes to stdout, so every log line is written to stderr and,
optionally, to a detailed log file.
"""

import logging
import os
import sys
import time
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s %(message)s"
FILE_FORMAT = "%(asctime)s %(name)s %(levelname)s [%(module)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def setup_logger(
    name: str = "station_wind",
    log_file: Optional[str] = None,
    log_level: str = "INFO"
) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        name: Logger name
        log_file: Detailed log file. If None, the LOG_FILE env var is used;
                  without either, only stderr is written
        log_level: Logging level name (DEBUG, INFO, WARNING, ...)

    Returns:
        Configured logger instance
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(max(level, logging.INFO))
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, DATE_FORMAT))
    logger.addHandler(console)

    log_file = log_file or os.getenv("LOG_FILE")
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


class LoggerContext:
    """Time a named operation and log its start, end and failure."""

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.duration = 0.0
        self._started = 0.0

    def __enter__(self) -> "LoggerContext":
        self._started = time.monotonic()
        self.logger.log(self.level, f"Starting {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.duration = time.monotonic() - self._started

        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed after {self.duration:.2f}s: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
            return False

        self.logger.log(self.level, f"Finished {self.operation} in {self.duration:.2f}s")
        return False
