"""
Logging setup — console plus a dated log file.

All module loggers live under the "bucketstore" logger, so configuring it
once covers the store, the clients and the CLI:

    config = BucketStoreConfig.load()
    setup_logging_from_config(config)
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bucketstore.core.config import BucketStoreConfig

LOGGER_NAME = "bucketstore"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def log_file_for(log_dir: Path, day: datetime | None = None) -> Path:
    """One file per day: bucketstore_YYYYMMDD.log."""
    return log_dir / f"{LOGGER_NAME}_{(day or datetime.now()).strftime('%Y%m%d')}.log"


def _handler(
    handler: logging.Handler,
    level: int | str,
    fmt: str,
    datefmt: str | None = None,
) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_logging(
    log_dir: Path | None = None,
    console_level: int | str = logging.WARNING,
    file_level: int | str = logging.DEBUG,
    console_format: str = CONSOLE_FORMAT,
    file_format: str = FILE_FORMAT,
) -> logging.Logger:
    """
    Configure the bucketstore logger.

    Replaces any handlers from an earlier call, so it is safe to call once
    per CLI invocation.

    Args:
        log_dir: Directory for log files (default: ~/.bucketstore/logs)
        console_level: Minimum level for console output
        file_level: Minimum level for file output
        console_format: Format string for console records
        file_format: Format string for file records

    Returns:
        The configured logger
    """
    log_dir = (log_dir or (Path.home() / ".bucketstore" / "logs")).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_file_for(log_dir)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for old in logger.handlers:
        old.close()
    logger.handlers = [
        _handler(logging.StreamHandler(), console_level, console_format),
        _handler(
            logging.FileHandler(log_file, encoding="utf-8"),
            file_level,
            file_format,
            datefmt=DATE_FORMAT,
        ),
    ]

    logger.debug(f"Logging to {log_file}")
    return logger


def setup_logging_from_config(
    config: BucketStoreConfig,
    console_level: int | str | None = None,
) -> logging.Logger:
    """Apply the [logging] section of config. console_level overrides it."""
    section = config.logging
    return setup_logging(
        log_dir=config.get_log_dir(),
        console_level=console_level if console_level is not None else section.console_level,
        file_level=section.file_level,
        console_format=section.console_format,
        file_format=section.file_format,
    )
