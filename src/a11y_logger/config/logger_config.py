"""Logger configuration for the accessibility logger."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    colorize: bool = True,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure loguru logger for console and optional file output.

    Sets up structured logging with:
    - Console output on stderr with colored output
    - Optional file output with rotation and retention
    - Local echo lines carry their accessibility labels in the ``labels`` extra

    Args:
        level: Minimum level for both sinks
        log_file: Path of the log file, or None to log to the console only
        colorize: Whether console output is colored
        rotation: loguru rotation rule for the file sink
        retention: loguru retention rule for the file sink
    """

    # Remove default loguru handler
    logger.remove()

    logger.add(
        sink=sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level> {extra}",
        level=level,
        colorize=colorize,
    )

    if log_file is not None:
        logger.add(
            sink=str(log_file),
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} {extra}",
            level=level,
            rotation=rotation,
            retention=retention,
            compression="gz",  # Compress rotated logs
            enqueue=True,  # Thread-safe logging
        )

        logger.info(f"File logging enabled: {log_file}")
        logger.info(f"Log level: {level}")
