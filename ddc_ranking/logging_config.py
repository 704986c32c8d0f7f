"""
Logging configuration for ddc-ranking.

Sets up loguru with appropriate levels and formatting.
"""

import sys
from pathlib import Path

from loguru import logger
from typing import Any


CONSOLE_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}:{function}:{line}</cyan> - <level>{message}</level>"
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"


def setup_logging(
    level: str = "INFO", debug: bool = False, log_file: Path | None = None
) -> None:
    """
    Configure loguru logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: If True, enable debug logging and more verbose output
        log_file: Optional path for a rotating log file
    """
    # Remove default handler
    logger.remove()
    logger.configure(extra={"name": "ddc_ranking"})

    log_level = "DEBUG" if debug else level

    # Diagnostics go to stderr so stdout stays clean for the ranking output
    logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT)

    if log_file is None:
        return

    log_file = Path(log_file)
    logger.add(
        log_file,
        level="INFO",
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="7 days",
        compression="zip",
    )

    if debug:
        logger.add(
            log_file.with_name(f"{log_file.stem}_debug{log_file.suffix}"),
            level="DEBUG",
            format=FILE_FORMAT,
            rotation="50 MB",
            retention="3 days",
            compression="zip",
        )


def get_logger(name: str | None = None) -> Any:
    """
    Get a logger instance.

    Args:
        name: Optional name for the logger (defaults to calling module)

    Returns:
        Logger instance
    """
    if name:
        return logger.bind(name=name)
    return logger
