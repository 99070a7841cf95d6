"""Logging configuration for scriptupd using loguru."""

import os
import sys
from loguru import logger

from scriptupd.utils import get_data_dir

LOG_FILE_NAME = "scriptupd.log"
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} - {message}"


def setup_logger(log_level: str = "INFO", console_output: bool = False) -> None:
    """
    Replace all sinks with the scriptupd log file and, optionally, stderr.

    The file lives in the data directory and rotates at 10 MB.

    Args:
        log_level: Minimum level for every sink
        console_output: Also log to stderr
    """
    logger.remove()
    if console_output:
        logger.add(sys.stderr, level=log_level, format=CONSOLE_FORMAT, colorize=True)
    logger.add(
        os.path.join(get_data_dir(), LOG_FILE_NAME),
        level=log_level,
        format=FILE_FORMAT,
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        encoding="utf-8",
    )


def get_logger(name: str = "scriptupd"):
    """Return the shared loguru logger tagged with a component name."""
    return logger.bind(name=name)


logger.configure(extra={"name": "scriptupd"})
setup_logger(log_level=os.getenv("SCRIPTUPD_LOG_LEVEL", "INFO"))
