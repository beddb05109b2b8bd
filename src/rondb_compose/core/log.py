"""
Logging setup.

Library modules only call logging.getLogger(__name__).
The CLI calls setup_logger once so every module shares one console handler.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = "rondb_compose", level: int | str = logging.INFO) -> logging.Logger:
    """
    Configure the package logger.

    If the logger already has a handler it was configured before, we only
    update the level.
    """

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger
