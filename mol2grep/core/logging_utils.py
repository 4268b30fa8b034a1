from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, installing a stderr handler if none exists yet."""
    logger = logging.getLogger(name)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    return logger


def configure_logging(level: Union[int, str]) -> None:
    """Set the level of the mol2grep logger tree (e.g. "DEBUG" for -v)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("mol2grep").setLevel(level)
