"""Logging setup for the dicework service."""

from __future__ import annotations

import logging
import sys

from dicework.config import settings

_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a single stdout handler to the ``dicework`` logger.

    Safe to call more than once; later calls only adjust the level.
    """
    logger = logging.getLogger("dicework")
    logger.setLevel((level or settings.log_level).upper())
    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
