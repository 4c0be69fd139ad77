"""Process-wide logging configuration for the CLI and the HTTP app."""

from __future__ import annotations

import logging

from tradeflow.infrastructure.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("tradeflow").setLevel(level)
