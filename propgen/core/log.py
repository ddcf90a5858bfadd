"""Logging setup for trial runs."""

import logging

from propgen.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging.

    Args:
        level: Log level name, defaults to PROPGEN_LOG_LEVEL
    """
    logging.basicConfig(level=level or settings.log_level, format=LOG_FORMAT)
