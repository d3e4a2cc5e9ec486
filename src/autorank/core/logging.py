"""Logging configuration."""

import logging
import sys

from autorank.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that are chatty at INFO during browser automation.
_NOISY_LOGGERS = ("asyncio", "aiohttp.access", "urllib3")


def setup_logging(level: str | None = None) -> None:
    """Configure application logging.

    Args:
        level: Optional level overriding ``Settings.log_level`` (e.g. from the CLI).
    """
    settings = get_settings()
    resolved_level = (level or settings.log_level).upper()

    logging.basicConfig(
        level=resolved_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    if not settings.debug:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        logging.Logger: Configured logger instance.
    """
    return logging.getLogger(name)
