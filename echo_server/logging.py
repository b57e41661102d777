"""Logging configuration for the echo server."""

import logging
import sys

# aiohttp writes its own access line per request; the request logging
# middleware already covers that.
AIOHTTP_ACCESS_LOGGER = "aiohttp.access"


def setup_logging(level: int | str = logging.INFO, access_log: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level or level name (default: INFO)
        access_log: Keep aiohttp's own access log lines
    """
    format_string = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"

    if isinstance(level, str):
        level = level.upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not access_log:
        logging.getLogger(AIOHTTP_ACCESS_LOGGER).setLevel(logging.WARNING)
