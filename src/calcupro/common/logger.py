"""Shared project logger."""
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("calcupro")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a stream handler to the project logger and set its level.

    Calling it again only updates the level, so entry points can call it freely.

    :param str level: Logging level name (e.g. "INFO", "DEBUG")

    :return: The configured project logger
    :rtype: logging.Logger
    """
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
