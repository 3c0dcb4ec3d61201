"""Logging setup for the command line."""

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DEFAULT_LEVEL = "WARNING"


def configure_logging(level: Union[int, str] = DEFAULT_LEVEL) -> logging.Logger:
    """Send ``billable`` log records to the current stderr at ``level``.

    Calling it again replaces the handler installed by the previous call,
    so there is always exactly one.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger("billable")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if getattr(handler, "_billable", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._billable = True
    logger.addHandler(handler)
    return logger
