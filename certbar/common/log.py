"""Logger factory for the certbar namespace."""

import logging

from certbar.common import config

ROOT_LOGGER = "certbar"


def resolve_level(name: str) -> int:
    """Numeric level for a level name; unknown names give WARNING."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.WARNING


logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())
logging.getLogger(ROOT_LOGGER).setLevel(resolve_level(config.LOG_LEVEL))


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the certbar namespace."""
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
