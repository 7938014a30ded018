"""
utils/logger.py
---------------
Logging setup for the storage layer.

Modules call `get_logger(__name__)`; the first call installs one stdout
handler on the root logger. `configure_logging()` can be called again to
change the level (e.g. from a script) without stacking handlers.
"""

import logging
import sys
from typing import Optional

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None) -> logging.Handler:
    """
    Install the stdout handler once and set the root level.

    Args:
        level: Level name such as ``"DEBUG"``. Defaults to LOG_LEVEL.
            Unknown names fall back to INFO.

    Returns:
        The handler owned by this module.
    """
    global _handler
    root = logging.getLogger()
    if _handler is None:
        _handler = logging.StreamHandler(sys.stdout)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(_handler)
    value = getattr(logging, (level or LOG_LEVEL).upper(), None)
    root.setLevel(value if isinstance(value, int) else logging.INFO)
    return _handler


def get_logger(name: str) -> logging.Logger:
    """Named logger; configures logging on first use."""
    if _handler is None:
        configure_logging()
    return logging.getLogger(name)
