"""
Logging setup shared by the whole backend.
"""

import logging
import sys

from app.core.config import get_settings

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logger(name: str) -> logging.Logger:
    """Return a named logger writing to stdout at the configured level."""
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(handler)
    log.setLevel(get_settings().LOG_LEVEL.upper())
    return log


logger = setup_logger("projectdesk")
