"""
Logging setup.

Call setup_logging() once at startup; modules log through
logging.getLogger(__name__).
"""

import logging
import sys

from career_api.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str = None) -> None:
    """Configure the root logger from settings (idempotent)."""
    global _configured
    if _configured:
        return

    level = (level or get_settings().log_level).upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)

    # pymongo is chatty at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    _configured = True
