"""
Logging utility.

`setup_logging` is called once at process start; modules grab their
logger with `get_logger(__name__)`.
"""

import logging
import sys

from app.config import Config

_configured = False


def setup_logging(config: Config) -> None:
    """
    Configure the root logger from config.

    Args:
        config: Application configuration (LOG_LEVEL / LOG_FORMAT)
    """
    global _configured
    if _configured:
        return

    root = logging.getLogger()
    root.setLevel(getattr(logging, config.LOG_LEVEL.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    root.addHandler(handler)

    # aiosmtplib is chatty at DEBUG
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
