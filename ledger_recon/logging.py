"""
Logging setup.

Console logging for the API process. Call setup_logging() once at
startup; modules then use logging.getLogger(__name__).
"""

import logging
import sys


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Libraries that log every statement or request at INFO
NOISY_LOGGERS = [
    "sqlalchemy.engine",
    "httpx",
    "httpcore",
    "multipart",
]


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    """
    Configure the root logger with a single console handler.

    Safe to call more than once: an existing handler installed by
    a previous call is replaced rather than duplicated.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_ledger_recon", False):
            root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    handler._ledger_recon = True
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
