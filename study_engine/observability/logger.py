"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; entry points call
`configure_logging` once to install a single stdout handler.

Dependencies: logging (stdlib)
System role: Centralized logging configuration
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "google", "grpc", "sqlalchemy.engine")


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Install one stdout handler on the root logger.

    Calling again replaces the handler rather than adding a second one.
    Provider and driver loggers are limited to WARNING.

    Args:
        level: Level name or number; unknown names mean INFO
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Named logger; handlers come from configure_logging."""
    return logging.getLogger(name)
