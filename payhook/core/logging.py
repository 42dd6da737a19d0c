"""Logging setup."""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

STANDARD_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
JSON_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def setup_logging(level: str = "INFO", log_format: str = "standard") -> None:
    """Configure the root logger with a single stdout handler.

    Args:
        level: Log level name
        log_format: "json" for JSON lines, anything else for plain text
    """
    handler = logging.StreamHandler(sys.stdout)
    if log_format == "json":
        handler.setFormatter(
            JsonFormatter(JSON_FORMAT, rename_fields={"levelname": "level", "name": "logger"})
        )
    else:
        handler.setFormatter(logging.Formatter(STANDARD_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level.upper())

    # uvicorn access logs duplicate our request logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; handlers come from setup_logging."""
    return logging.getLogger(name)
