"""Centralized logging configuration.

Usage:
    from app.logging_config import setup_logging
    setup_logging("INFO")   # Call once at startup
"""
import logging
import sys

# Loggers that are too chatty at the application level.
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "multipart")


def _parse_level(raw: str) -> int:
    level = logging.getLevelName(str(raw).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str = "INFO") -> None:
    """Set the root level and make sure at least one handler exists."""
    root = logging.getLogger()
    root.setLevel(_parse_level(level))

    # uvicorn usually adds a handler, but tests and scripts may not
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
