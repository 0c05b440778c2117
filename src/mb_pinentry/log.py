"""Logging configuration for mb-pinentry.

The Assuan client logs every line it exchanges with pinentry at DEBUG level;
PIN payloads are redacted before they reach any handler.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_path: Path, *, debug: bool = False) -> None:
    """Configure the package logger with a rotating file handler.

    Idempotent: skips if a handler is already attached.

    Args:
        log_path: Log file, rotated at 1 MB.
        debug: Log the Assuan exchange and echo it to stderr.

    """
    root = logging.getLogger("mb_pinentry")
    if root.handlers:
        return

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)
    handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    if debug:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    root.setLevel(logging.DEBUG if debug else logging.INFO)
