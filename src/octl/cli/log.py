"""Logging setup for the ``-v/--verbose`` flag."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Chatty SDK loggers; request/response dumps only in verbose mode.
SDK_LOGGERS: tuple[str, ...] = ("azure", "msal", "httpx", "httpcore", "kiota")

_handler: logging.Handler | None = None


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr; DEBUG when *verbose*, else WARNING.

    Safe to call more than once; only octl's own handler is replaced.
    """
    global _handler
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(_handler)
    root.setLevel(level)

    for name in SDK_LOGGERS:
        logging.getLogger(name).setLevel(level)
