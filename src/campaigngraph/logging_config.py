"""Logging setup for command-line use of the integrity engine."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_HANDLER_NAME = "campaigngraph"


def configure_logging(level: str = "WARNING", *, stream: TextIO | None = None) -> None:
    """Send log records to ``stream`` (stderr by default) at ``level``.

    Library modules only create loggers; this is called by the CLI so that
    embedding applications keep control of their own handlers.
    """

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.set_name(_HANDLER_NAME)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
    # Replace only the handler installed by a previous call.
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)


__all__ = ["LOG_FORMAT", "configure_logging"]
