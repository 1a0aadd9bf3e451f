"""Configuration helpers for the campaign integrity tooling."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
LOG_LEVEL_VARIABLE = "CAMPAIGNGRAPH_LOG_LEVEL"
SNAPSHOT_PATH_VARIABLE = "CAMPAIGNGRAPH_SNAPSHOT_PATH"


def _read_variable(source: Mapping[str, str], name: str) -> str | None:
    value = source.get(name)
    if value is None:
        return None
    return value.strip() or None


def normalise_log_level(value: str | None, *, default: str = "WARNING") -> str:
    """Return ``value`` as an upper-case standard logging level name.

    Raises:
        ValueError: If ``value`` is not a recognised level.
    """

    if value is None or not value.strip():
        return default

    level = value.strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(
            f"Log level must be one of {', '.join(LOG_LEVELS)}; got '{value.strip()}'."
        )
    return level


@dataclass(frozen=True)
class EngineSettings:
    """Log level and default snapshot location for command-line runs.

    Blank variables count as unset. ``snapshot_path`` expands a leading ``~``.
    """

    log_level: str = "WARNING"
    snapshot_path: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineSettings":
        """Read ``CAMPAIGNGRAPH_*`` variables from ``environ`` or the process.

        Raises:
            ValueError: If the log level variable names an unknown level.
        """

        source = os.environ if environ is None else environ
        snapshot_path = _read_variable(source, SNAPSHOT_PATH_VARIABLE)

        return cls(
            log_level=normalise_log_level(_read_variable(source, LOG_LEVEL_VARIABLE)),
            snapshot_path=Path(snapshot_path).expanduser() if snapshot_path else None,
        )


__all__ = [
    "EngineSettings",
    "LOG_LEVELS",
    "LOG_LEVEL_VARIABLE",
    "SNAPSHOT_PATH_VARIABLE",
    "normalise_log_level",
]
