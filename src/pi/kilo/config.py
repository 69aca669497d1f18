"""Runtime configuration for the viewer, read from ``KILO_*`` env vars."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

LOG_LEVELS = ("debug", "info", "warning", "error")

_DEFAULT_READ_TIMEOUT_MS = 100


@dataclass
class Config:
    """Viewer configuration.

    ``problems`` collects rejected environment values; they are logged by
    the entry point once logging has been set up.
    """

    read_timeout_ms: int = _DEFAULT_READ_TIMEOUT_MS
    write_log: str = ""
    log_file: str = ""
    log_level: str = "warning"
    problems: list[str] = field(default_factory=list, compare=False, repr=False)

    @property
    def vtime(self) -> int:
        """The read timeout as termios ``VTIME`` deciseconds (1..255)."""
        deciseconds = -(-self.read_timeout_ms // 100)
        return max(1, min(255, deciseconds))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        env = os.environ if environ is None else environ
        config = cls(
            write_log=env.get("KILO_WRITE_LOG", ""),
            log_file=env.get("KILO_LOG_FILE", ""),
        )

        timeout = env.get("KILO_READ_TIMEOUT_MS")
        if timeout:
            try:
                value = int(timeout)
            except ValueError:
                value = 0
            if value > 0:
                config.read_timeout_ms = value
            else:
                config.problems.append(f"Ignoring invalid KILO_READ_TIMEOUT_MS={timeout!r}")

        level = env.get("KILO_LOG_LEVEL")
        if level:
            if level.lower() in LOG_LEVELS:
                config.log_level = level.lower()
            else:
                config.problems.append(f"Ignoring unknown KILO_LOG_LEVEL={level!r}")

        return config
