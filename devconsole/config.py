"""Environment-driven settings for a console session."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def _positive_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(key)
    if raw:
        try:
            parsed = int(raw)
            if parsed > 0:
                return parsed
        except ValueError:
            pass
    return default


@dataclass
class TerminalConfig:
    buffer_size: int = 512
    history_size: int = 256
    capture_logs: bool = True
    capture_logger: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TerminalConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        capture = env.get("DEVCONSOLE_CAPTURE_LOGS")
        return cls(
            buffer_size=_positive_int(env, "DEVCONSOLE_BUFFER_SIZE", defaults.buffer_size),
            history_size=_positive_int(env, "DEVCONSOLE_HISTORY_SIZE", defaults.history_size),
            capture_logs=defaults.capture_logs if capture is None else capture.strip().lower() not in _FALSE_VALUES,
            capture_logger=env.get("DEVCONSOLE_CAPTURE_LOGGER") or defaults.capture_logger,
        )


__all__ = ["TerminalConfig"]
