"""Runtime settings for czytaj, read from environment variables."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .fetcher import DEFAULT_TIMEOUT

ENV_PREFIX = "CZYTAJ_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Settings shared by the CLI and other callers.

    ``show_images`` and ``show_excerpts`` only decide what gets displayed;
    articles always carry both fields.
    """

    db_path: Optional[Path] = None
    fetch_timeout: float = DEFAULT_TIMEOUT
    show_images: bool = True
    show_excerpts: bool = True
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from CZYTAJ_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ

        Returns:
            Settings with defaults for unset variables

        Raises:
            ValueError: If a variable holds a value that cannot be parsed
        """
        env = os.environ if environ is None else environ
        settings = cls()

        db_path = env.get(ENV_PREFIX + "DB_PATH")
        if db_path:
            settings.db_path = Path(db_path).expanduser()

        timeout = env.get(ENV_PREFIX + "FETCH_TIMEOUT")
        if timeout:
            try:
                settings.fetch_timeout = float(timeout)
            except ValueError:
                raise ValueError(f"{ENV_PREFIX}FETCH_TIMEOUT must be a number, got {timeout!r}")
            if settings.fetch_timeout <= 0:
                raise ValueError(f"{ENV_PREFIX}FETCH_TIMEOUT must be positive, got {timeout!r}")

        settings.show_images = _parse_bool(env, "SHOW_IMAGES", settings.show_images)
        settings.show_excerpts = _parse_bool(env, "SHOW_EXCERPTS", settings.show_excerpts)

        log_level = env.get(ENV_PREFIX + "LOG_LEVEL")
        if log_level:
            level = log_level.strip().upper()
            if not isinstance(logging.getLevelName(level), int):
                raise ValueError(f"{ENV_PREFIX}LOG_LEVEL is not a logging level, got {log_level!r}")
            settings.log_level = level

        return settings


def _parse_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(ENV_PREFIX + name)
    if value is None or not value.strip():
        return default

    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{ENV_PREFIX}{name} must be a boolean, got {value!r}")
