"""Runtime settings for wortschatz."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

DEFAULT_DB_PATH = Path.home() / ".wortschatz.db"
DEFAULT_BASE_URL = "https://www.dwds.de"
DEFAULT_LOOKUP_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "wortschatz/0.1 (+https://www.dwds.de)"

_ENV_PREFIX = "WORTSCHATZ_"


@dataclass(frozen=True)
class Settings:
    """Where entries are stored and how the dictionary source is reached."""

    db_path: str | Path = field(default=DEFAULT_DB_PATH)
    base_url: str = DEFAULT_BASE_URL
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from ``WORTSCHATZ_*`` environment variables.

        Unset variables keep their defaults.  A timeout that is not a
        positive number raises :class:`ValueError`.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        if env.get(f"{_ENV_PREFIX}DB"):
            settings = replace(settings, db_path=env[f"{_ENV_PREFIX}DB"])
        if env.get(f"{_ENV_PREFIX}BASE_URL"):
            settings = replace(
                settings, base_url=env[f"{_ENV_PREFIX}BASE_URL"].rstrip("/")
            )
        if env.get(f"{_ENV_PREFIX}TIMEOUT"):
            settings = replace(
                settings,
                lookup_timeout=parse_timeout(env[f"{_ENV_PREFIX}TIMEOUT"]),
            )
        if env.get(f"{_ENV_PREFIX}USER_AGENT"):
            settings = replace(
                settings, user_agent=env[f"{_ENV_PREFIX}USER_AGENT"]
            )
        return settings


def parse_timeout(value: str | float) -> float:
    """Parse a lookup timeout in seconds."""
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid timeout: {value!r}") from e
    if timeout <= 0:
        raise ValueError(f"Timeout must be positive: {value!r}")
    return timeout
