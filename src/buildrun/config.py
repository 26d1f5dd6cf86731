"""Runtime configuration for runner and downloader."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_CACHE_DIR = Path(".buildrun") / "cache"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "buildrun/0.1"


@dataclass(slots=True)
class Settings:
    """Switches owned by the surrounding CLI layer.

    `debug` and `quiet` decide console verbosity, `offline` forbids any network
    access in the downloader. `max_workers=None` sizes the concurrent pool by
    the number of available CPUs.
    """

    debug: bool = False
    quiet: bool = False
    offline: bool = False
    cache_dir: Path = DEFAULT_CACHE_DIR
    max_workers: int | None = None
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls, cache_dir: Path | None = None) -> Settings:
        """Load settings from environment with defaults for local development."""

        max_workers_raw = os.getenv("BUILDRUN_MAX_WORKERS", "").strip()
        return cls(
            debug=_env_bool("BUILDRUN_DEBUG", default=False),
            quiet=_env_bool("BUILDRUN_QUIET", default=False),
            offline=_env_bool("BUILDRUN_OFFLINE", default=False),
            cache_dir=cache_dir or Path(os.getenv("BUILDRUN_CACHE_DIR", str(DEFAULT_CACHE_DIR))),
            max_workers=int(max_workers_raw) if max_workers_raw else None,
            request_timeout_seconds=float(
                os.getenv(
                    "BUILDRUN_REQUEST_TIMEOUT_SECONDS",
                    str(DEFAULT_REQUEST_TIMEOUT_SECONDS),
                ),
            ),
            user_agent=os.getenv("BUILDRUN_USER_AGENT", DEFAULT_USER_AGENT),
        )

    def validate(self) -> None:
        """Raise configuration error on values the components cannot work with."""

        if self.max_workers is not None and self.max_workers <= 0:
            raise ValueError("BUILDRUN_MAX_WORKERS must be > 0.")
        if self.request_timeout_seconds <= 0:
            raise ValueError("BUILDRUN_REQUEST_TIMEOUT_SECONDS must be > 0.")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
