from __future__ import annotations

"""Helpers for loading environment configuration."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple, Union

from jvmdeps.config import (DEFAULT_HTTP_TIMEOUT, DEFAULT_MAX_RETRIES,
                            DEFAULT_MAX_WORKERS, DEFAULT_RATE_LIMIT,
                            DEFAULT_REPOSITORIES)

_ENV_LOADED = False

_LOGGER = logging.getLogger(__name__)


def load_dotenv(dotenv_path: Union[str, Path] = ".env") -> None:
    """Load environment variables from a simple ``.env`` file if present."""
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    path = Path(dotenv_path)
    if path.exists():
        for line in path.read_text().splitlines():
            parsed = _parse_line(line)
            if parsed:
                key, value = parsed
                os.environ.setdefault(key, value)

    _ENV_LOADED = True


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    if "=" not in stripped:
        return None

    key, value = stripped.split("=", 1)
    return (key.strip(), value.strip())


def _truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    lowered = value.strip().lower()
    return lowered in {"1", "true", "yes", "on"}


def _read_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        _LOGGER.warning(
            "Ignoring invalid integer %s=%r; using %d", name, raw, default
        )
        return default


def _read_list(environ: Mapping[str, str], name: str) -> Tuple[str, ...]:
    raw = environ.get(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class ResolverSettings:
    """Runtime settings for a resolution run and its repository client."""

    max_workers: int = DEFAULT_MAX_WORKERS
    repositories: Tuple[str, ...] = DEFAULT_REPOSITORIES
    cache_dir: Optional[Path] = None
    http_timeout: int = DEFAULT_HTTP_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    rate_limit: int = DEFAULT_RATE_LIMIT
    offline: bool = False

    def __post_init__(self) -> None:
        if self.max_workers <= 0:
            raise ValueError("JVMDEPS_MAX_WORKERS must be positive.")
        if not self.repositories and not self.offline:
            raise ValueError("At least one repository URL is required.")

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ResolverSettings":
        """Build settings from ``JVMDEPS_*`` variables (and ``.env``)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        cache_raw = environ.get("JVMDEPS_CACHE_DIR", "").strip()
        return cls(
            max_workers=_read_int(
                environ, "JVMDEPS_MAX_WORKERS", DEFAULT_MAX_WORKERS
            ),
            repositories=(
                _read_list(environ, "JVMDEPS_REPOSITORIES")
                or DEFAULT_REPOSITORIES
            ),
            cache_dir=Path(cache_raw).expanduser() if cache_raw else None,
            http_timeout=_read_int(
                environ, "JVMDEPS_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT
            ),
            max_retries=max(
                0,
                _read_int(environ, "JVMDEPS_MAX_RETRIES", DEFAULT_MAX_RETRIES),
            ),
            rate_limit=max(
                1, _read_int(environ, "JVMDEPS_RATE_LIMIT", DEFAULT_RATE_LIMIT)
            ),
            offline=_truthy(environ.get("JVMDEPS_OFFLINE")),
        )
