"""
jvmdeps Repository
Introductory remarks: This module is part of the jvmdeps codebase.

Metadata provider backed by Maven-layout HTTP repositories.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Optional, Union

from jvmdeps.clients.maven_client import MavenClient
from jvmdeps.errors import NotFoundError
from jvmdeps.models.coordinate import Coordinate
from jvmdeps.models.descriptor import RawDescriptor
from jvmdeps.net.rate_limiter import RateLimiter
from jvmdeps.pom import parse_pom
from jvmdeps.utils.env import ResolverSettings

_LOGGER = logging.getLogger(__name__)


class RepositoryMetadataProvider:
    """Fetch POM documents over HTTP and parse them.

    With ``cache_dir`` set, downloaded documents are kept under the
    repository layout (``<cache_dir>/<group path>/<artifact>/<version>/``)
    and read from there by later runs. ``offline`` restricts lookups to
    that directory.
    """

    def __init__(
        self,
        client: Optional[MavenClient] = None,
        *,
        cache_dir: Optional[Union[str, Path]] = None,
        offline: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if offline and cache_dir is None:
            raise ValueError("Offline mode requires a cache directory.")
        self._client = client
        self._cache_dir = Path(cache_dir) if cache_dir is not None else None
        self._offline = offline
        self._logger = logger or _LOGGER

    @classmethod
    def from_settings(
        cls, settings: ResolverSettings
    ) -> "RepositoryMetadataProvider":
        client = None
        if not settings.offline:
            client = MavenClient(
                settings.repositories,
                timeout=settings.http_timeout,
                max_retries=settings.max_retries,
                rate_limiter=RateLimiter.per_second(settings.rate_limit),
            )
        return cls(
            client,
            cache_dir=settings.cache_dir,
            offline=settings.offline,
        )

    def fetch(self, coordinate: Coordinate) -> RawDescriptor:
        key = coordinate.pom()
        text = self._read_cached(key)
        if text is None:
            if self._offline or self._client is None:
                raise NotFoundError(
                    "Descriptor is not in the local cache", coordinate=key
                )
            text = self._client.fetch_pom(key)
            self._write_cached(key, text)

        raw = parse_pom(text, source=key)
        if raw.coordinate != key:
            self._logger.debug(
                "Descriptor for %s declares itself as %s", key, raw.coordinate
            )
        return replace(raw, coordinate=key)

    def cache_path(self, coordinate: Coordinate) -> Optional[Path]:
        if self._cache_dir is None:
            return None
        return (
            self._cache_dir / coordinate.base_path() / coordinate.pom_file_name()
        )

    def _read_cached(self, coordinate: Coordinate) -> Optional[str]:
        path = self.cache_path(coordinate)
        if path is None or not path.is_file():
            return None
        self._logger.debug("Reading cached descriptor %s", path)
        return path.read_text(encoding="utf-8")

    def _write_cached(self, coordinate: Coordinate, text: str) -> None:
        path = self.cache_path(coordinate)
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write then rename so concurrent runs never read a partial file.
        handle, temp_name = tempfile.mkstemp(dir=path.parent, suffix=".part")
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                stream.write(text)
            os.replace(temp_name, path)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
