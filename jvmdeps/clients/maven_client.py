"""
jvmdeps Repository
Introductory remarks: This module is part of the jvmdeps codebase.

HTTP client for Maven-layout package repositories.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, cast

import requests  # type: ignore[import]

from jvmdeps.clients.base_client import BaseClient
from jvmdeps.config import (DEFAULT_HTTP_TIMEOUT, DEFAULT_MAX_RETRIES,
                            DEFAULT_RATE_LIMIT, DEFAULT_REPOSITORIES,
                            DEFAULT_RETRY_BACKOFF_SECONDS, USER_AGENT)
from jvmdeps.errors import NotFoundError, TransportError
from jvmdeps.models.coordinate import Coordinate
from jvmdeps.net.rate_limiter import RateLimiter


class _SessionWithGet(Protocol):
    def get(
        self,
        url: str,
        timeout: int,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any: ...


class _NotInRepository(Exception):
    """The repository answered 404 for the requested path."""


class _ServerError(Exception):
    """The repository answered with a retryable status code."""


class _UnexpectedStatus(Exception):
    """The repository answered with a status that retrying will not fix."""


_RETRYABLE = (requests.ConnectionError, requests.Timeout, _ServerError)


class MavenClient(BaseClient[str]):
    """Download descriptor documents from one or more repositories.

    Repositories are tried in order. A coordinate is reported missing only
    when every repository answers 404; otherwise the last transport problem
    is raised once retries are exhausted.
    """

    def __init__(
        self,
        repositories: Sequence[str] = DEFAULT_REPOSITORIES,
        *,
        timeout: int = DEFAULT_HTTP_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[_SessionWithGet] = None,
        sleep_fn: Optional[Callable[[float], None]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not repositories:
            raise ValueError("At least one repository URL is required.")
        limiter = rate_limiter or RateLimiter.per_second(DEFAULT_RATE_LIMIT)
        super().__init__(
            limiter,
            max_retries=max_retries,
            backoff_seconds=backoff_seconds,
            sleep_fn=sleep_fn,
            logger=logger,
        )
        self._repositories = tuple(url.rstrip("/") for url in repositories)
        self._timeout = timeout
        self._session: _SessionWithGet = cast(
            _SessionWithGet, session or requests.Session()
        )

    @property
    def repositories(self) -> Sequence[str]:
        return self._repositories

    @staticmethod
    def pom_url(repository: str, coordinate: Coordinate) -> str:
        return (
            f"{repository.rstrip('/')}/{coordinate.base_path()}/"
            f"{coordinate.pom_file_name()}"
        )

    def fetch_pom(self, coordinate: Coordinate) -> str:
        """Return the descriptor text of ``coordinate``."""
        last_error: Optional[BaseException] = None
        for repository in self._repositories:
            url = self.pom_url(repository, coordinate)
            try:
                return self._execute_with_retries(
                    lambda: self._get_text(url),
                    retry_on=_RETRYABLE,
                    name=f"maven.pom({coordinate})",
                )
            except _NotInRepository:
                self._logger.debug("%s not found in %s", coordinate, repository)
            except (
                _ServerError,
                _UnexpectedStatus,
                requests.RequestException,
            ) as error:
                self._logger.warning(
                    "Fetching %s from %s failed: %s", coordinate, repository, error
                )
                last_error = error

        if last_error is not None:
            raise TransportError(
                f"Could not download descriptor: {last_error}",
                coordinate=coordinate,
            ) from last_error
        raise NotFoundError(
            f"No descriptor in {len(self._repositories)} repositories",
            coordinate=coordinate,
        )

    def _get_text(self, url: str) -> str:
        response = self._session.get(
            url,
            timeout=self._timeout,
            headers={"User-Agent": USER_AGENT},
        )
        status = response.status_code
        if status == 200:
            return response.text
        if status == 404:
            raise _NotInRepository(url)
        if status == 429 or status >= 500:
            raise _ServerError(f"HTTP {status} for {url}")
        raise _UnexpectedStatus(f"HTTP {status} for {url}")
