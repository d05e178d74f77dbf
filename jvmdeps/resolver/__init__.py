"""Dependency resolution runs.

:class:`DependencyResolver` wires one run together: a fresh
:class:`DescriptorCache`, a :class:`GraphExplorer` draining the graph on a
bounded pool, and an :class:`Assembler` that mediates the collected nodes.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Optional, Sequence

from jvmdeps.config import DEFAULT_MAX_WORKERS
from jvmdeps.models.coordinate import Exclusion
from jvmdeps.models.descriptor import ManagedDependency
from jvmdeps.models.graph import ResolutionResult
from jvmdeps.models.scope import Scope
from jvmdeps.providers.base import MetadataProvider

from .assembler import Assembler
from .cache import DescriptorCache
from .explorer import GraphExplorer, RootLike

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "Assembler",
    "DependencyResolver",
    "DescriptorCache",
    "GraphExplorer",
]


class DependencyResolver:
    """Resolve root coordinates into a mediated, per-classpath graph."""

    def __init__(
        self,
        provider: MetadataProvider,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        exclusions: Iterable[Exclusion] = (),
        managed: Sequence[ManagedDependency] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive.")
        self._provider = provider
        self._max_workers = max_workers
        self._exclusions = tuple(exclusions)
        self._managed = tuple(managed)
        self._component_logger = logger
        self._logger = logger or _LOGGER
        self._last_cache: Optional[DescriptorCache] = None

    @property
    def last_cache(self) -> Optional[DescriptorCache]:
        """Descriptor cache of the most recent run, for inspection."""
        return self._last_cache

    def resolve(
        self,
        roots: Sequence[RootLike],
        scope: Scope = Scope.COMPILE,
    ) -> ResolutionResult:
        """Run one resolution.

        Raises the root's :class:`~jvmdeps.errors.ResolutionError` when a
        root cannot be resolved; branch failures are returned on the
        result instead.
        """
        if not roots:
            raise ValueError("At least one root coordinate is required.")

        cache = DescriptorCache(self._provider, logger=self._component_logger)
        self._last_cache = cache
        explorer = GraphExplorer(
            cache,
            max_workers=self._max_workers,
            exclusions=self._exclusions,
            managed=self._managed,
            logger=self._component_logger,
        )
        assembler = Assembler(logger=self._component_logger)

        started_at = time.perf_counter()
        for node in explorer.explore(roots, scope):
            assembler.add(node)
        graph = assembler.assemble()
        elapsed_ms = (time.perf_counter() - started_at) * 1000.0

        failures = assembler.failures
        self._logger.info(
            "Resolved %d root(s) into %d entries in %.2f ms "
            "(%d descriptor fetches, %d branch failures)",
            len(roots),
            len(graph.entries),
            elapsed_ms,
            cache.fetch_count,
            len(failures),
        )
        return ResolutionResult(
            graph=graph,
            failures=failures,
            nodes=assembler.nodes,
        )
