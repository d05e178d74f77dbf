"""Concurrent discovery of the transitive dependency graph."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from typing import (Dict, FrozenSet, Iterable, Iterator, List, Optional,
                    Sequence, Set, Tuple, Union)

from jvmdeps.config import DEFAULT_MAX_WORKERS
from jvmdeps.errors import ResolutionError
from jvmdeps.models.coordinate import Coordinate, Exclusion
from jvmdeps.models.descriptor import DependencyDeclaration, ManagedDependency
from jvmdeps.models.graph import GraphNode, ResolutionFailure, RootRequest
from jvmdeps.models.scope import Scope, propagate

from .cache import DescriptorCache

_LOGGER = logging.getLogger(__name__)

RootLike = Union[RootRequest, Coordinate, str]


@dataclass(frozen=True)
class _WorkItem:
    coordinate: Coordinate
    scope: Scope
    depth: int
    path: Tuple[Coordinate, ...]
    ordinal: Tuple[int, ...]
    exclusions: FrozenSet[Exclusion]

    @property
    def dedup_key(self) -> Tuple[Coordinate, Scope, FrozenSet[Exclusion]]:
        return (self.coordinate, self.scope, self.exclusions)


@dataclass(frozen=True)
class _UnitResult:
    node: GraphNode
    children: Tuple[_WorkItem, ...]
    error: Optional[ResolutionError] = None


class GraphExplorer:
    """Explore the graph reachable from a set of roots.

    Units of one depth run concurrently on a bounded thread pool; the next
    depth is scheduled once the current one has drained, after ordering the
    discovered items by declaration ordinal. Each distinct
    ``(coordinate, scope, exclusions)`` item is explored once.

    The level barrier is deliberate: which occurrence of a shared item gets
    expanded must not depend on fetch timing. The cost is that one slow
    fetch delays scheduling of every child discovered at that depth; fetches
    within a level still overlap up to ``max_workers``.
    """

    def __init__(
        self,
        cache: DescriptorCache,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        exclusions: Iterable[Exclusion] = (),
        managed: Sequence[ManagedDependency] = (),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive.")
        self._cache = cache
        self._max_workers = max_workers
        self._exclusions = frozenset(exclusions)
        self._managed = tuple(managed)
        self._logger = logger or _LOGGER

    def explore(
        self,
        roots: Sequence[RootLike],
        root_scope: Scope = Scope.COMPILE,
    ) -> Iterator[GraphNode]:
        """Yield one :class:`GraphNode` per discovered item.

        Items already explored along another path are reported once more
        as unexpanded nodes so that assembly sees every path.

        A failure resolving a root cancels the run by raising its error;
        failures further down are reported on the node and exploration of
        sibling branches continues.
        """
        level = self._seed(roots, root_scope)
        seen: Set[Tuple[Coordinate, Scope, FrozenSet[Exclusion]]] = {
            item.dedup_key for item in level
        }

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="jvmdeps-explore",
        ) as executor:
            while level:
                self._logger.debug(
                    "Exploring %d item(s) at depth %d",
                    len(level),
                    level[0].depth,
                )
                futures: Dict["Future[_UnitResult]", _WorkItem] = {
                    executor.submit(self._explore_one, item): item
                    for item in level
                }
                discovered: List[_WorkItem] = []
                for future in as_completed(futures):
                    result = future.result()
                    if result.error is not None and result.node.depth == 0:
                        for pending in futures:
                            pending.cancel()
                        self._logger.error(
                            "Root %s could not be resolved: %s",
                            result.node.coordinate,
                            result.error.message,
                        )
                        raise result.error
                    yield result.node
                    discovered.extend(result.children)
                level, repeats = self._next_level(discovered, seen)
                for item in repeats:
                    yield _repeat_node(item)

    def _seed(
        self, roots: Sequence[RootLike], root_scope: Scope
    ) -> List[_WorkItem]:
        items: List[_WorkItem] = []
        seen_keys = set()
        for index, root in enumerate(roots):
            request = _as_root_request(root, root_scope)
            if request.coordinate.key in seen_keys:
                self._logger.debug(
                    "Skipping duplicate root %s", request.coordinate
                )
                continue
            seen_keys.add(request.coordinate.key)
            items.append(
                _WorkItem(
                    coordinate=request.coordinate,
                    scope=request.scope,
                    depth=0,
                    path=(request.coordinate,),
                    ordinal=(index,),
                    exclusions=self._exclusions | request.exclusions,
                )
            )
        return items

    @staticmethod
    def _next_level(
        discovered: List[_WorkItem],
        seen: Set[Tuple[Coordinate, Scope, FrozenSet[Exclusion]]],
    ) -> Tuple[List[_WorkItem], List[_WorkItem]]:
        level: List[_WorkItem] = []
        repeats: List[_WorkItem] = []
        for item in sorted(discovered, key=lambda entry: entry.ordinal):
            if item.dedup_key in seen:
                repeats.append(item)
                continue
            seen.add(item.dedup_key)
            level.append(item)
        return level, repeats

    def _explore_one(self, item: _WorkItem) -> _UnitResult:
        try:
            descriptor = self._cache.resolve(item.coordinate)
        except ResolutionError as error:
            failure = ResolutionFailure(
                coordinate=item.coordinate,
                path=item.path,
                kind=error.kind,
                message=error.message,
            )
            self._logger.warning("Branch failed: %s", failure.describe())
            node = GraphNode(
                coordinate=item.coordinate,
                descriptor=None,
                requested_scope=item.scope,
                depth=item.depth,
                path=item.path,
                ordinal=item.ordinal,
                exclusions=item.exclusions,
                failure=failure,
            )
            return _UnitResult(node=node, children=(), error=error)

        children: List[_WorkItem] = []
        on_path = {coordinate.key for coordinate in item.path}
        for index, dependency in enumerate(descriptor.dependencies):
            child = self._child(item, index, dependency, on_path)
            if child is not None:
                children.append(child)

        node = GraphNode(
            coordinate=item.coordinate,
            descriptor=descriptor,
            requested_scope=item.scope,
            depth=item.depth,
            path=item.path,
            ordinal=item.ordinal,
            exclusions=item.exclusions,
        )
        return _UnitResult(node=node, children=tuple(children))

    def _child(
        self,
        item: _WorkItem,
        index: int,
        dependency: DependencyDeclaration,
        on_path: Set[object],
    ) -> Optional[_WorkItem]:
        if dependency.optional:
            self._logger.debug(
                "Skipping optional %s of %s",
                dependency.group_artifact,
                item.coordinate,
            )
            return None

        dependency = self._apply_managed(dependency)
        effective = propagate(item.scope, Scope.parse(dependency.scope))
        if effective is None:
            return None

        coordinate = dependency.to_coordinate()
        if any(exclusion.matches(coordinate) for exclusion in item.exclusions):
            self._logger.debug(
                "Excluded %s below %s", coordinate, item.coordinate
            )
            return None
        if coordinate.key in on_path:
            self._logger.debug(
                "Cycle guard skips %s below %s", coordinate, item.coordinate
            )
            return None

        return _WorkItem(
            coordinate=coordinate,
            scope=effective,
            depth=item.depth + 1,
            path=item.path + (coordinate,),
            ordinal=item.ordinal + (index,),
            exclusions=item.exclusions | dependency.exclusions,
        )

    def _apply_managed(
        self, dependency: DependencyDeclaration
    ) -> DependencyDeclaration:
        for entry in self._managed:
            if entry.management_key != dependency.management_key:
                continue
            return replace(
                dependency,
                version=entry.version or dependency.version,
                scope=entry.scope or dependency.scope,
            )
        return dependency


def _as_root_request(root: RootLike, root_scope: Scope) -> RootRequest:
    if isinstance(root, RootRequest):
        return root
    if isinstance(root, Coordinate):
        return RootRequest(root, root_scope)
    request = RootRequest.parse(root)
    if "@" not in root:
        request = replace(request, scope=root_scope)
    return request


def _repeat_node(item: _WorkItem) -> GraphNode:
    return GraphNode(
        coordinate=item.coordinate,
        descriptor=None,
        requested_scope=item.scope,
        depth=item.depth,
        path=item.path,
        ordinal=item.ordinal,
        exclusions=item.exclusions,
        expanded=False,
    )
