"""Version mediation and scope aggregation over explored graph nodes."""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from jvmdeps.errors import ConflictError
from jvmdeps.models.coordinate import Coordinate, Exclusion
from jvmdeps.models.graph import (GraphNode, ResolutionFailure, ResolvedEntry,
                                  ResolvedGraph)
from jvmdeps.models.scope import Scope, aggregate

_LOGGER = logging.getLogger(__name__)

_Position = Tuple[int, Tuple[int, ...]]
_ItemKey = Tuple[Coordinate, Scope, FrozenSet[Exclusion]]


class Assembler:
    """Accumulate exploration reports and turn them into a ResolvedGraph.

    Mediation is nearest-wins. Assembly walks the reported graph from the
    roots in ``(depth, ordinal)`` order; for each ``group:artifact`` the
    first node reached selects the version. Only the children of a
    selected coordinate are walked, so dependencies of a losing version
    drop out. An unexpanded repeat node stands in for the item's first
    occurrence: its children are walked from the repeat's own position.
    Every reached node carrying the selected coordinate contributes its
    scope and the broadest scope wins.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or _LOGGER
        self._lock = threading.Lock()
        self._nodes: List[GraphNode] = []

    def add(self, node: GraphNode) -> None:
        with self._lock:
            self._nodes.append(node)

    @property
    def nodes(self) -> Tuple[GraphNode, ...]:
        with self._lock:
            return tuple(sorted(self._nodes, key=_discovery))

    @property
    def failures(self) -> Tuple[ResolutionFailure, ...]:
        return tuple(
            node.failure for node in self.nodes if node.failure is not None
        )

    def assemble(
        self, nodes: Optional[Iterable[GraphNode]] = None
    ) -> ResolvedGraph:
        """Return the mediated graph for ``nodes`` (default: added nodes)."""
        if nodes is None:
            ordered = list(self.nodes)
        else:
            ordered = sorted(nodes, key=_discovery)

        failed = {node.coordinate for node in ordered if node.failed}
        children: Dict[Tuple[int, ...], List[GraphNode]] = {}
        first_expanded: Dict[_ItemKey, GraphNode] = {}
        for node in ordered:
            if node.depth > 0:
                children.setdefault(node.ordinal[:-1], []).append(node)
            if node.expanded:
                first_expanded.setdefault(_item_key(node), node)

        counter = itertools.count()
        pending: List[Tuple[_Position, int, GraphNode]] = []
        for node in ordered:
            if node.depth == 0:
                heapq.heappush(
                    pending, (node.discovery_key, next(counter), node)
                )

        selected: Dict[str, Tuple[Coordinate, _Position]] = {}
        scopes: Dict[str, List[Scope]] = {}
        walked: Set[_ItemKey] = set()

        while pending:
            position, _, node = heapq.heappop(pending)
            identity = node.coordinate.group_artifact
            winner, winner_position = selected.setdefault(
                identity, (node.coordinate, position)
            )
            if winner != node.coordinate:
                if winner_position == position:
                    raise ConflictError(
                        f"Cannot choose between {winner} and "
                        f"{node.coordinate}",
                        coordinate=node.coordinate,
                        path=node.path,
                    )
                self._logger.debug(
                    "Mediation keeps %s over %s", winner, node.coordinate
                )
                continue

            scopes.setdefault(identity, []).append(node.requested_scope)
            item = _item_key(node)
            if item in walked:
                continue
            walked.add(item)

            # Children are reported under the item's first expansion.
            source = first_expanded.get(item, node)
            depth, ordinal = position
            for child in children.get(source.ordinal, ()):
                heapq.heappush(
                    pending,
                    (
                        (depth + 1, ordinal + child.ordinal[-1:]),
                        next(counter),
                        child,
                    ),
                )

        entries: List[ResolvedEntry] = []
        for identity, (winner, _) in selected.items():
            if winner in failed:
                continue
            entries.append(ResolvedEntry(winner, aggregate(scopes[identity])))

        self._logger.info(
            "Assembled %d entries from %d nodes (%d failed)",
            len(entries),
            len(ordered),
            len(failed),
        )
        return ResolvedGraph.from_entries(entries)


def _discovery(node: GraphNode) -> _Position:
    return node.discovery_key


def _item_key(node: GraphNode) -> _ItemKey:
    return (node.coordinate, node.requested_scope, node.exclusions)
