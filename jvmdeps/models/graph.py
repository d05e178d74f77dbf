"""Exploration output and the final resolved graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from .coordinate import ArtifactKey, Coordinate, Exclusion
from .descriptor import Descriptor
from .scope import CLASSPATH_ORDER, Classpath, Scope


@dataclass(frozen=True)
class RootRequest:
    """A root coordinate together with the scope it is requested at."""

    coordinate: Coordinate
    scope: Scope = Scope.COMPILE
    exclusions: FrozenSet[Exclusion] = frozenset()

    @classmethod
    def parse(cls, notation: str) -> "RootRequest":
        """Parse ``group:artifact:version[@scope]``."""
        coordinate_part, _, scope_part = notation.strip().partition("@")
        scope = Scope.parse(scope_part) if scope_part else Scope.COMPILE
        return cls(Coordinate.parse(coordinate_part), scope)


@dataclass(frozen=True)
class ResolutionFailure:
    """Failure marker for one branch of the graph."""

    coordinate: Coordinate
    path: Tuple[Coordinate, ...]
    kind: str
    message: str

    def describe(self) -> str:
        trail = " -> ".join(str(item) for item in self.path)
        return f"[{self.kind}] {self.coordinate}: {self.message} (via {trail})"


@dataclass(frozen=True, eq=False)
class GraphNode:
    """One exploration report.

    ``ordinal`` holds the declaration index of every hop along ``path``
    (the root's index first), so ``(depth, ordinal)`` orders nodes the way
    a breadth-first walk in declaration order would discover them.
    Nodes with ``expanded`` unset repeat an item already explored
    elsewhere; they carry no descriptor and their children are reported
    under the first occurrence.
    """

    coordinate: Coordinate
    descriptor: Optional[Descriptor]
    requested_scope: Scope
    depth: int
    path: Tuple[Coordinate, ...]
    ordinal: Tuple[int, ...]
    exclusions: FrozenSet[Exclusion] = frozenset()
    failure: Optional[ResolutionFailure] = None
    expanded: bool = True

    @property
    def key(self) -> ArtifactKey:
        return self.coordinate.key

    @property
    def failed(self) -> bool:
        return self.failure is not None

    @property
    def discovery_key(self) -> Tuple[int, Tuple[int, ...]]:
        return (self.depth, self.ordinal)


@dataclass(frozen=True)
class ResolvedEntry:
    """A selected coordinate with its aggregated scope."""

    coordinate: Coordinate
    scope: Scope

    @property
    def version(self) -> str:
        return self.coordinate.version


@dataclass(frozen=True)
class ResolvedGraph:
    """Per-classpath ordered, deduplicated dependency sequences."""

    entries: Tuple[ResolvedEntry, ...] = ()
    classpaths: Dict[Classpath, Tuple[ResolvedEntry, ...]] = field(
        default_factory=dict
    )

    @classmethod
    def from_entries(cls, entries: Sequence[ResolvedEntry]) -> "ResolvedGraph":
        buckets: Dict[Classpath, List[ResolvedEntry]] = {
            classpath: [] for classpath in CLASSPATH_ORDER
        }
        for entry in entries:
            for classpath in CLASSPATH_ORDER:
                if classpath in entry.scope.classpaths:
                    buckets[classpath].append(entry)
        return cls(
            entries=tuple(entries),
            classpaths={
                classpath: tuple(items) for classpath, items in buckets.items()
            },
        )

    def for_scope(self, classpath: Classpath) -> Tuple[ResolvedEntry, ...]:
        return self.classpaths.get(Classpath(classpath), ())

    def coordinates(self, classpath: Classpath) -> List[Coordinate]:
        return [entry.coordinate for entry in self.for_scope(classpath)]

    def classpath(self, classpath: Classpath) -> List[str]:
        return [
            entry.coordinate.classpath_entry()
            for entry in self.for_scope(classpath)
        ]

    def find(self, group: str, artifact: str) -> Optional[ResolvedEntry]:
        for entry in self.entries:
            coordinate = entry.coordinate
            if coordinate.group == group and coordinate.artifact == artifact:
                return entry
        return None


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of one run: the (possibly partial) graph plus branch failures."""

    graph: ResolvedGraph
    failures: Tuple[ResolutionFailure, ...] = ()
    nodes: Tuple[GraphNode, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.failures
