"""Package descriptor models (raw as fetched, and merged)."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Mapping, Optional, Tuple

from .coordinate import DEFAULT_TYPE, Coordinate, Exclusion


def _freeze(mapping: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class DependencyDeclaration:
    """One ``<dependency>`` entry as declared in a descriptor.

    Fields stay strings until the descriptor is merged and interpolated;
    ``version`` may be ``None`` when dependency management supplies it.
    """

    group: str
    artifact: str
    version: Optional[str] = None
    scope: Optional[str] = None
    classifier: Optional[str] = None
    type: Optional[str] = None
    optional: bool = False
    exclusions: FrozenSet[Exclusion] = frozenset()

    @property
    def group_artifact(self) -> str:
        return f"{self.group}:{self.artifact}"

    @property
    def management_key(self) -> Tuple[str, str, str, str]:
        return (
            self.group,
            self.artifact,
            self.type or DEFAULT_TYPE,
            self.classifier or "",
        )

    def to_coordinate(self) -> Coordinate:
        if not self.version:
            raise ValueError(f"{self.group_artifact} has no version")
        return Coordinate(
            group=self.group,
            artifact=self.artifact,
            version=self.version,
            classifier=self.classifier or None,
            type=self.type or DEFAULT_TYPE,
        )


@dataclass(frozen=True)
class ManagedDependency:
    """A ``dependencyManagement`` entry: version/scope defaults by identity."""

    group: str
    artifact: str
    version: Optional[str] = None
    scope: Optional[str] = None
    classifier: Optional[str] = None
    type: Optional[str] = None
    exclusions: FrozenSet[Exclusion] = frozenset()

    @property
    def management_key(self) -> Tuple[str, str, str, str]:
        return (
            self.group,
            self.artifact,
            self.type or DEFAULT_TYPE,
            self.classifier or "",
        )

    @property
    def is_import(self) -> bool:
        return (self.scope or "").strip() == "import" and (
            (self.type or "").strip() == "pom"
        )


@dataclass(frozen=True)
class RawDescriptor:
    """Descriptor document exactly as the metadata provider returned it."""

    coordinate: Coordinate
    ancestor_ref: Optional[Coordinate] = None
    properties: Mapping[str, str] = field(default_factory=dict)
    dependency_management: Tuple[ManagedDependency, ...] = ()
    dependencies: Tuple[DependencyDeclaration, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _freeze(self.properties))
        object.__setattr__(
            self, "dependency_management", tuple(self.dependency_management)
        )
        object.__setattr__(self, "dependencies", tuple(self.dependencies))


@dataclass(frozen=True)
class Descriptor:
    """Ancestry-merged, fully interpolated descriptor for one coordinate.

    ``ancestors`` lists the coordinates merged into this descriptor,
    nearest first. Every dependency carries a concrete version.
    ``template`` keeps the merged but uninterpolated declarations so that
    descendants can re-interpolate inherited entries with their own
    properties.
    """

    coordinate: Coordinate
    properties: Mapping[str, str] = field(default_factory=dict)
    dependency_management: Tuple[ManagedDependency, ...] = ()
    dependencies: Tuple[DependencyDeclaration, ...] = ()
    ancestors: Tuple[Coordinate, ...] = ()
    template: Optional[RawDescriptor] = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _freeze(self.properties))
        object.__setattr__(
            self, "dependency_management", tuple(self.dependency_management)
        )
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "ancestors", tuple(self.ancestors))
