"""Package identity value types.

A :class:`Coordinate` names one published package version. Conflict
resolution works on :class:`ArtifactKey`, which drops the version so that
two versions of the same library collide.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_TYPE = "jar"
POM_TYPE = "pom"
WILDCARD = "*"


@dataclass(frozen=True)
class ArtifactKey:
    """Identity of a package regardless of its version."""

    group: str
    artifact: str
    classifier: Optional[str] = None
    type: str = DEFAULT_TYPE

    @property
    def group_artifact(self) -> str:
        return f"{self.group}:{self.artifact}"

    def __str__(self) -> str:
        parts = [self.group, self.artifact]
        if self.type != DEFAULT_TYPE or self.classifier:
            parts.append(self.type)
        if self.classifier:
            parts.append(self.classifier)
        return ":".join(parts)


@functools.total_ordering
@dataclass(frozen=True)
class Coordinate:
    """Immutable ``group:artifact:version`` coordinate.

    Instances are hashable and totally ordered by their string fields so
    that collections of coordinates iterate deterministically.
    """

    group: str
    artifact: str
    version: str
    classifier: Optional[str] = None
    type: str = DEFAULT_TYPE

    def __post_init__(self) -> None:
        if not self.group or not self.artifact:
            raise ValueError("Coordinate requires a group and an artifact")

    @classmethod
    def parse(cls, notation: str) -> "Coordinate":
        """Parse ``g:a:v``, ``g:a:type:v`` or ``g:a:type:classifier:v``."""
        parts = [part.strip() for part in notation.strip().split(":")]
        if any(not part for part in parts):
            raise ValueError(f"Invalid coordinate notation: {notation!r}")

        if len(parts) == 3:
            group, artifact, version = parts
            return cls(group, artifact, version)
        if len(parts) == 4:
            group, artifact, type_, version = parts
            return cls(group, artifact, version, type=type_)
        if len(parts) == 5:
            group, artifact, type_, classifier, version = parts
            return cls(
                group, artifact, version, classifier=classifier, type=type_
            )
        raise ValueError(f"Invalid coordinate notation: {notation!r}")

    @property
    def key(self) -> ArtifactKey:
        return ArtifactKey(
            group=self.group,
            artifact=self.artifact,
            classifier=self.classifier,
            type=self.type,
        )

    @property
    def group_artifact(self) -> str:
        return f"{self.group}:{self.artifact}"

    def pom(self) -> "Coordinate":
        """Return the coordinate of this package's own descriptor."""
        if self.classifier is None and self.type == POM_TYPE:
            return self
        return Coordinate(self.group, self.artifact, self.version, type=POM_TYPE)

    # Repository layout ---------------------------------------------------

    def base_path(self) -> str:
        group_path = self.group.replace(".", "/")
        return f"{group_path}/{self.artifact}/{self.version}"

    def base_name(self) -> str:
        return f"{self.artifact}-{self.version}"

    def file_name(self) -> str:
        suffix = f"-{self.classifier}" if self.classifier else ""
        extension = DEFAULT_TYPE if self.type == "bundle" else self.type
        return f"{self.base_name()}{suffix}.{extension}"

    def pom_file_name(self) -> str:
        return f"{self.base_name()}.{POM_TYPE}"

    def classpath_entry(self) -> str:
        return f"libs/{self.file_name()}"

    def _sort_key(self) -> Tuple[str, str, str, str, str]:
        return (
            self.group,
            self.artifact,
            self.version,
            self.classifier or "",
            self.type,
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Coordinate):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        parts = [self.group, self.artifact]
        if self.type != DEFAULT_TYPE or self.classifier:
            parts.append(self.type)
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)


@dataclass(frozen=True)
class Exclusion:
    """A ``group:artifact`` exclusion pattern; either part may be ``*``."""

    group: str
    artifact: str

    @classmethod
    def parse(cls, notation: str) -> "Exclusion":
        parts = [part.strip() for part in notation.strip().split(":")]
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Invalid exclusion notation: {notation!r}")
        return cls(parts[0], parts[1])

    def matches(self, coordinate: Coordinate) -> bool:
        group_ok = self.group == WILDCARD or self.group == coordinate.group
        artifact_ok = (
            self.artifact == WILDCARD or self.artifact == coordinate.artifact
        )
        return group_ok and artifact_ok

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}"
