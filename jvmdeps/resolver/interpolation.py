"""``${property}`` interpolation for descriptor fields."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import Dict, FrozenSet, Mapping, Optional, Set, Tuple, TypeVar

from jvmdeps.errors import ParseError
from jvmdeps.models.coordinate import Coordinate, Exclusion
from jvmdeps.models.descriptor import DependencyDeclaration, ManagedDependency

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

_Entry = TypeVar("_Entry", DependencyDeclaration, ManagedDependency)


def builtin_properties(
    coordinate: Coordinate, ancestor: Optional[Coordinate] = None
) -> Dict[str, str]:
    """Return the implicit ``project.*`` properties of a descriptor."""
    builtins = {
        "project.groupId": coordinate.group,
        "project.artifactId": coordinate.artifact,
        "project.version": coordinate.version,
    }
    if ancestor is not None:
        builtins["project.parent.groupId"] = ancestor.group
        builtins["project.parent.artifactId"] = ancestor.artifact
        builtins["project.parent.version"] = ancestor.version

    for key, value in list(builtins.items()):
        short = key[len("project."):]
        builtins[f"pom.{short}"] = value
        if "." not in short:
            builtins[short] = value
    return builtins


class Interpolator:
    """Resolve placeholders against one merged property map."""

    def __init__(
        self,
        properties: Mapping[str, str],
        *,
        coordinate: Coordinate,
    ) -> None:
        self._properties = properties
        self._coordinate = coordinate

    def resolve(self, text: Optional[str]) -> Optional[str]:
        if text is None or "${" not in text:
            return text
        return self._resolve(text, frozenset())

    def _resolve(self, text: str, active: FrozenSet[str]) -> str:
        def _substitute(match: "re.Match[str]") -> str:
            name = match.group(1).strip()
            if name in active:
                raise ParseError(
                    f"Property '{name}' refers to itself",
                    coordinate=self._coordinate,
                )
            value = self._properties.get(name)
            if value is None:
                raise ParseError(
                    f"Unresolved placeholder '${{{name}}}' in {text!r}",
                    coordinate=self._coordinate,
                )
            return self._resolve(value, active | {name})

        return _PLACEHOLDER.sub(_substitute, text)

    def entry(self, entry: _Entry) -> _Entry:
        """Return ``entry`` with every string field interpolated."""
        changes: Dict[str, object] = {}
        for name in ("group", "artifact", "version", "scope", "classifier", "type"):
            current = getattr(entry, name)
            resolved = self.resolve(current)
            if resolved != current:
                changes[name] = resolved

        exclusions = self._exclusions(entry.exclusions)
        if exclusions != entry.exclusions:
            changes["exclusions"] = exclusions

        if not changes:
            return entry
        return replace(entry, **changes)  # type: ignore[arg-type]

    def _exclusions(
        self, exclusions: FrozenSet[Exclusion]
    ) -> FrozenSet[Exclusion]:
        resolved: Set[Exclusion] = set()
        for exclusion in exclusions:
            group = self.resolve(exclusion.group) or exclusion.group
            artifact = self.resolve(exclusion.artifact) or exclusion.artifact
            resolved.add(Exclusion(group, artifact))
        return frozenset(resolved)


def interpolate_entries(
    interpolator: Interpolator, entries: Tuple[_Entry, ...]
) -> Tuple[_Entry, ...]:
    return tuple(interpolator.entry(entry) for entry in entries)
