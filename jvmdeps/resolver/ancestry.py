"""Merge a descriptor's inheritance chain into one effective descriptor."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import (TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence,
                    Set, Tuple, TypeVar)

from jvmdeps.errors import ParseError
from jvmdeps.models.coordinate import Coordinate
from jvmdeps.models.descriptor import (DependencyDeclaration, Descriptor,
                                       ManagedDependency, RawDescriptor)
from jvmdeps.models.scope import IMPORT_SCOPE, Scope

from .interpolation import Interpolator, builtin_properties, interpolate_entries

if TYPE_CHECKING:
    from .cache import DescriptorCache

_LOGGER = logging.getLogger(__name__)

_Keyed = TypeVar("_Keyed", DependencyDeclaration, ManagedDependency)


def _overlay(
    own: Sequence[_Keyed], inherited: Iterable[_Keyed]
) -> Tuple[_Keyed, ...]:
    """Own entries first, then inherited entries whose key is not declared."""
    merged: List[_Keyed] = []
    seen: Set[Tuple[str, str, str, str]] = set()
    for entry in list(own) + list(inherited):
        if entry.management_key in seen:
            continue
        seen.add(entry.management_key)
        merged.append(entry)
    return tuple(merged)


class AncestryResolver:
    """Resolve ancestors through the cache and merge child over parent."""

    def __init__(self, cache: "DescriptorCache") -> None:
        self._cache = cache

    def merge(
        self,
        raw: RawDescriptor,
        *,
        chain: Sequence[Coordinate] = (),
    ) -> Descriptor:
        """Return the effective descriptor for ``raw``.

        ``chain`` ends with the coordinate being merged; any ancestor or
        imported descriptor already on it is an ancestry cycle.
        """
        chain = tuple(chain) or (raw.coordinate.pom(),)

        ancestor: Optional[Descriptor] = None
        if raw.ancestor_ref is not None:
            ancestor = self._cache.resolve(raw.ancestor_ref, chain=chain)

        template = self._combine(raw, ancestor)
        lookup: Dict[str, str] = dict(template.properties)
        lookup.update(builtin_properties(raw.coordinate, raw.ancestor_ref))
        interpolator = Interpolator(lookup, coordinate=raw.coordinate)

        managed = interpolate_entries(
            interpolator, template.dependency_management
        )
        managed = self._expand_imports(managed, raw.coordinate, chain)
        self._validate_managed(managed, raw.coordinate)

        dependencies = interpolate_entries(interpolator, template.dependencies)
        dependencies = tuple(
            self._apply_management(dependency, managed, raw.coordinate)
            for dependency in dependencies
        )

        ancestors: Tuple[Coordinate, ...] = ()
        if ancestor is not None:
            ancestors = (ancestor.coordinate,) + ancestor.ancestors

        _LOGGER.debug(
            "Merged %s over %d ancestor(s): %d managed, %d dependencies",
            raw.coordinate,
            len(ancestors),
            len(managed),
            len(dependencies),
        )
        return Descriptor(
            coordinate=raw.coordinate,
            properties=template.properties,
            dependency_management=managed,
            dependencies=dependencies,
            ancestors=ancestors,
            template=template,
        )

    @staticmethod
    def _combine(
        raw: RawDescriptor, ancestor: Optional[Descriptor]
    ) -> RawDescriptor:
        if ancestor is None or ancestor.template is None:
            return replace(raw, ancestor_ref=None)

        parent = ancestor.template
        properties = dict(parent.properties)
        properties.update(raw.properties)
        return RawDescriptor(
            coordinate=raw.coordinate,
            ancestor_ref=None,
            properties=properties,
            dependency_management=_overlay(
                raw.dependency_management, parent.dependency_management
            ),
            dependencies=_overlay(raw.dependencies, parent.dependencies),
        )

    def _expand_imports(
        self,
        managed: Tuple[ManagedDependency, ...],
        coordinate: Coordinate,
        chain: Tuple[Coordinate, ...],
    ) -> Tuple[ManagedDependency, ...]:
        if not any(entry.is_import for entry in managed):
            return managed

        own: List[ManagedDependency] = []
        imported: List[ManagedDependency] = []
        for entry in managed:
            if not entry.is_import:
                own.append(entry)
                continue
            if not entry.version:
                raise ParseError(
                    f"Imported {entry.group}:{entry.artifact} has no version",
                    coordinate=coordinate,
                )
            bom = Coordinate(
                entry.group, entry.artifact, entry.version, type="pom"
            )
            _LOGGER.debug("Importing managed versions from %s", bom)
            imported.extend(
                self._cache.resolve(bom, chain=chain).dependency_management
            )
        return _overlay(own, imported)

    @staticmethod
    def _validate_managed(
        managed: Sequence[ManagedDependency], coordinate: Coordinate
    ) -> None:
        for entry in managed:
            if entry.scope is None or entry.scope == IMPORT_SCOPE:
                continue
            try:
                Scope.parse(entry.scope)
            except ValueError as exc:
                raise ParseError(str(exc), coordinate=coordinate) from exc

    @staticmethod
    def _apply_management(
        dependency: DependencyDeclaration,
        managed: Sequence[ManagedDependency],
        coordinate: Coordinate,
    ) -> DependencyDeclaration:
        rule = next(
            (
                entry
                for entry in managed
                if entry.management_key == dependency.management_key
            ),
            None,
        )
        if rule is not None:
            dependency = replace(
                dependency,
                version=dependency.version or rule.version,
                scope=dependency.scope or rule.scope,
                exclusions=dependency.exclusions or rule.exclusions,
            )

        if not dependency.version:
            raise ParseError(
                f"Dependency {dependency.group_artifact} has no version",
                coordinate=coordinate,
            )
        try:
            Scope.parse(dependency.scope)
        except ValueError as exc:
            raise ParseError(str(exc), coordinate=coordinate) from exc
        return dependency
