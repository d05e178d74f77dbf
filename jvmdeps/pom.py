"""Parse Maven POM documents into :class:`RawDescriptor` values.

Only the parts the resolver consumes are read: identity, ``<parent>``,
``<properties>``, ``<dependencyManagement>`` and ``<dependencies>``. Build
plugins, profiles and repositories are ignored. Documents with and without
the POM 4.0.0 namespace are both accepted.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Dict, FrozenSet, List, Optional

from jvmdeps.errors import ParseError
from jvmdeps.models.coordinate import POM_TYPE, Coordinate, Exclusion
from jvmdeps.models.descriptor import (DependencyDeclaration,
                                       ManagedDependency, RawDescriptor)

_LOGGER = logging.getLogger(__name__)


def _local(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on tags."""
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _children(element: Optional[ET.Element], name: str) -> List[ET.Element]:
    if element is None:
        return []
    return [child for child in element if _local(child.tag) == name]


def _text(element: Optional[ET.Element], name: str) -> Optional[str]:
    if element is None:
        return None
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


def parse_pom(
    text: str, *, source: Optional[Coordinate] = None
) -> RawDescriptor:
    """Parse ``text``; ``source`` names the requested coordinate in errors."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ParseError(
            f"Malformed POM document: {exc}", coordinate=source
        ) from exc

    if _local(root.tag) != "project":
        raise ParseError(
            f"Expected <project> root element, found <{_local(root.tag)}>",
            coordinate=source,
        )

    parent = _parse_parent(root, source)
    group = _text(root, "groupId") or (parent.group if parent else None)
    version = _text(root, "version") or (parent.version if parent else None)
    artifact = _text(root, "artifactId")
    if not group or not artifact or not version:
        raise ParseError(
            "POM is missing groupId, artifactId or version",
            coordinate=source,
        )

    try:
        descriptor = RawDescriptor(
            coordinate=Coordinate(group, artifact, version, type=POM_TYPE),
            ancestor_ref=parent,
            properties=_parse_properties(root),
            dependency_management=tuple(
                _parse_managed(element)
                for element in _managed_elements(root)
            ),
            dependencies=tuple(
                _parse_dependency(element)
                for element in _children(
                    _child(root, "dependencies"), "dependency"
                )
            ),
        )
    except ValueError as exc:
        raise ParseError(str(exc), coordinate=source) from exc

    _LOGGER.debug(
        "Parsed POM %s: %d properties, %d managed, %d dependencies",
        descriptor.coordinate,
        len(descriptor.properties),
        len(descriptor.dependency_management),
        len(descriptor.dependencies),
    )
    return descriptor


def _parse_parent(
    root: ET.Element, source: Optional[Coordinate]
) -> Optional[Coordinate]:
    parent = _child(root, "parent")
    if parent is None:
        return None
    group = _text(parent, "groupId")
    artifact = _text(parent, "artifactId")
    version = _text(parent, "version")
    if not group or not artifact or not version:
        raise ParseError(
            "<parent> requires groupId, artifactId and version",
            coordinate=source,
        )
    return Coordinate(group, artifact, version, type=POM_TYPE)


def _managed_elements(root: ET.Element) -> List[ET.Element]:
    management = _child(root, "dependencyManagement")
    if management is None:
        return []
    return _children(_child(management, "dependencies"), "dependency")


def _parse_properties(root: ET.Element) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    container = _child(root, "properties")
    if container is None:
        return properties
    for element in container:
        if not isinstance(element.tag, str):
            # comments and processing instructions
            continue
        properties[_local(element.tag)] = (element.text or "").strip()
    return properties


def _parse_exclusions(element: ET.Element) -> FrozenSet[Exclusion]:
    exclusions = set()
    for exclusion in _children(_child(element, "exclusions"), "exclusion"):
        group = _text(exclusion, "groupId")
        artifact = _text(exclusion, "artifactId")
        if group and artifact:
            exclusions.add(Exclusion(group, artifact))
    return frozenset(exclusions)


def _require(element: ET.Element, name: str) -> str:
    value = _text(element, name)
    if value is None:
        raise ValueError(f"<dependency> without <{name}>")
    return value


def _parse_dependency(element: ET.Element) -> DependencyDeclaration:
    return DependencyDeclaration(
        group=_require(element, "groupId"),
        artifact=_require(element, "artifactId"),
        version=_text(element, "version"),
        scope=_text(element, "scope"),
        classifier=_text(element, "classifier"),
        type=_text(element, "type"),
        optional=(_text(element, "optional") or "").lower() == "true",
        exclusions=_parse_exclusions(element),
    )


def _parse_managed(element: ET.Element) -> ManagedDependency:
    return ManagedDependency(
        group=_require(element, "groupId"),
        artifact=_require(element, "artifactId"),
        version=_text(element, "version"),
        scope=_text(element, "scope"),
        classifier=_text(element, "classifier"),
        type=_text(element, "type"),
        exclusions=_parse_exclusions(element),
    )
