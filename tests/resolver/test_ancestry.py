"""Tests for merging descriptors over their ancestry chain."""

from __future__ import annotations

import pytest

from jvmdeps.errors import CycleError, NotFoundError, ParseError
from jvmdeps.models.coordinate import Coordinate, Exclusion
from jvmdeps.providers.memory import InMemoryMetadataProvider
from jvmdeps.resolver.cache import DescriptorCache


def _resolve(descriptors, notation: str):
    cache = DescriptorCache(InMemoryMetadataProvider(descriptors))
    return cache.resolve(Coordinate.parse(notation))


def test_child_property_overrides_ancestor_and_gaps_are_inherited(raw) -> None:
    merged = _resolve(
        [
            raw("lib:parent:1", properties={"x": "2", "only.parent": "p"}),
            raw("lib:child:1.0", parent="lib:parent:1", properties={"x": "1"}),
        ],
        "lib:child:1.0",
    )

    assert merged.properties["x"] == "1"
    assert merged.properties["only.parent"] == "p"
    assert merged.ancestors == (Coordinate.parse("lib:parent:1").pom(),)


def test_ancestors_are_listed_nearest_first(raw) -> None:
    merged = _resolve(
        [
            raw("lib:root:1"),
            raw("lib:mid:1", parent="lib:root:1"),
            raw("lib:leaf:1", parent="lib:mid:1"),
        ],
        "lib:leaf:1",
    )

    assert [item.artifact for item in merged.ancestors] == ["mid", "root"]


def test_inherited_dependency_uses_child_properties(raw, dep) -> None:
    merged = _resolve(
        [
            raw(
                "lib:parent:1",
                [dep("lib:foo:${foo.version}")],
                properties={"foo.version": "1.0"},
            ),
            raw(
                "lib:child:1.0",
                parent="lib:parent:1",
                properties={"foo.version": "2.0"},
            ),
        ],
        "lib:child:1.0",
    )

    assert [str(item.to_coordinate()) for item in merged.dependencies] == [
        "lib:foo:2.0"
    ]


def test_child_declaration_shadows_inherited_one(raw, dep) -> None:
    merged = _resolve(
        [
            raw("lib:parent:1", [dep("lib:foo:1.0"), dep("lib:bar:1.0")]),
            raw("lib:child:1.0", [dep("lib:foo:9.0")], parent="lib:parent:1"),
        ],
        "lib:child:1.0",
    )

    assert [str(item.to_coordinate()) for item in merged.dependencies] == [
        "lib:foo:9.0",
        "lib:bar:1.0",
    ]


def test_project_version_placeholder_resolves_to_own_version(raw, dep) -> None:
    merged = _resolve(
        [raw("lib:suite:4.2", [dep("lib:suite-core:${project.version}")])],
        "lib:suite:4.2",
    )

    assert merged.dependencies[0].version == "4.2"


def test_management_fills_version_scope_and_exclusions(raw, dep, managed) -> None:
    merged = _resolve(
        [
            raw(
                "lib:parent:1",
                managed=[managed("lib:foo:3.0", "runtime", exclusions=["bad:*"])],
            ),
            raw("lib:child:1.0", [dep("lib:foo")], parent="lib:parent:1"),
        ],
        "lib:child:1.0",
    )

    foo = merged.dependencies[0]
    assert foo.version == "3.0"
    assert foo.scope == "runtime"
    assert foo.exclusions == frozenset({Exclusion("bad", "*")})


def test_own_management_entry_wins_over_inherited(raw, dep, managed) -> None:
    merged = _resolve(
        [
            raw("lib:parent:1", managed=[managed("lib:foo:1.0")]),
            raw(
                "lib:child:1.0",
                [dep("lib:foo")],
                parent="lib:parent:1",
                managed=[managed("lib:foo:2.0")],
            ),
        ],
        "lib:child:1.0",
    )

    assert merged.dependencies[0].version == "2.0"


def test_bom_import_contributes_managed_versions(raw, dep, managed) -> None:
    merged = _resolve(
        [
            raw("lib:bom:5", managed=[managed("lib:foo:5.1")]),
            raw(
                "lib:app:1.0",
                [dep("lib:foo")],
                managed=[managed("lib:bom:5", "import", type="pom")],
            ),
        ],
        "lib:app:1.0",
    )

    assert merged.dependencies[0].version == "5.1"


def test_bom_import_cycle_is_detected(raw, managed) -> None:
    with pytest.raises(CycleError):
        _resolve(
            [
                raw("lib:a:1", managed=[managed("lib:b:1", "import", type="pom")]),
                raw("lib:b:1", managed=[managed("lib:a:1", "import", type="pom")]),
            ],
            "lib:a:1",
        )


def test_dependency_without_any_version_is_a_parse_error(raw, dep) -> None:
    with pytest.raises(ParseError, match="has no version"):
        _resolve([raw("lib:app:1.0", [dep("lib:foo")])], "lib:app:1.0")


def test_unknown_scope_is_a_parse_error(raw, dep) -> None:
    with pytest.raises(ParseError, match="Unknown dependency scope"):
        _resolve([raw("lib:app:1.0", [dep("lib:foo:1.0", "banana")])], "lib:app:1.0")


def test_missing_ancestor_fails_the_child(raw) -> None:
    with pytest.raises(NotFoundError):
        _resolve([raw("lib:child:1.0", parent="lib:gone:1")], "lib:child:1.0")


def test_cached_ancestor_is_not_mutated_by_merge(raw) -> None:
    cache = DescriptorCache(
        InMemoryMetadataProvider(
            [
                raw("lib:parent:1", properties={"x": "parent"}),
                raw("lib:child:1.0", parent="lib:parent:1", properties={"x": "child"}),
            ]
        )
    )

    cache.resolve(Coordinate.parse("lib:child:1.0"))
    parent = cache.resolve(Coordinate.parse("lib:parent:1"))

    assert parent.properties["x"] == "parent"
