"""Tests for concurrent graph exploration."""

from __future__ import annotations

import threading
import time
from typing import List

import pytest

from jvmdeps.errors import NotFoundError
from jvmdeps.models.coordinate import Coordinate, Exclusion
from jvmdeps.models.graph import GraphNode, RootRequest
from jvmdeps.models.scope import Scope
from jvmdeps.providers.memory import InMemoryMetadataProvider
from jvmdeps.resolver.cache import DescriptorCache
from jvmdeps.resolver.explorer import GraphExplorer


class ConcurrencyTrackingProvider(InMemoryMetadataProvider):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._active = 0
        self._guard = threading.Lock()
        self.peak = 0

    def fetch(self, coordinate):
        with self._guard:
            self._active += 1
            self.peak = max(self.peak, self._active)
        try:
            time.sleep(0.02)
            return super().fetch(coordinate)
        finally:
            with self._guard:
                self._active -= 1


def _explore(provider, roots, **kwargs) -> List[GraphNode]:
    scope = kwargs.pop("root_scope", Scope.COMPILE)
    explorer = GraphExplorer(DescriptorCache(provider), **kwargs)
    return sorted(
        explorer.explore(roots, scope), key=lambda node: node.discovery_key
    )


def _names(nodes: List[GraphNode]) -> List[str]:
    return [str(node.coordinate) for node in nodes if node.expanded]


def test_diamond_fetches_shared_dependency_once(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:a:1", [dep("g:b:1"), dep("g:c:1")]),
            raw("g:b:1", [dep("g:d:1")]),
            raw("g:c:1", [dep("g:d:1")]),
            raw("g:d:1"),
        ]
    )

    nodes = _explore(provider, ["g:a:1"])

    assert provider.fetch_count(Coordinate.parse("g:d:1")) == 1
    assert _names(nodes) == ["g:a:1", "g:b:1", "g:c:1", "g:d:1"]
    repeats = [node for node in nodes if not node.expanded]
    assert [node.path[-2].artifact for node in repeats] == ["c"]


def test_nodes_carry_depth_path_and_ordinal(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:r:1", [dep("g:x:1"), dep("g:y:1")]),
            raw("g:x:1"),
            raw("g:y:1", [dep("g:z:1")]),
            raw("g:z:1"),
        ]
    )

    nodes = {node.coordinate.artifact: node for node in _explore(provider, ["g:r:1"])}

    z = nodes["z"]
    assert z.depth == 2
    assert [item.artifact for item in z.path] == ["r", "y", "z"]
    assert z.ordinal == (0, 1, 0)
    assert z.descriptor is not None


def test_scope_propagation_follows_the_table(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw(
                "g:app:1",
                [
                    dep("g:junit:4", "test"),
                    dep("g:servlet:3", "provided"),
                    dep("g:driver:1", "runtime"),
                ],
            ),
            raw("g:junit:4", [dep("g:hamcrest:1"), dep("g:junit-extra:1", "test")]),
            raw("g:servlet:3", [dep("g:servlet-api:3")]),
            raw("g:driver:1", [dep("g:pool:2")]),
            raw("g:hamcrest:1"),
            raw("g:servlet-api:3"),
            raw("g:pool:2"),
        ]
    )

    from_app = {
        node.coordinate.artifact: node.requested_scope
        for node in _explore(provider, ["g:app:1"])
    }
    from_test_roots = {
        node.coordinate.artifact: node.requested_scope
        for node in _explore(
            provider, ["g:junit:4@test", "g:servlet:3@provided"]
        )
    }

    assert from_app == {
        "app": Scope.COMPILE,
        "driver": Scope.RUNTIME,
        "pool": Scope.RUNTIME,
    }
    assert from_test_roots == {
        "junit": Scope.TEST,
        "hamcrest": Scope.TEST,
        "servlet": Scope.PROVIDED,
        "servlet-api": Scope.PROVIDED,
    }


def test_optional_dependencies_of_transitives_are_skipped(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:app:1", [dep("g:lib:1")]),
            raw("g:lib:1", [dep("g:extra:1", optional=True)]),
        ]
    )

    assert _names(_explore(provider, ["g:app:1"])) == ["g:app:1", "g:lib:1"]


def test_exclusions_apply_to_the_whole_subtree(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:app:1", [dep("g:lib:1", exclusions=["g.bad:*"])]),
            raw("g:lib:1", [dep("g:mid:1")]),
            raw("g:mid:1", [dep("g.bad:logging:1"), dep("g:ok:1")]),
            raw("g:ok:1"),
        ]
    )

    assert _names(_explore(provider, ["g:app:1"])) == [
        "g:app:1",
        "g:lib:1",
        "g:mid:1",
        "g:ok:1",
    ]


def test_global_exclusions_apply_below_roots(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [raw("g:app:1", [dep("g:noise:1"), dep("g:ok:1")]), raw("g:ok:1")]
    )

    nodes = _explore(
        provider, ["g:app:1"], exclusions=[Exclusion.parse("g:noise")]
    )

    assert _names(nodes) == ["g:app:1", "g:ok:1"]


def test_dependency_cycle_is_cut_at_the_path(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:a:1", [dep("g:b:1")]),
            raw("g:b:1", [dep("g:a:2")]),
        ]
    )

    assert _names(_explore(provider, ["g:a:1"])) == ["g:a:1", "g:b:1"]


def test_branch_failure_is_reported_and_siblings_continue(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:app:1", [dep("g:gone:1"), dep("g:ok:1")]),
            raw("g:ok:1", [dep("g:deep:1")]),
            raw("g:deep:1"),
        ]
    )

    nodes = _explore(provider, ["g:app:1"])

    failed = [node for node in nodes if node.failed]
    assert len(failed) == 1
    assert failed[0].failure.kind == "not_found"
    assert [item.artifact for item in failed[0].failure.path] == ["app", "gone"]
    assert "g:deep:1" in _names(nodes)


def test_root_failure_is_fatal(raw) -> None:
    provider = InMemoryMetadataProvider([raw("g:ok:1")])

    with pytest.raises(NotFoundError):
        _explore(provider, ["g:ok:1", "g:gone:1"])


def test_root_requests_keep_their_own_scope(raw, dep) -> None:
    provider = InMemoryMetadataProvider(
        [raw("g:tool:1", [dep("g:dep:1")]), raw("g:dep:1")]
    )

    nodes = _explore(provider, [RootRequest.parse("g:tool:1@runtime")])

    assert {node.requested_scope for node in nodes} == {Scope.RUNTIME}


def test_run_level_management_overrides_transitive_versions(
    raw, dep, managed
) -> None:
    provider = InMemoryMetadataProvider(
        [
            raw("g:app:1", [dep("g:lib:1")]),
            raw("g:lib:1", [dep("g:foo:1.0")]),
            raw("g:foo:3.0"),
        ]
    )

    nodes = _explore(provider, ["g:app:1"], managed=[managed("g:foo:3.0")])

    assert "g:foo:3.0" in _names(nodes)
    assert provider.fetch_count(Coordinate.parse("g:foo:1.0")) == 0


def test_exploration_respects_max_workers(raw, dep) -> None:
    leaves = [f"g:leaf{index}:1" for index in range(12)]
    provider = ConcurrencyTrackingProvider(
        [raw("g:root:1", [dep(leaf) for leaf in leaves])]
        + [raw(leaf) for leaf in leaves]
    )

    nodes = _explore(provider, ["g:root:1"], max_workers=3)

    assert len(nodes) == 13
    assert 1 <= provider.peak <= 3


def test_invalid_worker_count_is_rejected(raw) -> None:
    with pytest.raises(ValueError):
        GraphExplorer(
            DescriptorCache(InMemoryMetadataProvider()), max_workers=0
        )
