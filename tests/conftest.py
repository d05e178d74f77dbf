"""Shared fixtures: descriptor builders and a clean runtime environment."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Sequence

import pytest

from jvmdeps.models.coordinate import Coordinate, Exclusion
from jvmdeps.models.descriptor import (DependencyDeclaration,
                                       ManagedDependency, RawDescriptor)


def build_dep(
    notation: str,
    scope: Optional[str] = None,
    *,
    optional: bool = False,
    exclusions: Iterable[str] = (),
    classifier: Optional[str] = None,
    type: Optional[str] = None,
) -> DependencyDeclaration:
    """``"g:a:v"`` or ``"g:a"`` (version left to management)."""
    parts = notation.split(":")
    return DependencyDeclaration(
        group=parts[0],
        artifact=parts[1],
        version=parts[2] if len(parts) > 2 else None,
        scope=scope,
        classifier=classifier,
        type=type,
        optional=optional,
        exclusions=frozenset(Exclusion.parse(item) for item in exclusions),
    )


def build_managed(
    notation: str,
    scope: Optional[str] = None,
    *,
    type: Optional[str] = None,
    exclusions: Iterable[str] = (),
) -> ManagedDependency:
    group, artifact, version = notation.split(":")
    return ManagedDependency(
        group=group,
        artifact=artifact,
        version=version,
        scope=scope,
        type=type,
        exclusions=frozenset(Exclusion.parse(item) for item in exclusions),
    )


def build_raw(
    notation: str,
    dependencies: Sequence[DependencyDeclaration] = (),
    *,
    parent: Optional[str] = None,
    properties: Optional[Dict[str, str]] = None,
    managed: Sequence[ManagedDependency] = (),
) -> RawDescriptor:
    return RawDescriptor(
        coordinate=Coordinate.parse(notation).pom(),
        ancestor_ref=Coordinate.parse(parent).pom() if parent else None,
        properties=properties or {},
        dependency_management=tuple(managed),
        dependencies=tuple(dependencies),
    )


@pytest.fixture
def dep() -> Callable[..., DependencyDeclaration]:
    return build_dep


@pytest.fixture
def managed() -> Callable[..., ManagedDependency]:
    return build_managed


@pytest.fixture
def raw() -> Callable[..., RawDescriptor]:
    return build_raw


@pytest.fixture(autouse=True)
def _default_runtime_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "JVMDEPS_MAX_WORKERS",
        "JVMDEPS_REPOSITORIES",
        "JVMDEPS_CACHE_DIR",
        "JVMDEPS_HTTP_TIMEOUT",
        "JVMDEPS_MAX_RETRIES",
        "JVMDEPS_RATE_LIMIT",
        "JVMDEPS_OFFLINE",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOG_LEVEL", "0")
