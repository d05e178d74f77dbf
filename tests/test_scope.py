"""Tests for scope parsing, propagation and aggregation."""

from __future__ import annotations

import pytest

from jvmdeps.models.scope import Classpath, Scope, aggregate, propagate


def test_parse_defaults_to_compile_and_ignores_case() -> None:
    assert Scope.parse(None) is Scope.COMPILE
    assert Scope.parse("  ") is Scope.COMPILE
    assert Scope.parse("Runtime") is Scope.RUNTIME
    with pytest.raises(ValueError, match="Unknown dependency scope"):
        Scope.parse("import-ish")


def test_classpath_membership() -> None:
    assert Scope.COMPILE.classpaths == {
        Classpath.COMPILE,
        Classpath.RUNTIME,
        Classpath.TEST,
    }
    assert Scope.PROVIDED.classpaths == {Classpath.COMPILE, Classpath.TEST}
    assert Scope.RUNTIME.classpaths == {Classpath.RUNTIME, Classpath.TEST}
    assert Scope.TEST.classpaths == {Classpath.TEST}


@pytest.mark.parametrize(
    ("requester", "declared", "expected"),
    [
        (Scope.COMPILE, Scope.COMPILE, Scope.COMPILE),
        (Scope.COMPILE, Scope.RUNTIME, Scope.RUNTIME),
        (Scope.COMPILE, Scope.TEST, None),
        (Scope.COMPILE, Scope.PROVIDED, None),
        (Scope.RUNTIME, Scope.COMPILE, Scope.RUNTIME),
        (Scope.PROVIDED, Scope.RUNTIME, Scope.PROVIDED),
        (Scope.TEST, Scope.COMPILE, Scope.TEST),
        (Scope.TEST, Scope.TEST, None),
        (Scope.SYSTEM, Scope.COMPILE, None),
    ],
)
def test_propagation_table(requester, declared, expected) -> None:
    assert propagate(requester, declared) is expected


@pytest.mark.parametrize(
    ("scopes", "expected"),
    [
        ([Scope.RUNTIME, Scope.COMPILE], Scope.COMPILE),
        ([Scope.TEST, Scope.RUNTIME], Scope.RUNTIME),
        ([Scope.PROVIDED, Scope.TEST], Scope.PROVIDED),
        ([Scope.PROVIDED, Scope.RUNTIME], Scope.COMPILE),
        ([Scope.SYSTEM], Scope.SYSTEM),
        ([Scope.SYSTEM, Scope.PROVIDED], Scope.PROVIDED),
        ([Scope.TEST, Scope.TEST], Scope.TEST),
    ],
)
def test_broadest_scope_wins(scopes, expected) -> None:
    assert aggregate(scopes) is expected


def test_aggregate_requires_a_scope() -> None:
    with pytest.raises(ValueError):
        aggregate([])
