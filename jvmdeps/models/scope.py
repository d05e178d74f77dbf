"""Dependency scopes, classpath membership and transitive propagation."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional, Tuple


class Scope(str, Enum):
    """Usage classification of a dependency."""

    COMPILE = "compile"
    PROVIDED = "provided"
    RUNTIME = "runtime"
    TEST = "test"
    SYSTEM = "system"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Scope":
        """Return the scope named by ``value``; undeclared means compile."""
        if value is None or not value.strip():
            return cls.COMPILE
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown dependency scope: {value!r}") from None

    @property
    def classpaths(self) -> FrozenSet["Classpath"]:
        return _MEMBERSHIP[self]


class Classpath(str, Enum):
    """Logical output scopes of a resolution run."""

    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"


CLASSPATH_ORDER: Tuple[Classpath, ...] = (
    Classpath.COMPILE,
    Classpath.RUNTIME,
    Classpath.TEST,
)

IMPORT_SCOPE = "import"

_MEMBERSHIP: Dict[Scope, FrozenSet[Classpath]] = {
    Scope.COMPILE: frozenset(CLASSPATH_ORDER),
    Scope.PROVIDED: frozenset({Classpath.COMPILE, Classpath.TEST}),
    Scope.SYSTEM: frozenset({Classpath.COMPILE, Classpath.TEST}),
    Scope.RUNTIME: frozenset({Classpath.RUNTIME, Classpath.TEST}),
    Scope.TEST: frozenset({Classpath.TEST}),
}

# Rows: requester's effective scope. Columns: the dependency's declared
# scope. A missing cell means the dependency is not pulled in transitively.
PROPAGATION_TABLE: Dict[Scope, Dict[Scope, Scope]] = {
    Scope.COMPILE: {
        Scope.COMPILE: Scope.COMPILE,
        Scope.RUNTIME: Scope.RUNTIME,
    },
    Scope.PROVIDED: {
        Scope.COMPILE: Scope.PROVIDED,
        Scope.RUNTIME: Scope.PROVIDED,
    },
    Scope.RUNTIME: {
        Scope.COMPILE: Scope.RUNTIME,
        Scope.RUNTIME: Scope.RUNTIME,
    },
    Scope.TEST: {
        Scope.COMPILE: Scope.TEST,
        Scope.RUNTIME: Scope.TEST,
    },
    Scope.SYSTEM: {},
}


def propagate(requester: Scope, declared: Scope) -> Optional[Scope]:
    """Return the effective scope of a transitive dependency, or ``None``."""
    return PROPAGATION_TABLE[requester].get(declared)


def aggregate(scopes: Iterable[Scope]) -> Scope:
    """Combine scopes reached via different paths; the broadest wins."""
    membership: FrozenSet[Classpath] = frozenset()
    only_system = True
    for scope in scopes:
        membership = membership | scope.classpaths
        only_system = only_system and scope is Scope.SYSTEM

    if not membership:
        raise ValueError("aggregate() requires at least one scope")
    if membership == _MEMBERSHIP[Scope.COMPILE]:
        return Scope.COMPILE
    if membership == _MEMBERSHIP[Scope.RUNTIME]:
        return Scope.RUNTIME
    if membership == _MEMBERSHIP[Scope.TEST]:
        return Scope.TEST
    return Scope.SYSTEM if only_system else Scope.PROVIDED
