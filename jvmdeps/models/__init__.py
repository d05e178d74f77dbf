"""Domain model package exports."""

from .coordinate import ArtifactKey, Coordinate, Exclusion
from .descriptor import (DependencyDeclaration, Descriptor, ManagedDependency,
                         RawDescriptor)
from .graph import (GraphNode, ResolutionFailure, ResolutionResult,
                    ResolvedEntry, ResolvedGraph, RootRequest)
from .scope import Classpath, Scope, aggregate, propagate

__all__ = [
    "ArtifactKey",
    "Classpath",
    "Coordinate",
    "DependencyDeclaration",
    "Descriptor",
    "Exclusion",
    "GraphNode",
    "ManagedDependency",
    "RawDescriptor",
    "ResolutionFailure",
    "ResolutionResult",
    "ResolvedEntry",
    "ResolvedGraph",
    "RootRequest",
    "Scope",
    "aggregate",
    "propagate",
]
