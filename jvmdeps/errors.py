"""Resolution errors shared by providers and the resolver."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from jvmdeps.models.coordinate import Coordinate


class ResolutionError(RuntimeError):
    """Base class for dependency resolution failures.

    Every error names the coordinate it concerns and, when known, the path
    of coordinates from a root that led to it.
    """

    kind = "resolution"

    def __init__(
        self,
        message: str,
        *,
        coordinate: Optional[Coordinate] = None,
        path: Sequence[Coordinate] = (),
    ) -> None:
        super().__init__(message)
        self.message = message
        self.coordinate = coordinate
        self.path: Tuple[Coordinate, ...] = tuple(path)

    def describe(self) -> str:
        if not self.path:
            return self.message
        trail = " -> ".join(str(item) for item in self.path)
        return f"{self.message} (via {trail})"


class NotFoundError(ResolutionError):
    """Raised when no configured source has a descriptor for a coordinate."""

    kind = "not_found"


class TransportError(ResolutionError):
    """Raised when fetching a descriptor fails after the provider's retries."""

    kind = "transport"


class ParseError(ResolutionError):
    """Raised when a descriptor document is malformed or cannot be interpolated."""

    kind = "parse"


class CycleError(ResolutionError):
    """Raised when an ancestry chain or import chain loops back on itself."""

    kind = "cycle"


class ConflictError(ResolutionError):
    """Raised when version mediation cannot pick a winner deterministically."""

    kind = "conflict"
