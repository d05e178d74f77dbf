"""Metadata provider boundary consumed by the resolver."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from jvmdeps.models.coordinate import Coordinate
from jvmdeps.models.descriptor import RawDescriptor


@runtime_checkable
class MetadataProvider(Protocol):
    """Return the raw descriptor document for a coordinate.

    Implementations raise :class:`~jvmdeps.errors.NotFoundError` when no
    source knows the coordinate, :class:`~jvmdeps.errors.TransportError`
    once their own retry policy is exhausted, and
    :class:`~jvmdeps.errors.ParseError` for malformed documents.
    """

    def fetch(self, coordinate: Coordinate) -> RawDescriptor: ...
