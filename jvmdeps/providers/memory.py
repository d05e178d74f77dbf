"""In-memory metadata provider for offline runs and tests."""

from __future__ import annotations

import threading
import time
from collections import Counter
from typing import Dict, Iterable, Optional

from jvmdeps.errors import NotFoundError, ResolutionError
from jvmdeps.models.coordinate import Coordinate
from jvmdeps.models.descriptor import RawDescriptor


class InMemoryMetadataProvider:
    """Dictionary-backed provider keyed by descriptor coordinate.

    ``errors`` maps coordinates to an exception raised on every fetch;
    ``delay`` stretches each fetch so concurrent callers overlap.
    """

    def __init__(
        self,
        descriptors: Iterable[RawDescriptor] = (),
        *,
        errors: Optional[Dict[Coordinate, BaseException]] = None,
        delay: float = 0.0,
    ) -> None:
        self._descriptors: Dict[Coordinate, RawDescriptor] = {}
        self._errors: Dict[Coordinate, BaseException] = {
            coordinate.pom(): error
            for coordinate, error in (errors or {}).items()
        }
        self._delay = delay
        self._lock = threading.Lock()
        self._calls: Counter = Counter()
        for descriptor in descriptors:
            self.add(descriptor)

    def add(self, descriptor: RawDescriptor) -> None:
        self._descriptors[descriptor.coordinate.pom()] = descriptor

    def fail(self, coordinate: Coordinate, error: BaseException) -> None:
        self._errors[coordinate.pom()] = error

    def fetch(self, coordinate: Coordinate) -> RawDescriptor:
        key = coordinate.pom()
        with self._lock:
            self._calls[key] += 1
        if self._delay:
            time.sleep(self._delay)

        error = self._errors.get(key)
        if error is not None:
            if isinstance(error, ResolutionError) and error.coordinate is None:
                error.coordinate = key
            raise error
        try:
            return self._descriptors[key]
        except KeyError:
            raise NotFoundError(
                f"No descriptor registered for {key}", coordinate=key
            ) from None

    def fetch_count(self, coordinate: Optional[Coordinate] = None) -> int:
        """Return fetches for ``coordinate``, or all fetches when omitted."""
        with self._lock:
            if coordinate is None:
                return sum(self._calls.values())
            return self._calls[coordinate.pom()]
