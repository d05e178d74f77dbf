"""Per-run descriptor cache that fetches and merges each coordinate once.

The first caller for a coordinate becomes the sole producer of its
descriptor; every other caller, concurrent or later, waits on the same
single-assignment cell and observes the same value or the same error.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Dict, Optional, Sequence, Tuple

from jvmdeps.errors import CycleError, ResolutionError, TransportError
from jvmdeps.models.coordinate import Coordinate
from jvmdeps.models.descriptor import Descriptor
from jvmdeps.providers.base import MetadataProvider

from .ancestry import AncestryResolver

_LOGGER = logging.getLogger(__name__)

Chain = Tuple[Coordinate, ...]


class DescriptorCache:
    """Coordinate-keyed map of single-assignment descriptor cells."""

    def __init__(
        self,
        provider: MetadataProvider,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._provider = provider
        self._logger = logger or _LOGGER
        self._ancestry = AncestryResolver(self)
        self._gate = threading.Lock()
        self._cells: Dict[Coordinate, "Future[Descriptor]"] = {}
        # producer key -> key whose cell that producer is blocked on
        self._waiting_on: Dict[Coordinate, Coordinate] = {}
        self._fetches = 0

    @property
    def fetch_count(self) -> int:
        """Number of provider fetches issued during this run."""
        return self._fetches

    def __len__(self) -> int:
        with self._gate:
            return len(self._cells)

    def __contains__(self, coordinate: object) -> bool:
        if not isinstance(coordinate, Coordinate):
            return False
        with self._gate:
            return coordinate.pom() in self._cells

    def resolve(
        self,
        coordinate: Coordinate,
        *,
        chain: Sequence[Coordinate] = (),
    ) -> Descriptor:
        """Return the merged descriptor of ``coordinate``.

        ``chain`` lists the descriptors currently being merged by the
        calling thread, outermost first; it is empty for plain lookups.
        """
        key = coordinate.pom()
        chain = tuple(chain)
        if key in chain:
            raise CycleError(
                f"Ancestry cycle detected at {key}",
                coordinate=key,
                path=chain + (key,),
            )

        waiter: Optional[Coordinate] = chain[-1] if chain else None
        with self._gate:
            cell = self._cells.get(key)
            producer = cell is None
            if cell is None:
                cell = Future()
                cell.set_running_or_notify_cancel()
                self._cells[key] = cell
                if waiter is not None:
                    self._waiting_on[waiter] = key
            elif waiter is not None and not cell.done():
                self._register_wait(waiter, key, chain)

        try:
            if producer:
                self._logger.debug("Descriptor cache miss for %s", key)
                return self._produce(key, cell, chain + (key,))

            self._logger.debug("Descriptor cache hit for %s", key)
            return cell.result()
        finally:
            if waiter is not None:
                with self._gate:
                    self._waiting_on.pop(waiter, None)

    def _register_wait(
        self, waiter: Coordinate, key: Coordinate, chain: Chain
    ) -> None:
        # Caller holds the gate. Follow the producers blocked downstream of
        # ``key``; reaching our own chain means the two merges wait on each
        # other.
        members = set(chain)
        current: Optional[Coordinate] = key
        visited = set()
        while current is not None and current not in visited:
            if current in members:
                raise CycleError(
                    f"Ancestry cycle detected at {key}",
                    coordinate=key,
                    path=chain + (key,),
                )
            visited.add(current)
            current = self._waiting_on.get(current)
        self._waiting_on[waiter] = key

    def _produce(
        self,
        key: Coordinate,
        cell: "Future[Descriptor]",
        chain: Chain,
    ) -> Descriptor:
        try:
            with self._gate:
                self._fetches += 1
            raw = self._provider.fetch(key)
            descriptor = self._ancestry.merge(raw, chain=chain)
        except ResolutionError as error:
            self._logger.info(
                "Resolving descriptor %s failed: %s", key, error.message
            )
            cell.set_exception(error)
            raise
        except Exception as exc:  # noqa: BLE001 - recorded in the cell
            error = TransportError(
                f"Unexpected failure resolving {key}: {exc}",
                coordinate=key,
                path=chain,
            )
            error.__cause__ = exc
            self._logger.exception("Unexpected error while resolving %s", key)
            cell.set_exception(error)
            raise error
        cell.set_result(descriptor)
        self._logger.info("Resolved descriptor %s", key)
        return descriptor
