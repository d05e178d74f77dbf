"""Manifest parser for newline-delimited root coordinate files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

from jvmdeps.models.graph import RootRequest

_LOGGER = logging.getLogger(__name__)


class RootsParser:
    """Parse a roots manifest into :class:`RootRequest` values.

    Each non-empty line holds one ``group:artifact:version`` coordinate with
    an optional ``@scope`` suffix. ``#`` starts a comment, either on its own
    line or after a coordinate.
    """

    COMMENT = "#"

    def __init__(self, manifest_file: Union[Path, str]) -> None:
        self._manifest_file = Path(manifest_file)

    def parse(self) -> List[RootRequest]:
        """Convert the manifest into root requests, in file order."""
        roots: List[RootRequest] = []
        for number, line in enumerate(self._read_lines(), start=1):
            request = self._parse_line(line, number)
            if request is not None:
                roots.append(request)

        _LOGGER.info(
            "Parsed %d roots from %s",
            len(roots),
            self._manifest_file,
        )
        return roots

    def _read_lines(self) -> List[str]:
        if not self._manifest_file.exists():
            raise FileNotFoundError(
                f"Roots manifest not found: {self._manifest_file}"
            )

        with self._manifest_file.open("r", encoding="utf-8") as handle:
            lines = [line.rstrip("\n") for line in handle]
        _LOGGER.debug(
            "Read %d raw lines from %s",
            len(lines),
            self._manifest_file,
        )
        return lines

    def _parse_line(self, line: str, number: int) -> Optional[RootRequest]:
        content = line.split(self.COMMENT, 1)[0].strip()
        if not content:
            return None
        try:
            return RootRequest.parse(content)
        except ValueError as exc:
            raise ValueError(
                f"{self._manifest_file}:{number}: {exc}"
            ) from exc
