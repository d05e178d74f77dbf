from __future__ import annotations

"""Utilities for transforming resolved graphs into CLI output records."""

import json
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from jvmdeps.models.graph import ResolutionFailure, ResolvedGraph
from jvmdeps.models.scope import CLASSPATH_ORDER, Classpath

OUTPUT_FIELD_ORDER: Sequence[str] = (
    "scope",
    "coordinate",
    "group",
    "artifact",
    "version",
    "classifier",
    "type",
)

CLASSPATH_SEPARATOR = ":"


class ResultsFormatter:
    """Format a ResolvedGraph into ordered records or classpath strings."""

    def __init__(self, classpaths: Sequence[Classpath] = CLASSPATH_ORDER) -> None:
        self._classpaths = tuple(Classpath(item) for item in classpaths)

    def format_graph(self, graph: ResolvedGraph) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        for classpath in self._classpaths:
            for entry in graph.for_scope(classpath):
                coordinate = entry.coordinate
                record = {
                    "scope": classpath.value,
                    "coordinate": str(coordinate),
                    "group": coordinate.group,
                    "artifact": coordinate.artifact,
                    "version": coordinate.version,
                    "classifier": coordinate.classifier,
                    "type": coordinate.type,
                }
                records.append(
                    {field: record[field] for field in OUTPUT_FIELD_ORDER}
                )
        return records

    def format_classpaths(self, graph: ResolvedGraph) -> List[str]:
        """Return one ``scope=libs/a.jar:libs/b.jar`` line per classpath."""
        return [
            f"{classpath.value}="
            + CLASSPATH_SEPARATOR.join(graph.classpath(classpath))
            for classpath in self._classpaths
        ]

    @staticmethod
    def format_failure(failure: ResolutionFailure) -> Dict[str, Any]:
        return {
            "kind": failure.kind,
            "coordinate": str(failure.coordinate),
            "message": failure.message,
            "path": [str(item) for item in failure.path],
        }


def to_ndjson_line(record: Mapping[str, Any]) -> str:
    """Serialize a record to compact JSON, keeping key order."""

    pairs = [
        f"{_serialize_string(key)}:{_serialize_value(value)}"
        for key, value in record.items()
    ]
    return "{" + ",".join(pairs) + "}"


def _serialize_value(value: Any) -> str:
    if isinstance(value, str):
        return _serialize_string(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, Mapping):
        return "{" + ",".join(
            f"{_serialize_string(str(k))}:{_serialize_value(v)}"
            for k, v in value.items()
        ) + "}"
    if isinstance(value, Iterable) and not isinstance(
        value,
        (str, bytes, bytearray),
    ):
        return "[" + ",".join(_serialize_value(item) for item in value) + "]"
    return str(value)


def _serialize_string(value: str) -> str:
    return json.dumps(value)
