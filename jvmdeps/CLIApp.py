"""CLI wiring that reads root coordinates and prints the resolved graph."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO

from .errors import ResolutionError
from .logging_config import configure_logging
from .models.coordinate import Exclusion
from .models.graph import ResolutionResult, RootRequest
from .models.scope import Scope
from .parser import RootsParser
from .providers.base import MetadataProvider
from .providers.repository import RepositoryMetadataProvider
from .resolver import DependencyResolver
from .results import ResultsFormatter, to_ndjson_line
from .utils.env import ResolverSettings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2

OUTPUT_FORMATS = ("ndjson", "classpath")


class CLIApp:
    """Command-line entry point for the jvmdeps resolver."""

    def __init__(
        self,
        roots: Sequence[str] = (),
        *,
        manifest: Optional[Path] = None,
        scope: Scope = Scope.COMPILE,
        exclusions: Sequence[str] = (),
        settings: Optional[ResolverSettings] = None,
        provider: Optional[MetadataProvider] = None,
        output_format: str = "ndjson",
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")
        self._roots = list(roots)
        self._manifest = Path(manifest) if manifest is not None else None
        self._scope = scope
        self._exclusions = [Exclusion.parse(item) for item in exclusions]
        self._settings = settings or ResolverSettings.from_env()
        self._provider = provider
        self._output_format = output_format
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr

    def root_requests(self) -> List[RootRequest]:
        collected: List[RootRequest] = []
        if self._manifest is not None:
            collected.extend(RootsParser(self._manifest).parse())
        for notation in self._roots:
            request = RootRequest.parse(notation)
            if "@" not in notation:
                request = dataclasses.replace(request, scope=self._scope)
            collected.append(request)
        if not collected:
            raise ValueError(
                "Provide at least one root coordinate or a --manifest file."
            )
        return collected

    def generate_results(self) -> ResolutionResult:
        """Resolve the configured roots; root failures propagate."""
        provider = self._provider or RepositoryMetadataProvider.from_settings(
            self._settings
        )
        resolver = DependencyResolver(
            provider,
            max_workers=self._settings.max_workers,
            exclusions=self._exclusions,
        )
        return resolver.resolve(self.root_requests(), self._scope)

    def run(self) -> int:
        """Execute the CLI workflow and write the graph to stdout."""
        try:
            result = self.generate_results()
        except ResolutionError as error:
            logger.error("Resolution failed: %s", error.describe())
            print(f"error: {error.describe()}", file=self._stderr)
            return EXIT_FATAL
        except (ValueError, FileNotFoundError) as error:
            print(f"error: {error}", file=self._stderr)
            return EXIT_FATAL

        formatter = ResultsFormatter()
        if self._output_format == "classpath":
            for line in formatter.format_classpaths(result.graph):
                print(line, file=self._stdout)
        else:
            for record in formatter.format_graph(result.graph):
                print(to_ndjson_line(record), file=self._stdout)

        for failure in result.failures:
            print(
                to_ndjson_line(formatter.format_failure(failure)),
                file=self._stderr,
            )
        return EXIT_OK if result.complete else EXIT_PARTIAL


def build_arg_parser() -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(
        prog="jvmdeps",
        description=(
            "Resolve the transitive dependency graph of JVM packages "
            "and print one classpath per scope."
        ),
    )
    argument_parser.add_argument(
        "roots",
        nargs="*",
        help="Root coordinates as group:artifact:version[@scope].",
    )
    argument_parser.add_argument(
        "--manifest",
        type=Path,
        help="File with one root coordinate per line.",
    )
    argument_parser.add_argument(
        "--scope",
        type=Scope.parse,
        default=Scope.COMPILE,
        help="Scope for roots without an explicit @scope (default: compile).",
    )
    argument_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GROUP:ARTIFACT",
        help="Exclude a package everywhere in the graph; '*' matches any part.",
    )
    argument_parser.add_argument(
        "--repository",
        action="append",
        default=[],
        metavar="URL",
        help="Repository base URL; repeat to search several in order.",
    )
    argument_parser.add_argument(
        "--max-workers",
        type=int,
        help="Maximum concurrent exploration units.",
    )
    argument_parser.add_argument(
        "--cache-dir",
        type=Path,
        help="Directory for downloaded descriptors.",
    )
    argument_parser.add_argument(
        "--offline",
        action="store_true",
        help="Only use descriptors already in --cache-dir.",
    )
    argument_parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="ndjson",
        help="Output format (default: ndjson).",
    )
    return argument_parser


def _settings_from_args(args: argparse.Namespace) -> ResolverSettings:
    settings = ResolverSettings.from_env()
    overrides: Dict[str, Any] = {}
    if args.repository:
        overrides["repositories"] = tuple(args.repository)
    if args.max_workers is not None:
        overrides["max_workers"] = args.max_workers
    if args.cache_dir is not None:
        overrides["cache_dir"] = args.cache_dir
    if args.offline:
        overrides["offline"] = True
    return dataclasses.replace(settings, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    argument_parser = build_arg_parser()
    parsed_args = argument_parser.parse_args(argv)

    try:
        settings = _settings_from_args(parsed_args)
        app = CLIApp(
            parsed_args.roots,
            manifest=parsed_args.manifest,
            scope=parsed_args.scope,
            exclusions=parsed_args.exclude,
            settings=settings,
            output_format=parsed_args.format,
        )
    except ValueError as error:
        argument_parser.error(str(error))
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
