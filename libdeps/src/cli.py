"""Command line interface for the library dependency exporter."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List
import os
import sys

from core.generated_file import GeneratedFileWriter, RecordingWriter, make_writer

from .context import Console, Context
from .description import BuildDescription
from .exporter import ExportRequest, UsageError, export_library_dependencies


def _split_config_values(values: Iterable[str]) -> List[str]:
    parts: List[str] = []
    separator = os.pathsep
    for value in values:
        if not value:
            continue
        text = value.strip()
        if not text:
            continue
        segments = text.split(separator) if separator in text else [text]
        for segment in segments:
            trimmed = segment.strip()
            if trimmed:
                parts.append(trimmed)
    return parts


def _resolve_description_directories(workspace: Path, cli_values: Iterable[str]) -> List[Path]:
    entries: List[str] = []
    env_value = os.environ.get("LIBDEPS_CONFIG_DIR")
    if env_value:
        entries.extend(_split_config_values([env_value]))
    entries.extend(_split_config_values(cli_values))

    if not entries:
        return [workspace / "config"]

    directories: List[Path] = []
    for entry in entries:
        path = Path(entry)
        if not path.is_absolute():
            path = workspace / path
        directories.append(path)
    return directories


def _dry_run_factory(path: Path, *, append: bool) -> GeneratedFileWriter:
    return RecordingWriter(path)


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    parser = ArgumentParser(
        prog="libdeps",
        description="Export library link dependencies as a CMake script",
    )
    parser.add_argument(
        "-C",
        "--config-dir",
        dest="config_dirs",
        action="append",
        default=[],
        metavar="PATH",
        help="Build description directory (repeat or separate with PATH separator)",
    )
    parser.add_argument("-n", "--dry-run", action="store_true", help="Print the generated script instead of writing it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output (maps to debug)")
    parser.add_argument(
        "-l",
        "--log-level",
        choices=list(Console.LEVELS),
        default=None,
        help="Set log level (default: from [global] log_level, else error)",
    )
    parser.add_argument(
        "arguments",
        nargs="*",
        metavar="FILE [APPEND]",
        help="Destination file, optionally followed by APPEND",
    )
    return parser.parse_args(list(argv))


def _select_log_level(args: Namespace, configured: str) -> str:
    if args.log_level:
        return args.log_level
    if args.verbose:
        return "debug"
    return configured


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    workspace = Path.cwd()
    return _handle_export(args, workspace)


def _handle_export(args: Namespace, workspace: Path) -> int:
    try:
        ExportRequest.from_arguments(args.arguments)
    except UsageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        directories = _resolve_description_directories(workspace, args.config_dirs)
        description = BuildDescription.from_directories(workspace, directories)
        # Dry runs print the script on stdout, so progress lines go to stderr.
        console = Console(
            _select_log_level(args, description.global_config.log_level),
            stream=sys.stderr if args.dry_run else None,
        )
        for name, count in description.model.summary().items():
            console.debug(f"Loaded {count} target(s) from {name}")

        ctx = Context(model=description.model, console=console, workspace=workspace)
        writer_factory = _dry_run_factory if args.dry_run else make_writer
        writer = export_library_dependencies(ctx, args.arguments, writer_factory=writer_factory)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if isinstance(writer, RecordingWriter):
        sys.stdout.write(writer.text)
    return 0


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


__all__ = ["main", "run"]
