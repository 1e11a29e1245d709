"""Export direct link dependencies of library targets as a CMake script.

The generated script carries two views of the same information. CMake 2.6
and newer read ``<target>_LIB_DEPENDS`` lists with an inline qualifier before
every library. CMake 2.4 and older read bare library lists plus one
``<library>_LINK_TYPE`` variable per library that is not linked in general.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Sequence, TextIO, Tuple

from core.generated_file import GeneratedFileWriter, make_writer

from .context import Context
from .model import BuildModel, LinkType, TargetRecord

LIB_DEPENDS_SUFFIX = "_LIB_DEPENDS"
LINK_TYPE_SUFFIX = "_LINK_TYPE"
APPEND_MARKER = "APPEND"
GENERATOR_NAME = "CMake"
VERSION_TEST = '"${CMAKE_MAJOR_VERSION}.${CMAKE_MINOR_VERSION}" GREATER 2.4'

WriterFactory = Callable[..., GeneratedFileWriter]


class UsageError(ValueError):
    """Raised when the export command is invoked without a destination."""


@dataclass(slots=True)
class ExportRequest:
    filename: Path
    append: bool = False

    @classmethod
    def from_arguments(cls, args: Sequence[str]) -> "ExportRequest":
        if not args:
            raise UsageError("called with incorrect number of arguments")
        append = len(args) > 1 and args[1] == APPEND_MARKER
        return cls(filename=Path(args[0]), append=append)


def collect_library_targets(model: BuildModel) -> Iterator[TargetRecord]:
    """Yield static, shared and module library targets in registry order."""

    for target in model.iter_targets():
        if target.kind.is_linkable_library:
            yield target


def resolve_link_name(model: BuildModel, name: str) -> str:
    """Return the on-disk name for a link dependency.

    Only a plain ``OUTPUT_NAME`` override on a target found by exact name is
    honoured; per-configuration names are not translated.
    """

    target = model.find_target(name)
    if target is None:
        return name
    output_name = target.output_name
    return name if output_name is None else output_name


class LinkTypeMerger:
    """Project-wide merge of the qualifiers each library is linked with.

    The first qualifier seen for a library wins until another target or entry
    disagrees, at which point the library falls back to ``general``.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    @staticmethod
    def variable_name(name: str) -> str:
        return f"{name}{LINK_TYPE_SUFFIX}"

    def observe(self, name: str, link_type: LinkType) -> None:
        key = self.variable_name(name)
        value = link_type.keyword
        current = self._entries.get(key)
        if current is None:
            self._entries[key] = value
        elif current != value:
            self._entries[key] = LinkType.GENERAL.keyword

    def entries(self) -> List[Tuple[str, str]]:
        """Return sorted ``(variable, qualifier)`` pairs, leaving out ``general``."""

        return [
            (key, value)
            for key, value in sorted(self._entries.items())
            if value != LinkType.GENERAL.keyword
        ]


@dataclass(slots=True)
class LibraryDependencyExport:
    """Dependency variables collected from one build model."""

    new_style: Dict[str, List[str]] = field(default_factory=dict)
    old_style: Dict[str, List[str]] = field(default_factory=dict)
    link_types: LinkTypeMerger = field(default_factory=LinkTypeMerger)

    @classmethod
    def from_model(cls, model: BuildModel, console=None) -> "LibraryDependencyExport":
        export = cls()
        for target in collect_library_targets(model):
            export.add_target(model, target)
            if console is not None:
                console.debug(
                    f"{target.name}: {len(target.link_libraries)} link dependencies"
                )
        return export

    @staticmethod
    def variable_name(target_name: str) -> str:
        return f"{target_name}{LIB_DEPENDS_SUFFIX}"

    def add_target(self, model: BuildModel, target: TargetRecord) -> None:
        new_tokens: List[str] = []
        old_tokens: List[str] = []
        for entry in target.link_libraries:
            library = resolve_link_name(model, entry.name)
            new_tokens.extend((entry.link_type.keyword, library))
            old_tokens.append(library)
            self.link_types.observe(entry.name, entry.link_type)

        key = self.variable_name(target.name)
        self.new_style[key] = new_tokens
        self.old_style[key] = old_tokens

    def write(self, stream: TextIO) -> None:
        stream.write(render_export(self))


def format_list(tokens: Iterable[str]) -> str:
    """Join tokens into a semicolon-terminated CMake list value."""

    return "".join(f"{token};" for token in tokens)


def _set_lines(entries: Iterable[Tuple[str, str]]) -> List[str]:
    return [f'  set("{key}" "{value}")\n' for key, value in entries if value]


def render_export(export: LibraryDependencyExport) -> str:
    """Render the version-gated script for ``export``."""

    new_entries = ((key, format_list(tokens)) for key, tokens in sorted(export.new_style.items()))
    old_entries = ((key, format_list(tokens)) for key, tokens in sorted(export.old_style.items()))

    lines: List[str] = [
        f"# Generated by {GENERATOR_NAME}\n",
        "\n",
        f"if({VERSION_TEST})\n",
        "  # Information for CMake 2.6 and above.\n",
    ]
    lines.extend(_set_lines(new_entries))
    lines.append("else()\n")
    lines.append("  # Information for CMake 2.4 and lower.\n")
    lines.extend(_set_lines(old_entries))
    lines.extend(_set_lines(export.link_types.entries()))
    lines.append("endif()\n")
    return "".join(lines)


def export_library_dependencies(
    ctx: Context,
    args: Sequence[str],
    *,
    writer_factory: WriterFactory = make_writer,
) -> GeneratedFileWriter:
    """Write the dependency script described by ``args`` for ``ctx.model``.

    ``args`` are the CMake command arguments: a destination path and an
    optional ``APPEND`` marker. The writer is opened before any collection
    so an unwritable destination stops the export immediately.
    """

    request = ExportRequest.from_arguments(args)
    destination = request.filename
    if not destination.is_absolute():
        destination = ctx.workspace / destination

    writer = writer_factory(destination, append=request.append)
    with writer.open() as stream:
        export = LibraryDependencyExport.from_model(ctx.model, ctx.console)
        export.write(stream)

    ctx.console.info(writer.summary("library dependencies"))
    return writer


__all__ = [
    "APPEND_MARKER",
    "ExportRequest",
    "LibraryDependencyExport",
    "LinkTypeMerger",
    "UsageError",
    "VERSION_TEST",
    "collect_library_targets",
    "export_library_dependencies",
    "format_list",
    "render_export",
    "resolve_link_name",
]
