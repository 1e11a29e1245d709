"""Load build descriptions for libdeps from TOML, JSON or YAML files."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

from core.config_loader import (
    collect_config_files,
    load_config_file,
    merge_mappings,
    normalize_string_list,
    resolve_config_paths,
)

from .model import BuildModel, LinkEntry, LinkType, SubConfiguration, TargetKind, TargetRecord

GLOBAL_CONFIG_STEM = "config"


@dataclass(slots=True)
class GlobalConfig:
    log_level: str = "error"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GlobalConfig":
        global_section = data.get("global", {}) if isinstance(data, Mapping) else {}
        if not isinstance(global_section, Mapping):
            raise TypeError("[global] must be a table")
        return cls(log_level=str(global_section.get("log_level", "error")).lower())


def _parse_link_entry(value: Any, *, owner: str) -> LinkEntry:
    if isinstance(value, str):
        name = value.strip()
        if not name:
            raise ValueError(f"Target '{owner}' has an empty link library entry")
        return LinkEntry(name=name)
    if isinstance(value, Mapping):
        raw_name = value.get("name")
        if not isinstance(raw_name, str) or not raw_name.strip():
            raise ValueError(f"Link libraries of target '{owner}' must include a non-empty 'name'")
        raw_type = value.get("type", LinkType.GENERAL.keyword)
        if not isinstance(raw_type, str):
            raise TypeError(f"Link type of '{raw_name}' in target '{owner}' must be a string")
        return LinkEntry(name=raw_name.strip(), link_type=LinkType.parse(raw_type))
    raise TypeError(f"Link libraries of target '{owner}' must be strings or tables")


def parse_target(data: Mapping[str, Any]) -> TargetRecord:
    """Build a :class:`TargetRecord` from one ``[[targets]]`` table."""

    if not isinstance(data, Mapping):
        raise TypeError("[[targets]] entries must be tables")

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("targets.name is required")
    name = name.strip()

    raw_kind = data.get("type", TargetKind.STATIC_LIBRARY.name)
    if not isinstance(raw_kind, str):
        raise TypeError(f"targets.type of '{name}' must be a string")
    kind = TargetKind.parse(raw_kind)

    properties: Dict[str, Any] = {}
    properties_section = data.get("properties")
    if properties_section is not None:
        if not isinstance(properties_section, Mapping):
            raise TypeError(f"targets.properties of '{name}' must be a table")
        for key, value in properties_section.items():
            properties[str(key)] = value

    output_name = data.get("output_name")
    if output_name is not None:
        properties[TargetRecord.OUTPUT_NAME] = str(output_name)

    libraries_section = data.get("link_libraries", [])
    if isinstance(libraries_section, (str, bytes)) or not isinstance(libraries_section, Sequence):
        raise TypeError(f"targets.link_libraries of '{name}' must be an array")
    link_libraries = [_parse_link_entry(entry, owner=name) for entry in libraries_section]

    return TargetRecord(name=name, kind=kind, link_libraries=link_libraries, properties=properties)


@dataclass(slots=True)
class DirectoryDescription:
    targets: List[TargetRecord] = field(default_factory=list)
    subdirectories: List[str] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "DirectoryDescription":
        targets_section = data.get("targets", [])
        if isinstance(targets_section, (str, bytes)) or not isinstance(targets_section, Sequence):
            raise TypeError("[[targets]] must be an array of tables")
        targets = [parse_target(entry) for entry in targets_section]

        directory_section = data.get("directory", {})
        if not isinstance(directory_section, Mapping):
            raise TypeError("[directory] must be a table")
        subdirectories = normalize_string_list(
            directory_section.get("subdirectories"),
            field_name="directory.subdirectories",
        )
        return cls(targets=targets, subdirectories=subdirectories)


@dataclass(slots=True)
class BuildDescription:
    root: Path
    global_config: GlobalConfig
    model: BuildModel
    directories: tuple[Path, ...] = field(default_factory=tuple)

    @classmethod
    def from_directories(cls, root: Path, directories: Iterable[Path]) -> "BuildDescription":
        resolved_dirs, missing_dirs = resolve_config_paths(root, directories)
        if missing_dirs:
            missing_display = ", ".join(str(path) for path in missing_dirs)
            raise FileNotFoundError(f"Description directories not found: {missing_display}")
        if not resolved_dirs:
            raise FileNotFoundError("No description directories were provided")

        loader = _DescriptionLoader(root)
        for directory in resolved_dirs:
            loader.load_directory(directory)

        return cls(
            root=root,
            directories=tuple(loader.visited),
            global_config=GlobalConfig.from_mapping(loader.global_data),
            model=loader.model,
        )


class _DescriptionLoader:
    """Walk description directories depth-first, parents before children."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.model = BuildModel()
        self.global_data: Mapping[str, Any] = {}
        self.visited: List[Path] = []

    def _display_name(self, directory: Path) -> str:
        try:
            return directory.relative_to(self.root.resolve()).as_posix() or "."
        except ValueError:
            return directory.as_posix()

    def load_directory(self, directory: Path) -> None:
        directory = directory.resolve()
        if directory in self.visited:
            raise ValueError(f"Directory '{directory}' is described more than once")
        self.visited.append(directory)

        files = collect_config_files(directory)
        global_path = files.pop(GLOBAL_CONFIG_STEM, None)
        if global_path is not None:
            self.global_data = merge_mappings(self.global_data, load_config_file(global_path))

        sub_configuration = self.model.add_sub_configuration(
            SubConfiguration(name=self._display_name(directory))
        )
        subdirectories: List[str] = []
        for _, path in sorted(files.items()):
            data = load_config_file(path)
            try:
                description = DirectoryDescription.from_mapping(data)
            except TypeError as error:
                raise TypeError(f"{path}: {error}") from error
            except ValueError as error:
                raise ValueError(f"{path}: {error}") from error
            for target in description.targets:
                sub_configuration.add_target(target)
            subdirectories.extend(description.subdirectories)

        for entry in subdirectories:
            child = Path(entry)
            if not child.is_absolute():
                child = directory / child
            if not child.is_dir():
                raise FileNotFoundError(f"Subdirectory '{entry}' of '{directory}' not found")
            self.load_directory(child)


__all__ = [
    "BuildDescription",
    "DirectoryDescription",
    "GlobalConfig",
    "parse_target",
]
