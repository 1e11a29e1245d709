"""Read build description files and the small helpers the description loader needs."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

import json
import tomllib

import yaml


_DECODERS: Dict[str, Callable[[bytes], Any]] = {
    ".toml": lambda raw: tomllib.loads(raw.decode("utf-8")),
    ".json": lambda raw: json.loads(raw.decode("utf-8")),
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
}


def load_config_file(path: Path) -> Mapping[str, Any]:
    """Decode the mapping stored in ``path``, choosing the format by suffix.

    An empty document yields an empty mapping.
    """

    decoder = _DECODERS.get(path.suffix.lower())
    if decoder is None:
        supported = ", ".join(sorted(_DECODERS))
        raise ValueError(
            f"Unsupported description file extension: {path.suffix}. Supported: {supported}"
        )

    data = decoder(path.read_bytes())
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Description file '{path}' must contain a mapping at the root")
    return data


def collect_config_files(directory: Path) -> Dict[str, Path]:
    """Map each description file stem in ``directory`` to its path.

    Subdirectories and files of other formats are ignored. A stem present in
    two formats is an error.
    """

    files: Dict[str, Path] = {}
    for path in sorted(directory.iterdir()):
        if not path.is_file() or path.suffix.lower() not in _DECODERS:
            continue
        other = files.setdefault(path.stem, path)
        if other != path:
            raise ValueError(
                f"Multiple description files found for '{path.stem}': "
                f"'{other.name}' and '{path.name}'. Only one format per entry is allowed."
            )
    return files


def merge_mappings(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated by ``overlay``, merging nested tables key by key."""

    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            value = merge_mappings(current, value)
        merged[key] = value
    return merged


def normalize_string_list(value: Any, *, field_name: str | None = None) -> List[str]:
    """Accept one string or a list of strings and return the non-blank entries, stripped."""

    label = f"{field_name} " if field_name else ""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, Sequence):
        raise TypeError(f"{label}must be a string or sequence of strings")

    items: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise TypeError(f"{label}entries must be strings")
        if item.strip():
            items.append(item.strip())
    return items


def resolve_config_paths(
    root: Path, directories: Iterable[Path]
) -> tuple[tuple[Path, ...], tuple[Path, ...]]:
    """Resolve ``directories`` against ``root`` and split them into existing and missing.

    A directory listed more than once keeps only its last position.
    """

    ordered: Dict[Path, None] = {}
    for raw in directories:
        path = (root / raw).resolve()
        ordered.pop(path, None)
        ordered[path] = None

    existing = tuple(path for path in ordered if path.is_dir())
    missing = tuple(path for path in ordered if not path.is_dir())
    return existing, missing


__all__ = [
    "collect_config_files",
    "load_config_file",
    "merge_mappings",
    "normalize_string_list",
    "resolve_config_paths",
]
