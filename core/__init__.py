"""Shared core utilities for loading descriptions and writing generated files."""

from .config_loader import (
    collect_config_files,
    load_config_file,
    merge_mappings,
    normalize_string_list,
    resolve_config_paths,
)
from .generated_file import (
    AppendWriter,
    CopyIfDifferentWriter,
    GeneratedFileWriter,
    OutputOpenError,
    RecordingWriter,
    make_writer,
)

__all__ = [
    "collect_config_files",
    "load_config_file",
    "merge_mappings",
    "normalize_string_list",
    "resolve_config_paths",
    "AppendWriter",
    "CopyIfDifferentWriter",
    "GeneratedFileWriter",
    "OutputOpenError",
    "RecordingWriter",
    "make_writer",
]
