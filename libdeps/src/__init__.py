"""
libdeps - library dependency exporter
"""

from .context import Console, Context
from .description import BuildDescription, GlobalConfig
from .exporter import (
    LibraryDependencyExport,
    LinkTypeMerger,
    UsageError,
    export_library_dependencies,
    render_export,
)
from .model import BuildModel, LinkEntry, LinkType, SubConfiguration, TargetKind, TargetRecord
