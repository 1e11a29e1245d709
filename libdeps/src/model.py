"""In-memory build description: targets, link entries and sub-configurations."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Mapping


class TargetKind(Enum):
    """Target classification, ordered as the build system declares it."""

    EXECUTABLE = 0
    STATIC_LIBRARY = 1
    SHARED_LIBRARY = 2
    MODULE_LIBRARY = 3
    OBJECT_LIBRARY = 4
    UTILITY = 5
    GLOBAL_TARGET = 6
    INTERFACE_LIBRARY = 7
    UNKNOWN_LIBRARY = 8

    @property
    def is_linkable_library(self) -> bool:
        return TargetKind.STATIC_LIBRARY.value <= self.value <= TargetKind.MODULE_LIBRARY.value

    @classmethod
    def parse(cls, value: str) -> "TargetKind":
        key = value.strip().upper()
        try:
            return cls[key]
        except KeyError:
            allowed = ", ".join(kind.name for kind in cls)
            raise ValueError(f"Unknown target type '{value}' (allowed: {allowed})") from None


class LinkType(Enum):
    GENERAL = "general"
    DEBUG = "debug"
    OPTIMIZED = "optimized"

    @property
    def keyword(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "LinkType":
        try:
            return cls(value.strip().lower())
        except ValueError:
            allowed = ", ".join(link_type.value for link_type in cls)
            raise ValueError(f"Unknown link type '{value}' (allowed: {allowed})") from None


@dataclass(frozen=True, slots=True)
class LinkEntry:
    name: str
    link_type: LinkType = LinkType.GENERAL


@dataclass(slots=True)
class TargetRecord:
    name: str
    kind: TargetKind
    link_libraries: List[LinkEntry] = field(default_factory=list)
    properties: Dict[str, Any] = field(default_factory=dict)

    OUTPUT_NAME = "OUTPUT_NAME"

    def get_property(self, name: str) -> Any | None:
        return self.properties.get(name)

    @property
    def output_name(self) -> str | None:
        value = self.get_property(self.OUTPUT_NAME)
        return None if value is None else str(value)


@dataclass(slots=True)
class SubConfiguration:
    """Targets declared by one directory of the project, in declaration order."""

    name: str
    targets: List[TargetRecord] = field(default_factory=list)

    def add_target(self, target: TargetRecord) -> TargetRecord:
        self.targets.append(target)
        return target


@dataclass(slots=True)
class BuildModel:
    """Ordered registry of every sub-configuration of one project.

    The model is read-only once loaded; lookups scan sub-configurations in
    registration order so the first declaration of a name wins.
    """

    sub_configurations: List[SubConfiguration] = field(default_factory=list)

    @classmethod
    def from_targets(cls, targets: Iterable[TargetRecord], *, name: str = ".") -> "BuildModel":
        return cls([SubConfiguration(name=name, targets=list(targets))])

    def add_sub_configuration(self, sub_configuration: SubConfiguration) -> SubConfiguration:
        self.sub_configurations.append(sub_configuration)
        return sub_configuration

    def iter_targets(self) -> Iterator[TargetRecord]:
        for sub_configuration in self.sub_configurations:
            yield from sub_configuration.targets

    def find_target(self, name: str) -> TargetRecord | None:
        for target in self.iter_targets():
            if target.name == name:
                return target
        return None

    def summary(self) -> Mapping[str, int]:
        return {sub.name: len(sub.targets) for sub in self.sub_configurations}


__all__ = [
    "BuildModel",
    "LinkEntry",
    "LinkType",
    "SubConfiguration",
    "TargetKind",
    "TargetRecord",
]
