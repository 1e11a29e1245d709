"""
Context and Console classes for libdeps.
"""
from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from .model import BuildModel


class Console:
    """Simple console output handler with configurable log level.

    Levels: none < error < info < debug
    Default: 'error'

    Info and debug lines go to stdout unless ``stream`` is given, e.g. stderr
    when stdout carries generated output.
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(self, level: str = "error", stream: TextIO | None = None):
        if level not in self.LEVELS:
            allowed = ", ".join(self.LEVELS)
            raise ValueError(f"Unknown log level '{level}' (allowed: {allowed})")
        self.level_name = level
        self.level = self.LEVELS[level]
        self.stream = stream

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"[INFO] {message}", file=self.stream or sys.stdout)

    def error(self, message: str) -> None:
        if self.level >= self.LEVELS["error"]:
            print(f"[ERROR] {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(f"[DEBUG] {message}", file=self.stream or sys.stdout)


@dataclass
class Context:
    model: BuildModel
    console: Console
    workspace: Path
