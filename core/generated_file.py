"""Writers for generated files with copy-if-different and append semantics."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import ContextManager, Iterator, TextIO
import filecmp
import io
import os


class OutputOpenError(OSError):
    """Raised when the destination stream for a generated file cannot be opened."""

    def __init__(self, path: Path, error: OSError):
        reason = error.strerror or str(error)
        message = f"Error Writing {path}"
        if reason:
            message = f"{message}\n{reason}"
        super().__init__(message)
        self.errno = error.errno
        self.path = path
        self.reason = reason


class GeneratedFileWriter:
    """Abstract destination for generated text.

    ``open()`` returns a context manager yielding a text stream. After the
    block exits cleanly, ``changed`` reports whether the destination was
    modified and ``summary()`` describes what happened to it.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.changed = False

    def open(self) -> ContextManager[TextIO]:
        raise NotImplementedError

    def summary(self, label: str) -> str:
        if self.changed:
            return f"Wrote {label} to {self.path}"
        return f"{self.path} is up to date"

    def _open_text(self, target: Path, mode: str) -> TextIO:
        try:
            return open(target, mode, encoding="utf-8", newline="\n")
        except OSError as error:
            raise OutputOpenError(self.path, error) from error


class CopyIfDifferentWriter(GeneratedFileWriter):
    """Write into a sibling temporary file and promote it only when content changed.

    Leaving an identical destination in place keeps its timestamp, so build
    tools watching the file do not see a spurious change. The temporary file
    never outlives ``open()``, whether the body or the promotion fails.
    """

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.tmp")

    @contextmanager
    def open(self) -> Iterator[TextIO]:
        temp_path = self.temp_path
        handle = self._open_text(temp_path, "w")
        try:
            with handle:
                yield handle
            self.changed = self._promote(temp_path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

    def _promote(self, temp_path: Path) -> bool:
        if self.path.is_file() and filecmp.cmp(temp_path, self.path, shallow=False):
            temp_path.unlink()
            return False
        os.replace(temp_path, self.path)
        return True


class AppendWriter(GeneratedFileWriter):
    """Append to the end of the destination without inspecting existing content."""

    @contextmanager
    def open(self) -> Iterator[TextIO]:
        handle = self._open_text(self.path, "a")
        with handle:
            yield handle
        self.changed = True

    def summary(self, label: str) -> str:
        return f"Appended {label} to {self.path}"


class RecordingWriter(GeneratedFileWriter):
    """Writer that captures generated text in memory instead of touching disk."""

    def __init__(self, path: Path) -> None:
        super().__init__(path)
        self.text = ""

    @contextmanager
    def open(self) -> Iterator[TextIO]:
        buffer = io.StringIO(newline="\n")
        yield buffer
        self.text = buffer.getvalue()

    def summary(self, label: str) -> str:
        return f"[dry-run] Rendered {label} for {self.path}; nothing written"


def make_writer(path: Path, *, append: bool) -> GeneratedFileWriter:
    """Return the append writer when ``append`` is set, the copy-if-different writer otherwise."""

    return AppendWriter(path) if append else CopyIfDifferentWriter(path)


__all__ = [
    "AppendWriter",
    "CopyIfDifferentWriter",
    "GeneratedFileWriter",
    "OutputOpenError",
    "RecordingWriter",
    "make_writer",
]
