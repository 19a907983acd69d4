"""File collaborators: read a named file into lines, write lines out."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ed_engine.errors import EdIOError

ENCODING = "utf-8"
ERRORS = "surrogateescape"


@dataclass(frozen=True, slots=True)
class FileContents:
    lines: Tuple[str, ...]
    size: int


class FileStore(Protocol):
    def read(self, name: str) -> FileContents:
        """Return the lines of ``name`` and its size in bytes."""
        ...

    def write(self, name: str, lines: Sequence[str], *, append: bool = False) -> int:
        """Write ``lines`` newline-terminated; return the bytes written."""
        ...


def split_lines(data: str) -> Tuple[str, ...]:
    """Split file text into lines; a missing final newline is tolerated."""

    if not data:
        return ()
    if data.endswith("\n"):
        data = data[:-1]
    return tuple(data.split("\n"))


def encoded_size(lines: Iterable[str]) -> int:
    return sum(len(line.encode(ENCODING, errors=ERRORS)) + 1 for line in lines)


def _io_error(exc: OSError, name: str) -> EdIOError:
    return EdIOError(f"{name}: {exc.strerror or exc}", filename=name)


class LocalFileStore:
    """Reads and writes files on disk relative to ``root``."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = root

    def _path(self, name: str) -> Path:
        path = Path(name)
        return self.root / path if self.root is not None else path

    def read(self, name: str) -> FileContents:
        try:
            raw = self._path(name).read_bytes()
        except OSError as exc:
            raise _io_error(exc, name) from exc
        text = raw.decode(ENCODING, errors=ERRORS)
        return FileContents(lines=split_lines(text), size=len(raw))

    def write(self, name: str, lines: Sequence[str], *, append: bool = False) -> int:
        payload = "".join(f"{line}\n" for line in lines).encode(ENCODING, errors=ERRORS)
        try:
            with self._path(name).open("ab" if append else "wb") as handle:
                handle.write(payload)
        except OSError as exc:
            raise _io_error(exc, name) from exc
        return len(payload)


class MemoryFileStore:
    """Dictionary-backed store for tests and embedded hosts."""

    def __init__(self, files: Optional[Dict[str, Sequence[str]]] = None) -> None:
        self.files: Dict[str, List[str]] = {
            name: list(lines) for name, lines in (files or {}).items()
        }

    def read(self, name: str) -> FileContents:
        if name not in self.files:
            raise EdIOError(f"{name}: No such file or directory", filename=name)
        lines = tuple(self.files[name])
        return FileContents(lines=lines, size=encoded_size(lines))

    def write(self, name: str, lines: Sequence[str], *, append: bool = False) -> int:
        existing = self.files.get(name, []) if append else []
        self.files[name] = existing + list(lines)
        return encoded_size(lines)


__all__ = [
    "FileContents",
    "FileStore",
    "LocalFileStore",
    "MemoryFileStore",
    "encoded_size",
    "split_lines",
]
