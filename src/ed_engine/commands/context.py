"""Shared services and helpers every command handler works with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from ed_engine.buffer import LineStore
from ed_engine.config import EdConfig
from ed_engine.errors import (
    AddressError,
    CommandSyntaxError,
    StateError,
    UnsupportedError,
)
from ed_engine.host import Console, FileStore
from ed_engine.pattern import PRINT_FLAGS, PatternEngine
from ed_engine.scanner import BLANKS, CommandScanner

from .address import AddressRange

if TYPE_CHECKING:
    from .interpreter import Interpreter


@dataclass(slots=True)
class EditorContext:
    """Everything a command can touch; owned by the session."""

    store: LineStore
    patterns: PatternEngine
    console: Console
    files: FileStore
    config: EdConfig = field(default_factory=EdConfig)
    default_filename: Optional[str] = None
    last_error: Optional[str] = None
    # the previous command failed with the unsaved-changes warning
    warned: bool = False


@dataclass(slots=True)
class CommandRequest:
    """One parsed command letter plus its addresses and remaining text."""

    interpreter: "Interpreter"
    letter: str
    addresses: AddressRange
    scanner: CommandScanner
    in_global: bool = False

    @property
    def context(self) -> EditorContext:
        return self.interpreter.context

    @property
    def store(self) -> LineStore:
        return self.interpreter.context.store


@dataclass(slots=True)
class CommandResult:
    """Outcome of a handler: quit request and the print flags to apply."""

    quit: bool = False
    print_flags: str = ""


CommandHandler = Callable[[CommandRequest], CommandResult]


class AddressWindow:
    """Mutable copy of a request's addresses with the handler checks."""

    __slots__ = ("first", "second", "count", "_store")

    def __init__(self, request: CommandRequest) -> None:
        self.first = request.addresses.first
        self.second = request.addresses.second
        self.count = request.addresses.count
        self._store = request.store

    def check(self, first: int, second: int) -> None:
        """Apply defaults when no address was given, then validate."""

        if self.count == 0:
            self.first, self.second = first, second
        if (
            self.first < 1
            or self.first > self.second
            or self.second > self._store.last_addr
        ):
            raise AddressError(addr=self.second)

    def check_current(self) -> None:
        current = self._store.current_addr
        self.check(current, current)


def read_suffix(scanner: CommandScanner) -> str:
    """Trailing ``l``/``n``/``p`` flags, then the end of the command."""

    flags = ""
    while True:
        flag = scanner.accept(PRINT_FLAGS)
        if not flag:
            break
        if flag not in flags:
            flags += flag
    scanner.expect_newline()
    return flags


def reject_address(window: AddressWindow) -> None:
    if window.count > 0:
        raise CommandSyntaxError("unexpected address")


def reject_suffix(scanner: CommandScanner) -> None:
    """A filename command must be followed by whitespace or the newline."""

    char = scanner.peek()
    if char and char not in BLANKS and char != "\n":
        raise CommandSyntaxError("unexpected command suffix")


def read_extended(scanner: CommandScanner, *, strip: bool) -> str:
    """Rest of the line, joined across backslash-escaped newlines.

    With ``strip`` the escaped newlines vanish (filenames); otherwise
    they become real newlines (global command lists). The result has no
    trailing newline.
    """

    line = scanner.take_line()
    while _odd_trailing_backslashes(line):
        line = line[:-1] + ("" if strip else "\n")
        more = scanner.next_input_line()
        if more is None:
            raise CommandSyntaxError("unexpected end-of-file")
        line += more
    return line


def _odd_trailing_backslashes(line: str) -> bool:
    stripped = line.rstrip("\\")
    return (len(line) - len(stripped)) % 2 == 1


def read_filename(
    request: CommandRequest, *, silent: bool = False, shell: bool = False
) -> str:
    """Filename argument, or ``""`` to mean the default filename.

    ``silent`` skips the default-filename check (the ``P`` prompt
    argument). A ``!`` name is returned as is when ``shell`` is set so
    the caller can word its own error.
    """

    scanner = request.scanner
    scanner.skip_blanks()
    if scanner.peek() in ("\n", ""):
        scanner.take()
        if not silent and request.context.default_filename is None:
            raise StateError("no current filename")
        return ""
    name = read_extended(scanner, strip=True)
    if not silent and not shell and name.startswith("!"):
        raise UnsupportedError("shell commands are not implemented")
    return name


def read_text(request: CommandRequest) -> list[str]:
    """Input lines for ``a``, ``i`` and ``c`` up to a lone ``.``."""

    lines: list[str] = []
    while True:
        line = request.scanner.next_input_line()
        if line is None or line == ".":
            return lines
        lines.append(line)


def display(context: EditorContext, first: int, second: int, flags: str) -> None:
    """Print ``first..second``; each printed line becomes current."""

    store = context.store
    for addr in range(first, second + 1):
        store.current_addr = addr
        context.console.show_line(
            store.text(addr),
            number=addr if "n" in flags else None,
            literal="l" in flags,
        )


def show_count(context: EditorContext, size: int) -> None:
    if not context.config.scripted:
        context.console.show_message(str(size))


__all__ = [
    "AddressWindow",
    "CommandHandler",
    "CommandRequest",
    "CommandResult",
    "EditorContext",
    "display",
    "read_extended",
    "read_filename",
    "read_suffix",
    "read_text",
    "reject_address",
    "reject_suffix",
    "show_count",
]
