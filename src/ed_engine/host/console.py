"""Terminal-side collaborators: line input, display, and diagnostics."""

from __future__ import annotations

import sys
from collections import deque
from typing import Deque, Iterable, List, Optional, Protocol, TextIO

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
}


class Console(Protocol):
    """What the engine needs from a terminal."""

    def read_line(self) -> Optional[str]:
        """Return one newline-terminated line, or ``None`` at end of input."""
        ...

    def show_line(
        self, text: str, *, number: Optional[int] = None, literal: bool = False
    ) -> None:
        """Display a buffer line, optionally numbered or in ``l`` form."""
        ...

    def show_message(self, text: str) -> None:
        ...

    def show_error(self, text: str) -> None:
        ...

    def show_prompt(self, text: str) -> None:
        ...


def _literal_pieces(text: str) -> Iterable[str]:
    for char in text:
        if char in _ESCAPES:
            yield _ESCAPES[char]
        elif char.isascii() and char.isprintable():
            yield char
        else:
            yield "".join(
                f"\\{byte:03o}"
                for byte in char.encode("utf-8", errors="surrogateescape")
            )


def format_line(
    text: str,
    *,
    number: Optional[int] = None,
    literal: bool = False,
    columns: int = 72,
) -> str:
    """Render a line the way ``p``, ``n`` and ``l`` print it.

    The ``l`` form escapes control and non-ASCII characters, folds at
    ``columns`` with a trailing backslash, and marks the end with ``$``.
    """

    prefix = f"{number}\t" if number is not None else ""
    if not literal:
        return prefix + text

    out: List[str] = [prefix]
    indent = 8 if prefix else 0
    column = indent
    for piece in _literal_pieces(text):
        if column + len(piece) > columns:
            out.append("\\\n")
            column = 0
            if prefix:
                out.append("\t")
                column = indent
        out.append(piece)
        column += len(piece)
    out.append("$")
    return "".join(out)


class StreamConsole:
    """Console over text streams (stdin/stdout/stderr by default)."""

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        *,
        columns: int = 72,
    ) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.columns = columns

    def read_line(self) -> Optional[str]:
        line = self.stdin.readline()
        return line or None

    def show_line(
        self, text: str, *, number: Optional[int] = None, literal: bool = False
    ) -> None:
        rendered = format_line(text, number=number, literal=literal, columns=self.columns)
        self.stdout.write(rendered + "\n")

    def show_message(self, text: str) -> None:
        self.stdout.write(text + "\n")

    def show_error(self, text: str) -> None:
        self.stdout.flush()
        self.stderr.write(text + "\n")
        self.stderr.flush()

    def show_prompt(self, text: str) -> None:
        self.stdout.write(text)
        self.stdout.flush()


class ScriptConsole:
    """In-memory console: scripted input, recorded output.

    ``output`` collects rendered lines and messages in order, ``errors``
    collects diagnostics.
    """

    def __init__(self, script: str | Iterable[str] = "", *, columns: int = 72) -> None:
        self.columns = columns
        self._input: Deque[str] = deque()
        self.output: List[str] = []
        self.errors: List[str] = []
        self.prompts: List[str] = []
        self.feed(script)

    def feed(self, script: str | Iterable[str]) -> None:
        lines = script.splitlines() if isinstance(script, str) else list(script)
        for line in lines:
            self._input.append(line if line.endswith("\n") else line + "\n")

    @property
    def pending(self) -> int:
        return len(self._input)

    def read_line(self) -> Optional[str]:
        if not self._input:
            return None
        return self._input.popleft()

    def show_line(
        self, text: str, *, number: Optional[int] = None, literal: bool = False
    ) -> None:
        self.output.append(
            format_line(text, number=number, literal=literal, columns=self.columns)
        )

    def show_message(self, text: str) -> None:
        self.output.append(text)

    def show_error(self, text: str) -> None:
        self.errors.append(text)

    def show_prompt(self, text: str) -> None:
        self.prompts.append(text)


__all__ = ["Console", "ScriptConsole", "StreamConsole", "format_line"]
