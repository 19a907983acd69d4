"""Cursor over the text of one command, with on-demand continuation lines."""

from __future__ import annotations

from typing import Callable, Optional

from ed_engine.errors import CommandSyntaxError

LineSource = Callable[[], Optional[str]]

BLANKS = " \t"
DIGITS = "0123456789"


class CommandScanner:
    """Character-level reader over newline-terminated command text.

    ``read_more`` supplies further input lines when a construct (an
    escaped newline in a template, the text of an ``a`` command) runs
    past the end of the text already buffered. Without it, reaching the
    end simply means end of input.
    """

    def __init__(self, text: str, *, read_more: Optional[LineSource] = None) -> None:
        self.text = text
        self.pos = 0
        self._read_more = read_more

    def __repr__(self) -> str:
        return f"CommandScanner(pos={self.pos}, rest={self.rest()!r})"

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def take(self) -> str:
        char = self.peek()
        if char:
            self.pos += 1
        return char

    def accept(self, chars: str) -> str:
        """Consume and return the next char if it is one of ``chars``."""

        char = self.peek()
        if char and char in chars:
            self.pos += 1
            return char
        return ""

    def skip_blanks(self) -> None:
        while self.peek() and self.peek() in BLANKS:
            self.pos += 1

    def at_digit(self) -> bool:
        char = self.peek()
        return bool(char) and char in DIGITS

    def read_int(self) -> Optional[int]:
        start = self.pos
        while self.at_digit():
            self.pos += 1
        if start == self.pos:
            return None
        return int(self.text[start : self.pos])

    def rest(self) -> str:
        return self.text[self.pos :]

    def take_line(self) -> str:
        """Consume through the next newline and return the line without it."""

        end = self.text.find("\n", self.pos)
        if end < 0:
            line = self.text[self.pos :]
            self.pos = len(self.text)
            return line
        line = self.text[self.pos : end]
        self.pos = end + 1
        return line

    def extend(self) -> bool:
        """Append one more input line; ``False`` at end of input."""

        if self._read_more is None:
            return False
        line = self._read_more()
        if line is None:
            return False
        if not line.endswith("\n"):
            line += "\n"
        self.text += line
        return True

    def next_input_line(self) -> Optional[str]:
        """Return the next line of text input, buffered text first."""

        if self.at_end() and not self.extend():
            return None
        return self.take_line()

    def expect_newline(self) -> None:
        if self.peek() not in ("\n", ""):
            raise CommandSyntaxError("invalid command suffix")
        self.take()


__all__ = ["BLANKS", "DIGITS", "CommandScanner", "LineSource"]
