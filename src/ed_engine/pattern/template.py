"""Replacement templates for the ``s`` command."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple, Union

Part = Union[str, int]  # literal text or a group number (0 is the whole match)


@dataclass(frozen=True, slots=True)
class Template:
    """Parsed replacement: ``&`` and ``\\1``..``\\9`` become group parts."""

    source: str
    parts: Tuple[Part, ...]

    @property
    def max_group(self) -> int:
        groups = [part for part in self.parts if isinstance(part, int)]
        return max(groups, default=0)

    def expand(self, match: re.Match[str]) -> str:
        pieces: List[str] = []
        for part in self.parts:
            if isinstance(part, int):
                pieces.append(match.group(part) or "")
            else:
                pieces.append(part)
        return "".join(pieces)


def parse_template(source: str) -> Template:
    """Parse raw template text as typed between the delimiters.

    ``\\&`` and ``\\\\`` are literals, a backslash before a newline keeps
    the newline (splitting the line), and any other escaped character
    stands for itself.
    """

    parts: List[Part] = []
    literal: List[str] = []

    def flush() -> None:
        if literal:
            parts.append("".join(literal))
            literal.clear()

    index = 0
    while index < len(source):
        char = source[index]
        if char == "&":
            flush()
            parts.append(0)
        elif char == "\\" and index + 1 < len(source):
            index += 1
            escaped = source[index]
            if escaped in "123456789":
                flush()
                parts.append(int(escaped))
            else:
                literal.append(escaped)
        else:
            literal.append(char)
        index += 1
    flush()
    return Template(source=source, parts=tuple(parts))


__all__ = ["Part", "Template", "parse_template"]
