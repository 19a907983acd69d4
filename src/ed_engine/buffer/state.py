"""Cursor, line count, and dirty flag of the line buffer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class BufferState:
    """Addresses are 1-based; ``current_addr == 0`` means before line 1."""

    current_addr: int = 0
    last_addr: int = 0
    modified: bool = False

    def copy(self) -> "BufferState":
        return BufferState(self.current_addr, self.last_addr, self.modified)

    def restore(self, other: "BufferState") -> None:
        self.current_addr = other.current_addr
        self.last_addr = other.last_addr
        self.modified = other.modified


__all__ = ["BufferState"]
