"""Worklist of lines selected by a global command."""

from __future__ import annotations

from typing import List, Optional

from .arena import LineArena


class ActiveLineSet:
    """Append-only list of arena indices drained once, front to back.

    Retracted entries are tombstoned in place so the read cursor never
    has to move backwards.
    """

    def __init__(self, arena: LineArena) -> None:
        self._arena = arena
        self._slots: List[Optional[int]] = []
        self._read = 0
        self._scan = 0

    def __len__(self) -> int:
        return sum(1 for slot in self._slots[self._read :] if slot is not None)

    def clear(self) -> None:
        self._slots = []
        self._read = 0
        self._scan = 0

    def add(self, index: int) -> None:
        self._slots.append(index)

    def next(self) -> Optional[int]:
        """Return the next live entry, or ``None`` once drained."""

        while self._read < len(self._slots):
            index = self._slots[self._read]
            self._read += 1
            if index is not None:
                return index
        return None

    def retract(self, start: int, stop: int) -> None:
        """Tombstone every entry in the link-order run ``start..stop``."""

        for index in self._arena.iter_run(start, stop):
            self._tombstone(index)

    def _tombstone(self, index: int) -> None:
        size = len(self._slots)
        if not size:
            return
        position = self._scan % size
        for _ in range(size):
            if self._slots[position] == index:
                self._slots[position] = None
                self._scan = position
                return
            position = (position + 1) % size


__all__ = ["ActiveLineSet"]
