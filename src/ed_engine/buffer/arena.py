"""Dense table of line records linked into a circular list by index."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, NamedTuple

HEAD = 0  # sentinel slot; never a valid line


@dataclass(slots=True)
class LineRecord:
    text: str
    prev: int = HEAD
    next: int = HEAD
    generation: int = 0


class LineRef(NamedTuple):
    """Stable handle to a line that survives slot reuse checks."""

    index: int
    generation: int


class LineArena:
    """Owns line storage; links are plain ``int`` fields.

    Slot 0 is the sentinel of the circular list. Released slots are
    recycled, and each release bumps the slot generation so that
    outstanding ``LineRef`` handles can tell they went stale.
    """

    def __init__(self) -> None:
        self._records: List[LineRecord] = [LineRecord(text="")]
        self._free: List[int] = []

    def __len__(self) -> int:
        return len(self._records) - len(self._free) - 1

    def allocate(self, text: str) -> int:
        if self._free:
            index = self._free.pop()
            self._records[index].text = text
            return index
        self._records.append(LineRecord(text=text))
        return len(self._records) - 1

    def release(self, index: int) -> None:
        if index == HEAD:
            raise ValueError("cannot release the sentinel")
        record = self._records[index]
        record.text = ""
        record.prev = record.next = HEAD
        record.generation += 1
        self._free.append(index)

    def reset(self) -> None:
        """Release every line; previously issued refs all become stale."""

        free = set(self._free)
        for index in range(1, len(self._records)):
            if index not in free:
                self.release(index)
        self.link(HEAD, HEAD)

    def link(self, prev: int, nxt: int) -> None:
        self._records[prev].next = nxt
        self._records[nxt].prev = prev

    def next(self, index: int) -> int:
        return self._records[index].next

    def prev(self, index: int) -> int:
        return self._records[index].prev

    def text(self, index: int) -> str:
        return self._records[index].text

    def ref(self, index: int) -> LineRef:
        return LineRef(index, self._records[index].generation)

    def is_live(self, ref: LineRef) -> bool:
        if ref.index <= HEAD or ref.index >= len(self._records):
            return False
        return self._records[ref.index].generation == ref.generation

    def iter_run(self, start: int, stop: int) -> Iterator[int]:
        """Yield indices from ``start`` up to (not including) ``stop``."""

        index = start
        while index != stop:
            yield index
            index = self._records[index].next


__all__ = ["HEAD", "LineArena", "LineRecord", "LineRef"]
