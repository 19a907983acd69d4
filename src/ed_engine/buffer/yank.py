"""Cut/paste holding area for whole lines."""

from __future__ import annotations

from typing import Iterable, Tuple


class YankBuffer:
    """Holds value copies of lines; every write replaces the contents."""

    def __init__(self) -> None:
        self._lines: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def set(self, lines: Iterable[str]) -> None:
        self._lines = tuple(lines)

    def get(self) -> Tuple[str, ...]:
        return self._lines

    def clear(self) -> None:
        self._lines = ()


__all__ = ["YankBuffer"]
