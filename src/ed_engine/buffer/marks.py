"""Named bookmarks ``a``..``z`` held as generation-checked line refs."""

from __future__ import annotations

import string
from typing import Dict, Optional

from ed_engine.errors import CommandSyntaxError

from .arena import LineRef

MARK_NAMES = string.ascii_lowercase


def ensure_mark_name(name: str) -> str:
    if len(name) != 1 or name not in MARK_NAMES:
        raise CommandSyntaxError("invalid mark character")
    return name


class MarkTable:
    def __init__(self) -> None:
        self._marks: Dict[str, LineRef] = {}

    def __len__(self) -> int:
        return len(self._marks)

    def set(self, name: str, ref: LineRef) -> None:
        self._marks[ensure_mark_name(name)] = ref

    def get(self, name: str) -> Optional[LineRef]:
        return self._marks.get(ensure_mark_name(name))

    def discard_line(self, index: int) -> None:
        """Forget every mark pointing at ``index`` (the line is being freed)."""

        stale = [name for name, ref in self._marks.items() if ref.index == index]
        for name in stale:
            del self._marks[name]

    def clear(self) -> None:
        self._marks.clear()


__all__ = ["MARK_NAMES", "MarkTable", "ensure_mark_name"]
