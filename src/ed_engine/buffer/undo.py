"""Undo log recording structural edits as invertible atoms."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ed_engine.errors import StateError

from .arena import LineArena
from .state import BufferState


class AtomKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    MOVE = "move"


_INVERSE = {
    AtomKind.INSERT: AtomKind.DELETE,
    AtomKind.DELETE: AtomKind.INSERT,
    AtomKind.MOVE: AtomKind.MOVE,
}


@dataclass(frozen=True, slots=True)
class UndoAtom:
    """A contiguous run ``head..tail`` in link order.

    For ``MOVE`` the pair of atoms logged by one move holds the boundary
    lines around the source gap and around the destination gap.
    """

    kind: AtomKind
    head: int
    tail: int

    def invert(self) -> "UndoAtom":
        return UndoAtom(_INVERSE[self.kind], self.head, self.tail)

    def with_tail(self, tail: int) -> "UndoAtom":
        return UndoAtom(self.kind, self.head, tail)


class UndoLog:
    """One undo unit: ordered atoms plus the buffer state to swap back in.

    ``begin()`` arms a new unit; the unit is actually started (old atoms
    dropped, state snapshotted) by ``touch()`` right before the first
    structural change, so a command that fails before editing anything
    keeps the previous unit undoable.
    """

    def __init__(self, arena: LineArena) -> None:
        self._arena = arena
        self._atoms: List[UndoAtom] = []
        self._saved: Optional[BufferState] = None
        self._armed = False

    def __len__(self) -> int:
        return len(self._atoms)

    @property
    def atoms(self) -> tuple[UndoAtom, ...]:
        return tuple(self._atoms)

    def can_undo(self) -> bool:
        return self._saved is not None

    def begin(self) -> None:
        self._armed = True

    def touch(self, state: BufferState, release: Callable[[int], None]) -> None:
        if not self._armed:
            return
        self._armed = False
        self.clear(release)
        self._saved = state.copy()

    def push(self, atom: UndoAtom) -> int:
        self._atoms.append(atom)
        return len(self._atoms) - 1

    def extend_tail(self, slot: int, tail: int) -> None:
        self._atoms[slot] = self._atoms[slot].with_tail(tail)

    def clear(self, release: Callable[[int], None]) -> None:
        """Drop every atom, releasing the lines retained by delete atoms."""

        arena = self._arena
        for atom in reversed(self._atoms):
            if atom.kind is AtomKind.DELETE:
                run = list(arena.iter_run(atom.head, arena.next(atom.tail)))
                for index in run:
                    release(index)
        self._atoms = []

    def reset(self, release: Callable[[int], None]) -> None:
        """Forget history entirely; ``undo`` fails until the next edit."""

        self.clear(release)
        self._saved = None
        self._armed = False

    def undo(self, state: BufferState) -> None:
        """Replay the unit backwards, then invert it so a repeat redoes it.

        ``state`` is swapped with the snapshot taken when the unit began.
        """

        if self._saved is None:
            raise StateError("nothing to undo")

        arena = self._arena
        atoms = self._atoms
        n = len(atoms) - 1
        while n >= 0:
            atom = atoms[n]
            if atom.kind is AtomKind.INSERT:
                arena.link(arena.prev(atom.head), arena.next(atom.tail))
            elif atom.kind is AtomKind.DELETE:
                arena.link(arena.prev(atom.head), atom.head)
                arena.link(atom.tail, arena.next(atom.tail))
            else:
                source = atoms[n - 1]
                run_head = arena.next(atom.head)
                run_tail = arena.prev(atom.tail)
                arena.link(source.head, run_head)
                arena.link(run_tail, source.tail)
                arena.link(atom.head, atom.tail)
                n -= 1
            n -= 1

        self._atoms = [atom.invert() for atom in reversed(atoms)]
        saved = self._saved
        self._saved = state.copy()
        state.restore(saved)


__all__ = ["AtomKind", "UndoAtom", "UndoLog"]
