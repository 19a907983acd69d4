"""Line store: the addressed line sequence and every structural edit on it."""

from __future__ import annotations

from typing import ContextManager, Iterable, Iterator, List, Optional, Sequence

from ed_engine.errors import AddressError, StateError
from ed_engine.runtime import telemetry

from .active import ActiveLineSet
from .arena import HEAD, LineArena
from .marks import MarkTable
from .state import BufferState
from .undo import AtomKind, UndoAtom, UndoLog
from .yank import YankBuffer


class LineStore:
    """Owns the lines, cursor state, marks, yank buffer, undo log and active set.

    Addresses are 1-based; address 0 resolves to the sentinel so that
    "after line 0" means "before the first line". Every mutation calls
    ``UndoLog.touch`` before its first relink and pushes the atoms that
    describe it.
    """

    def __init__(self, *, name: str = "buffer") -> None:
        self.name = name
        self.arena = LineArena()
        self.state = BufferState()
        self.undo = UndoLog(self.arena)
        self.marks = MarkTable()
        self.yank = YankBuffer()
        self.active = ActiveLineSet(self.arena)
        self._cache_index = HEAD
        self._cache_addr = 0
        self.logger = telemetry.get_logger("ed_engine.buffer")

    # -- state ---------------------------------------------------------
    @property
    def current_addr(self) -> int:
        return self.state.current_addr

    @current_addr.setter
    def current_addr(self, addr: int) -> None:
        self.state.current_addr = addr

    @property
    def last_addr(self) -> int:
        return self.state.last_addr

    @property
    def modified(self) -> bool:
        return self.state.modified

    @modified.setter
    def modified(self, value: bool) -> None:
        self.state.modified = value

    def inc_addr(self, addr: int) -> int:
        return 0 if addr >= self.state.last_addr else addr + 1

    def dec_addr(self, addr: int) -> int:
        return self.state.last_addr if addr <= 0 else addr - 1

    # -- addressing ----------------------------------------------------
    def resolve(self, addr: int) -> int:
        """Return the arena index of line ``addr`` (0 is the sentinel).

        The walk starts from whichever of the cached position, the head
        going forward, or the head going backward is nearest.
        """

        last = self.state.last_addr
        if addr < 0 or addr > last:
            raise AddressError(addr=addr)

        arena = self.arena
        cached = abs(addr - self._cache_addr)
        forward = addr
        backward = last + 1 - addr
        if cached <= forward and cached <= backward:
            index, at = self._cache_index, self._cache_addr
        elif forward <= backward:
            index, at = HEAD, 0
        else:
            index, at = HEAD, last + 1

        while at < addr:
            index = arena.next(index)
            at += 1
        while at > addr:
            index = arena.prev(index)
            at -= 1

        self._cache_index, self._cache_addr = index, addr
        return index

    def address_of(self, index: int) -> int:
        """Linear scan for ``index``; unlinked lines are an address error."""

        addr = 0
        node = self.arena.next(HEAD)
        while node != HEAD:
            addr += 1
            if node == index:
                return addr
            node = self.arena.next(node)
        raise AddressError()

    def text(self, addr: int) -> str:
        if addr < 1:
            raise AddressError(addr=addr)
        return self.arena.text(self.resolve(addr))

    def iter_range(self, first: int, second: int) -> Iterator[int]:
        """Yield arena indices of lines ``first..second`` inclusive."""

        if first > second:
            return
        start = self.resolve(first)
        stop = self.arena.next(self.resolve(second))
        yield from self.arena.iter_run(start, stop)

    def lines(self, first: int, second: int) -> List[str]:
        return [self.arena.text(index) for index in self.iter_range(first, second)]

    def contents(self) -> List[str]:
        arena = self.arena
        return [arena.text(index) for index in arena.iter_run(arena.next(HEAD), HEAD)]

    def _invalidate_cache(self) -> None:
        self._cache_index, self._cache_addr = HEAD, 0

    # -- mutation helpers ----------------------------------------------
    def _mutation(self, label: str, **metadata: object) -> ContextManager[object]:
        return telemetry.span(
            f"buffer::{label}",
            logger_name="ed_engine.buffer",
            component=True,
            metadata={"buffer": self.name, **metadata},
        )

    def _touch(self) -> None:
        self.undo.touch(self.state, self._release_line)

    def _release_line(self, index: int) -> None:
        self.marks.discard_line(index)
        self.arena.release(index)

    def _put_line(self, text: str, addr: int) -> int:
        prev = self.resolve(addr)
        index = self.arena.allocate(text)
        self.arena.link(index, self.arena.next(prev))
        self.arena.link(prev, index)
        self.state.last_addr += 1
        self.state.current_addr = addr + 1
        self._cache_index, self._cache_addr = index, addr + 1
        return index

    def _insert_run(self, addr: int, lines: Iterable[str]) -> int:
        """Insert ``lines`` after ``addr`` logged as one Insert atom."""

        slot: Optional[int] = None
        count = 0
        for text in lines:
            index = self._put_line(text, addr + count)
            count += 1
            if slot is None:
                slot = self.undo.push(UndoAtom(AtomKind.INSERT, index, index))
            else:
                self.undo.extend_tail(slot, index)
        return count

    # -- operations ----------------------------------------------------
    def begin(self) -> None:
        """Open a new undo unit; it starts at the next structural change."""

        self.undo.begin()

    def checkpoint(self) -> None:
        """Start the armed undo unit now, before any edit happens."""

        self._touch()

    def initialize(self) -> None:
        """Drop lines, marks, yank buffer, undo history and active set."""

        self.undo.reset(self._release_line)
        self.marks.clear()
        self.yank.clear()
        self.active.clear()
        self.arena.reset()
        self.state.restore(BufferState())
        self._invalidate_cache()

    def load(self, lines: Sequence[str]) -> int:
        """Replace the contents without recording undo; the yank buffer survives."""

        with self._mutation("load", lines=len(lines)):
            self.undo.reset(self._release_line)
            self.marks.clear()
            self.active.clear()
            self.arena.reset()
            self.state.restore(BufferState())
            self._invalidate_cache()
            for addr, text in enumerate(lines):
                self._put_line(text, addr)
            return len(lines)

    def append_lines(self, addr: int, lines: Sequence[str]) -> int:
        """Insert ``lines`` after ``addr``; the cursor ends on the last one."""

        self.resolve(addr)
        if not lines:
            self.state.current_addr = addr
            return 0
        with self._mutation("append", addr=addr, lines=len(lines)):
            self._touch()
            self.state.current_addr = addr
            count = self._insert_run(addr, lines)
            self.state.modified = True
            return count

    def yank_range(self, first: int, second: int) -> int:
        self.yank.set(self.lines(first, second))
        return second - first + 1

    def put_yank(self, addr: int) -> int:
        if not self.yank:
            raise StateError("nothing to put")
        self.resolve(addr)
        with self._mutation("put", addr=addr):
            self._touch()
            count = self._insert_run(addr, self.yank.get())
            self.state.modified = True
            return count

    def delete_range(self, first: int, second: int, *, in_global: bool = False) -> None:
        """Excise ``first..second``; the lines go to the yank buffer first."""

        with self._mutation("delete", first=first, second=second):
            self.yank_range(first, second)
            before = self.resolve(first - 1)
            after = self.arena.next(self.resolve(second))
            head = self.arena.next(before)
            tail = self.arena.prev(after)
            self._touch()
            self.undo.push(UndoAtom(AtomKind.DELETE, head, tail))
            if in_global:
                self.active.retract(head, after)
            self.arena.link(before, after)
            self.state.last_addr -= second - first + 1
            self.state.current_addr = first - 1
            self.state.modified = True
            self._cache_index, self._cache_addr = before, first - 1

    def move_range(
        self, first: int, second: int, addr: int, *, in_global: bool = False
    ) -> None:
        """Relink ``first..second`` after line ``addr`` (outside the range)."""

        if first <= addr < second:
            raise AddressError("invalid destination", addr=addr)
        if addr == first - 1 or addr == second:
            with self._mutation("move", first=first, second=second, dest=addr):
                self._touch()
                if in_global:
                    self.active.retract(
                        self.resolve(first), self.arena.next(self.resolve(second))
                    )
                self.state.current_addr = second
                self.state.modified = True
            return

        arena = self.arena
        with self._mutation("move", first=first, second=second, dest=addr):
            source_before = self.resolve(first - 1)
            source_after = arena.next(self.resolve(second))
            dest_before = self.resolve(addr)
            dest_after = arena.next(dest_before)
            head = arena.next(source_before)
            tail = arena.prev(source_after)

            self._touch()
            self.undo.push(UndoAtom(AtomKind.MOVE, source_before, source_after))
            self.undo.push(UndoAtom(AtomKind.MOVE, dest_before, dest_after))
            if in_global:
                self.active.retract(head, source_after)

            arena.link(dest_before, head)
            arena.link(tail, dest_after)
            arena.link(source_before, source_after)

            count = second - first + 1
            self.state.current_addr = addr + count if addr < first else addr
            self.state.modified = True
            self._invalidate_cache()

    def copy_range(self, first: int, second: int, addr: int) -> int:
        """Duplicate ``first..second`` after ``addr``.

        A destination inside the range copies in two passes so the
        freshly inserted lines are never read back as source.
        """

        if first <= addr < second:
            head_count = addr - first + 1
            tail_count = second - addr
        else:
            head_count = second - first + 1
            tail_count = 0

        with self._mutation("copy", first=first, second=second, dest=addr):
            source = self.resolve(first)
            self._touch()
            self.state.current_addr = addr
            slot: Optional[int] = None
            for count in (head_count, tail_count):
                for _ in range(count):
                    text = self.arena.text(source)
                    index = self._put_line(text, self.state.current_addr)
                    if slot is None:
                        slot = self.undo.push(UndoAtom(AtomKind.INSERT, index, index))
                    else:
                        self.undo.extend_tail(slot, index)
                    source = self.arena.next(source)
                # second pass resumes after the block just inserted
                source = self.arena.next(self.resolve(self.state.current_addr))
            self.state.modified = True
            return head_count + tail_count

    def join_range(self, first: int, second: int, *, in_global: bool = False) -> None:
        """Concatenate ``first..second`` into a single line at ``first``."""

        with self._mutation("join", first=first, second=second):
            joined = "".join(self.lines(first, second))
            self.delete_range(first, second, in_global=in_global)
            index = self._put_line(joined, first - 1)
            self.undo.push(UndoAtom(AtomKind.INSERT, index, index))
            self.state.modified = True

    def replace_line(
        self, addr: int, lines: Sequence[str], *, in_global: bool = False
    ) -> int:
        """Swap line ``addr`` for ``lines``; returns the last new address."""

        self.delete_range(addr, addr, in_global=in_global)
        with self._mutation("replace", addr=addr, lines=len(lines)):
            slot: Optional[int] = None
            at = addr - 1
            for text in lines:
                index = self._put_line(text, at)
                at += 1
                if slot is None:
                    slot = self.undo.push(UndoAtom(AtomKind.INSERT, index, index))
                else:
                    self.undo.extend_tail(slot, index)
            return at

    def mark(self, name: str, addr: int) -> None:
        if addr < 1:
            raise AddressError(addr=addr)
        self.marks.set(name, self.arena.ref(self.resolve(addr)))

    def marked_addr(self, name: str) -> int:
        ref = self.marks.get(name)
        if ref is None or not self.arena.is_live(ref):
            raise AddressError()
        return self.address_of(ref.index)

    def undo_last(self, *, in_global: bool = False) -> None:
        with self._mutation("undo", atoms=len(self.undo)):
            self.undo.undo(self.state)
            self._invalidate_cache()
            if in_global:
                self.active.clear()
        telemetry.record_event(
            "undo.apply",
            data={"current": self.state.current_addr, "last": self.state.last_addr},
            logger_name="ed_engine.buffer",
        )


__all__ = ["LineStore"]
