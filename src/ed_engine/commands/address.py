"""Address grammar: numbers, ``.``, ``$``, marks, searches, offsets, ``, ; %``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ed_engine.buffer import LineStore
from ed_engine.errors import AddressError
from ed_engine.pattern import PatternEngine
from ed_engine.scanner import CommandScanner


@dataclass(frozen=True, slots=True)
class AddressRange:
    """The last two resolved terms and how many terms were given."""

    first: int
    second: int
    count: int


class AddressResolver:
    """Parses the address prefix of a command.

    Terms are resolved left to right; only the final two survive as
    ``first``/``second``. Range checks against ``last_addr`` are left to
    the command handlers, except that every resolved term must lie in
    ``[0, last_addr]``.
    """

    def __init__(self, store: LineStore, patterns: PatternEngine) -> None:
        self.store = store
        self.patterns = patterns
        self._first = 0
        self._second = 0
        self._count = 0

    def parse(self, scanner: CommandScanner) -> AddressRange:
        self._count = 0
        self._first = self._second = self.store.current_addr

        addr: Optional[int] = None
        while True:
            addr = self._next_addr(scanner)
            if addr is None:
                break
            self._first, self._second = self._second, addr
            separator = scanner.accept(",;")
            if not separator:
                break
            if separator == ";":
                self.store.current_addr = addr

        if self._count == 1 or self._second != addr:
            self._first = self._second
        return AddressRange(self._first, self._second, self._count)

    def parse_third(self, scanner: CommandScanner) -> int:
        """Destination address of ``m`` and ``t``."""

        target = self.parse(scanner)
        if target.second < 0 or target.second > self.store.last_addr:
            raise AddressError(addr=target.second)
        return target.second

    def _next_addr(self, scanner: CommandScanner) -> Optional[int]:
        store = self.store
        scanner.skip_blanks()
        addr = store.current_addr
        first = True

        while True:
            char = scanner.peek()
            if scanner.at_digit():
                if not first:
                    raise AddressError()
                addr = scanner.read_int() or 0
            elif char and char in "+- \t":
                scanner.take()
                scanner.skip_blanks()
                if scanner.at_digit():
                    offset = scanner.read_int() or 0
                    addr += -offset if char == "-" else offset
                elif char == "+":
                    addr += 1
                elif char == "-":
                    addr -= 1
            elif char and char in ".$":
                if not first:
                    raise AddressError()
                scanner.take()
                addr = store.current_addr if char == "." else store.last_addr
            elif char and char in "/?":
                if not first:
                    raise AddressError()
                pattern = self.patterns.read_pattern(scanner)
                addr = self.patterns.find_line(store, pattern, forward=char == "/")
                scanner.accept(char)
            elif char == "'":
                if not first:
                    raise AddressError()
                scanner.take()
                addr = store.marked_addr(scanner.take())
            elif char and char in "%,;" and first:
                scanner.take()
                self._count += 1
                self._second = store.current_addr if char == ";" else 1
                addr = store.last_addr
            else:
                if first:
                    return None
                if addr < 0 or addr > store.last_addr:
                    raise AddressError(addr=addr)
                self._count += 1
                return addr
            first = False


__all__ = ["AddressRange", "AddressResolver"]
