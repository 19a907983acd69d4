"""Pattern compilation, line selection, and substitution."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ed_engine.buffer import LineStore
from ed_engine.errors import CommandSyntaxError, PatternError, StateError
from ed_engine.runtime import telemetry
from ed_engine.scanner import CommandScanner

from .template import Template, parse_template

PRINT_FLAGS = "lnp"


@dataclass(slots=True)
class SubstitutionSpec:
    """Everything one ``s`` command needs, kept for ``s`` repeats."""

    pattern: re.Pattern[str]
    template: Template
    count: Optional[int] = None
    replace_all: bool = False
    print_flags: str = ""

    @property
    def occurrences(self) -> int:
        """``re`` style count: 0 replaces every match."""

        if self.replace_all:
            return 0
        return self.count or 1


class PatternEngine:
    """Holds the last search pattern, template, and substitution.

    Patterns use the Python ``re`` dialect. Every pattern read from a
    command becomes the last pattern, so an empty ``//`` anywhere reuses
    whatever was searched for most recently.
    """

    def __init__(self) -> None:
        self.last_pattern: Optional[re.Pattern[str]] = None
        self.last_template: Optional[Template] = None
        self.last_substitution: Optional[SubstitutionSpec] = None
        self.logger = telemetry.get_logger("ed_engine.pattern")

    def reset(self) -> None:
        self.last_pattern = None
        self.last_template = None
        self.last_substitution = None

    # -- patterns ------------------------------------------------------
    def compile(self, source: str) -> re.Pattern[str]:
        if not source:
            if self.last_pattern is None:
                raise PatternError("no previous pattern")
            return self.last_pattern
        try:
            pattern = re.compile(source)
        except re.error as exc:
            raise PatternError(str(exc)) from exc
        self.last_pattern = pattern
        return pattern

    @staticmethod
    def extract_pattern(scanner: CommandScanner, delimiter: str) -> str:
        """Read up to an unescaped ``delimiter`` or the end of the line."""

        chars = []
        while True:
            char = scanner.peek()
            if char in ("", "\n") or char == delimiter:
                return "".join(chars)
            scanner.take()
            if char == "\\" and scanner.peek() not in ("", "\n"):
                escaped = scanner.take()
                if escaped == delimiter and delimiter.isalnum():
                    chars.append(escaped)
                else:
                    chars.append(char + escaped)
            else:
                chars.append(char)

    def read_pattern(self, scanner: CommandScanner) -> re.Pattern[str]:
        """Consume ``<delim>pattern``; the closing delimiter is left unread."""

        delimiter = scanner.peek()
        if delimiter in ("", " ", "\n"):
            raise CommandSyntaxError("invalid pattern delimiter")
        scanner.take()
        return self.compile(self.extract_pattern(scanner, delimiter))

    # -- selection and search ------------------------------------------
    @staticmethod
    def matches(pattern: re.Pattern[str], text: str) -> bool:
        return pattern.search(text) is not None

    def select_active(
        self,
        store: LineStore,
        first: int,
        second: int,
        pattern: re.Pattern[str],
        want_match: bool,
    ) -> int:
        """Fill the active set with lines whose match result is ``want_match``."""

        store.active.clear()
        selected = 0
        for index in store.iter_range(first, second):
            if self.matches(pattern, store.arena.text(index)) == want_match:
                store.active.add(index)
                selected += 1
        return selected

    def find_line(
        self, store: LineStore, pattern: re.Pattern[str], *, forward: bool
    ) -> int:
        """Address of the next matching line, wrapping around the buffer."""

        start = store.current_addr
        addr = start
        while True:
            addr = store.inc_addr(addr) if forward else store.dec_addr(addr)
            if addr and self.matches(pattern, store.text(addr)):
                return addr
            if addr == start:
                raise PatternError("no match")

    # -- substitution --------------------------------------------------
    def parse_substitution(self, scanner: CommandScanner) -> SubstitutionSpec:
        """Parse what follows ``s``: a full command or the repeat form."""

        char = scanner.peek()
        if char in ("", "\n") or scanner.at_digit() or char in "gpr":
            return self._parse_repeat(scanner)
        if scanner.peek(1) == "\n":
            raise CommandSyntaxError("invalid pattern delimiter")

        pattern = self.read_pattern(scanner)
        if not scanner.accept(char):
            template = parse_template("")
            self.last_template = template
            return self._remember(SubstitutionSpec(pattern, template, print_flags="p"))

        template = self._read_template(scanner, char)
        if not scanner.accept(char):
            return self._remember(SubstitutionSpec(pattern, template, print_flags="p"))

        count: Optional[int] = None
        replace_all = False
        while True:
            if scanner.at_digit():
                count = self._read_count(scanner)
                replace_all = False
            elif scanner.accept("g"):
                replace_all = True
                count = None
            else:
                break
        print_flags = scanner.accept(PRINT_FLAGS)
        return self._remember(
            SubstitutionSpec(pattern, template, count, replace_all, print_flags)
        )

    def _parse_repeat(self, scanner: CommandScanner) -> SubstitutionSpec:
        count: Optional[int] = None
        flags = ""
        while scanner.peek() not in ("", "\n"):
            if scanner.at_digit():
                count = self._read_count(scanner)
                continue
            flag = scanner.accept("gpr")
            if not flag:
                raise CommandSyntaxError("invalid command suffix")
            flags += flag

        previous = self.last_substitution
        if previous is None:
            raise StateError("no previous substitution")

        spec = replace(previous)
        if count is not None:
            spec.count = count
            spec.replace_all = False
        if flags.count("g") % 2:
            spec.replace_all = not spec.replace_all
            spec.count = None
        if flags.count("p") % 2:
            spec.print_flags = "" if "p" in spec.print_flags else "p"
        if "r" in flags and self.last_pattern is not None:
            spec.pattern = self.last_pattern
        return self._remember(spec)

    @staticmethod
    def _read_count(scanner: CommandScanner) -> int:
        count = scanner.read_int()
        if not count:
            raise CommandSyntaxError("invalid command suffix")
        return count

    def _read_template(self, scanner: CommandScanner, delimiter: str) -> Template:
        if scanner.peek() == "%" and scanner.peek(1) == delimiter:
            scanner.take()
            if self.last_template is None:
                raise StateError("no previous substitution")
            return self.last_template

        chars = []
        while True:
            char = scanner.peek()
            if char in ("", "\n") or char == delimiter:
                break
            scanner.take()
            if char == "\\" and scanner.peek():
                escaped = scanner.take()
                chars.append(char + escaped)
                if escaped == "\n" and scanner.at_end() and not scanner.extend():
                    raise CommandSyntaxError("unexpected end-of-file")
            else:
                chars.append(char)
        template = parse_template("".join(chars))
        self.last_template = template
        return template

    def _remember(self, spec: SubstitutionSpec) -> SubstitutionSpec:
        self.last_substitution = spec
        return spec

    def substitute(self, text: str, spec: SubstitutionSpec) -> Tuple[str, int]:
        """Apply ``spec`` to one line; ``count == 0`` means no match."""

        if spec.template.max_group > spec.pattern.groups:
            raise PatternError("invalid back reference")
        try:
            return spec.pattern.subn(spec.template.expand, text, count=spec.occurrences)
        except re.error as exc:
            raise PatternError(str(exc)) from exc

    def search_and_replace(
        self,
        store: LineStore,
        first: int,
        second: int,
        spec: SubstitutionSpec,
        *,
        in_global: bool = False,
    ) -> int:
        """Substitute over ``first..second``; returns the number of lines changed.

        Changed lines are deleted and re-inserted, split on any newline
        the template produced. The cursor ends on the last new line.
        """

        with telemetry.span(
            "pattern::substitute",
            logger_name="ed_engine.pattern",
            metadata={"first": first, "second": second, "pattern": spec.pattern.pattern},
        ) as handle:
            start = store.current_addr
            changed = 0
            last_changed = 0
            addr = first
            remaining = second - first + 1
            while remaining:
                store.current_addr = addr
                new_text, count = self.substitute(store.text(addr), spec)
                if count:
                    addr = store.replace_line(
                        addr, new_text.split("\n"), in_global=in_global
                    )
                    changed += 1
                    last_changed = addr
                addr += 1
                remaining -= 1
            handle.add_metadata("changed", changed)

        if not changed:
            store.current_addr = start
            if not in_global:
                raise PatternError("no match")
            return 0
        store.current_addr = last_changed
        return changed


__all__ = ["PRINT_FLAGS", "PatternEngine", "SubstitutionSpec"]
