"""Command interpreter: address prefix, dispatch, and global replay."""

from __future__ import annotations

from typing import Optional

from ed_engine.errors import CommandSyntaxError, StateError
from ed_engine.runtime import telemetry
from ed_engine.scanner import CommandScanner

from .address import AddressResolver
from .context import (
    CommandRequest,
    CommandResult,
    EditorContext,
    display,
    read_extended,
    read_suffix,
)
from .handlers import COMMAND_HANDLERS, NO_UNDO_UNIT

_LETTER_NAMES = {"\n": "newline", "=": "line_number", "#": "comment", "!": "shell"}


class Interpreter:
    """Executes one command at a time against an ``EditorContext``.

    Outside a global command every command except ``u`` opens a new
    undo unit; inside one, the replayed commands all share the unit the
    global command opened.
    """

    def __init__(self, context: EditorContext) -> None:
        self.context = context
        self.addresses = AddressResolver(context.store, context.patterns)
        self.logger = telemetry.get_logger("ed_engine.commands")

    def execute(self, scanner: CommandScanner, *, in_global: bool = False) -> CommandResult:
        """Run the command under ``scanner``; it is left after the command."""

        addresses = self.addresses.parse(scanner)
        scanner.skip_blanks()
        letter = scanner.take() or "\n"
        handler = COMMAND_HANDLERS.get(letter)
        if handler is None:
            raise CommandSyntaxError("unknown command")

        if not in_global and letter not in NO_UNDO_UNIT:
            self.context.store.begin()

        name = _LETTER_NAMES.get(letter, letter)
        with telemetry.span(
            f"command::{name}",
            logger_name="ed_engine.commands",
            metadata={"first": addresses.first, "second": addresses.second},
        ):
            result = handler(
                CommandRequest(self, letter, addresses, scanner, in_global)
            )

        if result.print_flags:
            current = self.context.store.current_addr
            display(self.context, current, current, result.print_flags)
        return result

    def run_global(self, request: CommandRequest, *, interactive: bool) -> bool:
        """Replay a command list once per active line.

        ``g``/``v`` take the list from the rest of the command; ``G``/``V``
        print each line and read its command from the console. Returns
        ``True`` when a replayed command asked to quit.
        """

        context = self.context
        store = context.store
        flags = ""
        command: Optional[str] = None
        if interactive:
            flags = read_suffix(request.scanner)
        else:
            command = read_extended(request.scanner, strip=False) + "\n"
            if command == "\n":
                command = "p\n"

        store.checkpoint()
        telemetry.record_event(
            "global.replay",
            data={"active": len(store.active), "interactive": interactive},
            logger_name="ed_engine.commands",
        )

        while True:
            index = store.active.next()
            if index is None:
                return False
            store.current_addr = store.address_of(index)
            if interactive:
                display(context, store.current_addr, store.current_addr, flags)
                line = context.console.read_line()
                if line is None:
                    raise CommandSyntaxError("unexpected end-of-file")
                if line == "\n":
                    continue
                if line == "&\n":
                    if command is None:
                        raise StateError("no previous command")
                else:
                    reader = CommandScanner(line, read_more=context.console.read_line)
                    command = read_extended(reader, strip=False) + "\n"
            if self._replay(command or "p\n").quit:
                return True

    def _replay(self, command: str) -> CommandResult:
        scanner = CommandScanner(command)
        result = CommandResult()
        while not scanner.at_end():
            result = self.execute(scanner, in_global=True)
            if result.quit:
                break
        return result


__all__ = ["Interpreter"]
