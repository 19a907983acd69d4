"""One handler per command letter.

Handlers validate their addresses, consume the rest of the command
text, drive the line store, and raise ``EdError`` subclasses on
failure. They never catch: the session reports.
"""

from __future__ import annotations

from functools import partial
from typing import Dict

from ed_engine.errors import (
    AddressError,
    CommandSyntaxError,
    StateError,
    UnsavedChangesError,
    UnsupportedError,
)

from .context import (
    AddressWindow,
    CommandHandler,
    CommandRequest,
    CommandResult,
    display,
    read_filename,
    read_suffix,
    read_text,
    reject_address,
    reject_suffix,
    show_count,
)


def _guard_modified(request: CommandRequest) -> None:
    if request.store.modified and not request.context.warned:
        raise UnsavedChangesError()


# -- text input ------------------------------------------------------------
def _handle_append(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    flags = read_suffix(request.scanner)
    request.store.append_lines(window.second, read_text(request))
    return CommandResult(print_flags=flags)


def _handle_insert(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    addr = max(window.second, 1)
    flags = read_suffix(request.scanner)
    request.store.append_lines(addr - 1, read_text(request))
    return CommandResult(print_flags=flags)


def _handle_change(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    window.first = max(window.first, 1)
    window.second = max(window.second, 1)
    window.check_current()
    flags = read_suffix(request.scanner)
    store = request.store
    store.delete_range(window.first, window.second, in_global=request.in_global)
    store.append_lines(store.current_addr, read_text(request))
    return CommandResult(print_flags=flags)


# -- structural edits ------------------------------------------------------
def _handle_delete(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    window.check_current()
    flags = read_suffix(request.scanner)
    store = request.store
    store.delete_range(window.first, window.second, in_global=request.in_global)
    store.current_addr = min(window.first, store.last_addr)
    return CommandResult(print_flags=flags)


def _handle_join(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    current = request.store.current_addr
    window.check(current, current + 1)
    flags = read_suffix(request.scanner)
    if window.first != window.second:
        request.store.join_range(
            window.first, window.second, in_global=request.in_global
        )
    return CommandResult(print_flags=flags)


def _handle_move(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    window.check_current()
    dest = request.interpreter.addresses.parse_third(request.scanner)
    if window.first <= dest < window.second:
        raise AddressError("invalid destination", addr=dest)
    flags = read_suffix(request.scanner)
    request.store.move_range(
        window.first, window.second, dest, in_global=request.in_global
    )
    return CommandResult(print_flags=flags)


def _handle_transfer(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    window.check_current()
    dest = request.interpreter.addresses.parse_third(request.scanner)
    flags = read_suffix(request.scanner)
    request.store.copy_range(window.first, window.second, dest)
    return CommandResult(print_flags=flags)


def _handle_yank(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    window.check_current()
    flags = read_suffix(request.scanner)
    request.store.yank_range(window.first, window.second)
    return CommandResult(print_flags=flags)


def _handle_put(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    flags = read_suffix(request.scanner)
    request.store.put_yank(window.second)
    return CommandResult(print_flags=flags)


def _handle_mark(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    name = request.scanner.take()
    if window.second == 0:
        raise AddressError(addr=0)
    flags = read_suffix(request.scanner)
    request.store.mark(name, window.second)
    return CommandResult(print_flags=flags)


def _handle_undo(request: CommandRequest) -> CommandResult:
    reject_address(AddressWindow(request))
    flags = read_suffix(request.scanner)
    request.store.undo_last(in_global=request.in_global)
    return CommandResult(print_flags=flags)


# -- patterns --------------------------------------------------------------
def _handle_substitute(request: CommandRequest) -> CommandResult:
    context = request.context
    spec = context.patterns.parse_substitution(request.scanner)
    window = AddressWindow(request)
    window.check_current()
    flags = read_suffix(request.scanner)
    context.patterns.search_and_replace(
        request.store,
        window.first,
        window.second,
        spec,
        in_global=request.in_global,
    )
    if spec.print_flags:
        current = request.store.current_addr
        display(context, current, current, spec.print_flags)
    return CommandResult(print_flags=flags)


def _handle_global(
    request: CommandRequest, *, want_match: bool, interactive: bool
) -> CommandResult:
    if request.in_global:
        raise StateError("cannot nest global commands")
    window = AddressWindow(request)
    store = request.store
    window.check(1, store.last_addr)

    patterns = request.context.patterns
    delimiter = request.scanner.peek()
    pattern = patterns.read_pattern(request.scanner)
    request.scanner.accept(delimiter)
    patterns.select_active(store, window.first, window.second, pattern, want_match)

    quitting = request.interpreter.run_global(request, interactive=interactive)
    return CommandResult(quit=quitting)


# -- display ---------------------------------------------------------------
def _handle_print(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    window.check_current()
    flags = read_suffix(request.scanner)
    if request.letter not in flags:
        flags += request.letter
    display(request.context, window.first, window.second, flags)
    return CommandResult()


def _handle_scroll(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    store = request.store
    step = 0 if request.in_global else 1
    window.check(1, store.current_addr + step)
    config = request.context.config
    size = request.scanner.read_int()
    if size is not None:
        if size < 1:
            raise CommandSyntaxError("invalid command suffix")
        config.window_lines = size
    flags = read_suffix(request.scanner)
    last = min(store.last_addr, window.second + config.window_lines - 1)
    display(request.context, window.second, last, flags)
    return CommandResult()


def _handle_line_number(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    flags = read_suffix(request.scanner)
    addr = window.second if window.count else request.store.last_addr
    request.context.console.show_message(str(addr))
    return CommandResult(print_flags=flags)


def _handle_newline(request: CommandRequest) -> CommandResult:
    window = AddressWindow(request)
    step = 0 if request.in_global else 1
    window.check(1, request.store.current_addr + step)
    display(request.context, window.second, window.second, "")
    return CommandResult()


def _handle_comment(request: CommandRequest) -> CommandResult:
    request.scanner.take_line()
    return CommandResult()


# -- files -----------------------------------------------------------------
def _handle_edit(request: CommandRequest, *, force: bool = False) -> CommandResult:
    if not force:
        _guard_modified(request)
    reject_address(AddressWindow(request))
    reject_suffix(request.scanner)
    context = request.context
    name = read_filename(request)
    if name:
        context.default_filename = name
    contents = context.files.read(name or context.default_filename or "")
    request.store.load(contents.lines)
    show_count(context, contents.size)
    return CommandResult()


def _handle_filename(request: CommandRequest) -> CommandResult:
    reject_address(AddressWindow(request))
    reject_suffix(request.scanner)
    context = request.context
    name = read_filename(request, shell=True)
    if name.startswith("!"):
        raise CommandSyntaxError("invalid redirection")
    if name:
        context.default_filename = name
    context.console.show_message(context.default_filename or "")
    return CommandResult()


def _handle_read(request: CommandRequest) -> CommandResult:
    reject_suffix(request.scanner)
    window = AddressWindow(request)
    store = request.store
    addr = window.second if window.count else store.last_addr
    context = request.context
    name = read_filename(request)
    if context.default_filename is None:
        context.default_filename = name
    contents = context.files.read(name or context.default_filename or "")
    store.append_lines(addr, contents.lines)
    show_count(context, contents.size)
    return CommandResult()


def _handle_write(request: CommandRequest, *, append: bool = False) -> CommandResult:
    scanner = request.scanner
    then_quit = scanner.accept("qQ")
    reject_suffix(scanner)
    context = request.context
    name = read_filename(request)

    store = request.store
    window = AddressWindow(request)
    if window.count == 0 and store.last_addr == 0:
        window.first = window.second = 0
    else:
        window.check(1, store.last_addr)
    if context.default_filename is None:
        context.default_filename = name

    lines = store.lines(window.first, window.second) if window.first else []
    size = context.files.write(
        name or context.default_filename or "", lines, append=append
    )
    show_count(context, size)
    if len(lines) == store.last_addr:
        store.modified = False
    elif store.modified and then_quit == "q" and not context.warned:
        raise UnsavedChangesError()
    return CommandResult(quit=bool(then_quit))


# -- session ---------------------------------------------------------------
def _handle_quit(request: CommandRequest, *, force: bool = False) -> CommandResult:
    reject_address(AddressWindow(request))
    read_suffix(request.scanner)
    if not force:
        _guard_modified(request)
    return CommandResult(quit=True)


def _handle_prompt(request: CommandRequest) -> CommandResult:
    reject_address(AddressWindow(request))
    reject_suffix(request.scanner)
    config = request.context.config
    prompt = read_filename(request, silent=True)
    if prompt:
        config.prompt = prompt
        config.show_prompt = True
    else:
        config.show_prompt = not config.show_prompt
    return CommandResult()


def _handle_help(request: CommandRequest, *, toggle: bool = False) -> CommandResult:
    reject_address(AddressWindow(request))
    read_suffix(request.scanner)
    context = request.context
    if toggle:
        context.config.verbose = not context.config.verbose
        if not context.config.verbose:
            return CommandResult()
    if context.last_error:
        context.console.show_error(context.last_error)
    return CommandResult()


def _handle_shell(request: CommandRequest) -> CommandResult:
    reject_address(AddressWindow(request))
    raise UnsupportedError("shell commands are not implemented")


COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "a": _handle_append,
    "i": _handle_insert,
    "c": _handle_change,
    "d": _handle_delete,
    "j": _handle_join,
    "m": _handle_move,
    "t": _handle_transfer,
    "y": _handle_yank,
    "x": _handle_put,
    "k": _handle_mark,
    "u": _handle_undo,
    "s": _handle_substitute,
    "g": partial(_handle_global, want_match=True, interactive=False),
    "v": partial(_handle_global, want_match=False, interactive=False),
    "G": partial(_handle_global, want_match=True, interactive=True),
    "V": partial(_handle_global, want_match=False, interactive=True),
    "l": _handle_print,
    "n": _handle_print,
    "p": _handle_print,
    "z": _handle_scroll,
    "=": _handle_line_number,
    "\n": _handle_newline,
    "#": _handle_comment,
    "e": _handle_edit,
    "E": partial(_handle_edit, force=True),
    "f": _handle_filename,
    "r": _handle_read,
    "w": _handle_write,
    "W": partial(_handle_write, append=True),
    "q": _handle_quit,
    "Q": partial(_handle_quit, force=True),
    "P": _handle_prompt,
    "h": _handle_help,
    "H": partial(_handle_help, toggle=True),
    "!": _handle_shell,
}

# commands that leave the undo unit of the previous command alone
NO_UNDO_UNIT = frozenset("u")


__all__ = ["COMMAND_HANDLERS", "NO_UNDO_UNIT"]
