"""Error taxonomy raised by the editing engine.

Every failure a command can hit is an ``EdError`` whose message is the
diagnostic shown to the user. Handlers raise; the session is the only
place that catches, reports, and resumes.
"""

from __future__ import annotations


class EdError(RuntimeError):
    """Base class for recoverable, user-visible command failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CommandSyntaxError(EdError):
    """Malformed address, suffix, mark name, or pattern delimiter."""


class AddressError(EdError):
    """Address out of range, bad destination, or stale mark."""

    def __init__(self, message: str = "invalid address", *, addr: int | None = None):
        super().__init__(message)
        self.addr = addr


class StateError(EdError):
    """Editor state does not allow the command (nothing to undo, ...)."""


class UnsavedChangesError(StateError):
    """Destructive command refused because the buffer is modified."""

    def __init__(self, message: str = "buffer is modified") -> None:
        super().__init__(message)


class PatternError(EdError):
    """User pattern failed to compile or to substitute."""


class EdIOError(EdError):
    """File collaborator failure, reported verbatim."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


class UnsupportedError(EdError):
    """Features the engine deliberately refuses (shell escapes)."""


__all__ = [
    "EdError",
    "CommandSyntaxError",
    "AddressError",
    "StateError",
    "UnsavedChangesError",
    "PatternError",
    "EdIOError",
    "UnsupportedError",
]
