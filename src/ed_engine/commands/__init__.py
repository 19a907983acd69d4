"""Address grammar, command handlers, and the interpreter loop."""

from .address import AddressRange, AddressResolver
from .context import CommandRequest, CommandResult, EditorContext
from .handlers import COMMAND_HANDLERS
from .interpreter import Interpreter

__all__ = [
    "AddressRange",
    "AddressResolver",
    "COMMAND_HANDLERS",
    "CommandRequest",
    "CommandResult",
    "EditorContext",
    "Interpreter",
]
