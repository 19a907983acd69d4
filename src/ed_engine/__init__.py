"""ed_engine: a line-oriented text editor engine in the style of ed.

The engine is split into a line store with undo and marks (``buffer``),
regular-expression matching and substitution (``pattern``), the command
language (``commands``), and host collaborators for console and file
I/O (``host``). ``EdSession`` ties them together.
"""

from .session import EdSession, ExecResult, ExecStatus

__all__ = [
    "EdSession",
    "ExecResult",
    "ExecStatus",
    "adapters",
    "buffer",
    "commands",
    "host",
    "pattern",
    "runtime",
]

__version__ = "0.1.0"
