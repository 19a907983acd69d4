"""Host collaborators the engine talks to: console and files."""

from .console import Console, ScriptConsole, StreamConsole, format_line
from .files import FileContents, FileStore, LocalFileStore, MemoryFileStore

__all__ = [
    "Console",
    "FileContents",
    "FileStore",
    "LocalFileStore",
    "MemoryFileStore",
    "ScriptConsole",
    "StreamConsole",
    "format_line",
]
