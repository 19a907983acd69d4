"""Line storage, undo log, marks, and the global-command worklist."""

from .active import ActiveLineSet
from .arena import HEAD, LineArena, LineRecord, LineRef
from .marks import MARK_NAMES, MarkTable, ensure_mark_name
from .state import BufferState
from .store import LineStore
from .undo import AtomKind, UndoAtom, UndoLog
from .yank import YankBuffer

__all__ = [
    "ActiveLineSet",
    "AtomKind",
    "BufferState",
    "HEAD",
    "LineArena",
    "LineRecord",
    "LineRef",
    "LineStore",
    "MARK_NAMES",
    "MarkTable",
    "UndoAtom",
    "UndoLog",
    "YankBuffer",
    "ensure_mark_name",
]
