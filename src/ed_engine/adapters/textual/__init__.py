"""Textual host for the ed engine; the app module needs ``textual``."""

from .controller import QueueConsole, SessionStatus, TextualEdAdapter, TextualUIHooks

__all__ = ["QueueConsole", "SessionStatus", "TextualEdAdapter", "TextualUIHooks"]
