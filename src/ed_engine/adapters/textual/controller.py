"""Queue-fed bridge between an ``EdSession`` and Textual widgets."""

from __future__ import annotations

import queue
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ed_engine.host import Console, format_line
from ed_engine.session import EdSession


def _noop(*_args, **_kwargs) -> None:  # pragma: no cover - default hook
    return None


@dataclass(frozen=True, slots=True)
class SessionStatus:
    current: int
    last: int
    modified: bool
    filename: Optional[str]

    def describe(self) -> str:
        dirty = " [modified]" if self.modified else ""
        name = self.filename or "(no file)"
        return f"{name}  line {self.current}/{self.last}{dirty}"


@dataclass(slots=True)
class TextualUIHooks:
    """Callbacks invoked by the adapter to update Textual widgets."""

    show_line: Callable[[str], None]
    show_error: Callable[[str], None] = _noop
    show_prompt: Callable[[str], None] = _noop
    update_status: Callable[[SessionStatus], None] = _noop
    # Optional realtime log callback a host may use to surface debug lines
    log: Callable[[str], None] = _noop


class QueueConsole:
    """Console whose input arrives through ``submit`` from another thread."""

    def __init__(
        self,
        hooks: TextualUIHooks,
        *,
        columns: int = 72,
        before_read: Callable[[], None] = _noop,
    ) -> None:
        self.hooks = hooks
        self.columns = columns
        self._before_read = before_read
        self._input: "queue.Queue[Optional[str]]" = queue.Queue()

    def submit(self, line: str) -> None:
        self._input.put(line if line.endswith("\n") else line + "\n")

    def close(self) -> None:
        self._input.put(None)

    def read_line(self) -> Optional[str]:
        self._before_read()
        return self._input.get()

    def show_line(
        self, text: str, *, number: Optional[int] = None, literal: bool = False
    ) -> None:
        rendered = format_line(text, number=number, literal=literal, columns=self.columns)
        for piece in rendered.split("\n"):
            self.hooks.show_line(piece)

    def show_message(self, text: str) -> None:
        self.hooks.show_line(text)

    def show_error(self, text: str) -> None:
        self.hooks.show_error(text)

    def show_prompt(self, text: str) -> None:
        self.hooks.show_prompt(text)


SessionFactory = Callable[[Console], EdSession]


class TextualEdAdapter:
    """Runs a session loop fed by UI input and reports back through hooks."""

    def __init__(
        self,
        session_factory: SessionFactory,
        hooks: TextualUIHooks,
        *,
        columns: int = 72,
    ) -> None:
        self.hooks = hooks
        self.console = QueueConsole(hooks, columns=columns, before_read=self._publish_status)
        self.session = session_factory(self.console)
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    def submit(self, line: str) -> None:
        """Queue one line of user input (a command or inserted text)."""

        self._log_state("submit ->", line=line)
        self.console.submit(line)

    def close(self) -> None:
        """Signal end of input; the loop quits like ed does at EOF."""

        self._log_state("close ->")
        self.console.close()

    def run(self) -> int:
        """Run the session until it quits; blocks the calling thread."""

        try:
            code = self.session.run_until_quit()
        finally:
            self._finished = True
            self._publish_status()
        self._log_state("exit <-", code=code)
        return code

    def status(self) -> SessionStatus:
        session = self.session
        return SessionStatus(
            current=session.current_addr,
            last=session.last_addr,
            modified=session.modified,
            filename=session.default_filename,
        )

    def _publish_status(self) -> None:
        snapshot = self.status()
        self.hooks.update_status(snapshot)
        self._log_state("status <-")

    def _log_state(self, prefix: str, **fields: object) -> None:
        snapshot = self._state_metadata()
        snapshot.update({k: v for k, v in fields.items() if v is not None})
        parts = [prefix]
        for key, value in snapshot.items():
            parts.append(f"{key}={value!r}")
        self.hooks.log(" ".join(parts))

    def _state_metadata(self) -> Dict[str, object]:
        session = self.session
        return {
            "current": session.current_addr,
            "last": session.last_addr,
            "modified": session.modified,
            "error": session.last_error,
        }


__all__ = ["QueueConsole", "SessionStatus", "TextualEdAdapter", "TextualUIHooks"]
