"""Editor session: owns the engine state and is the single error boundary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ed_engine.buffer import LineStore
from ed_engine.commands import EditorContext, Interpreter
from ed_engine.config import EdConfig
from ed_engine.errors import EdError, UnsavedChangesError
from ed_engine.host import Console, FileStore, MemoryFileStore
from ed_engine.pattern import PatternEngine
from ed_engine.runtime import telemetry
from ed_engine.scanner import CommandScanner

GENERIC_DIAGNOSTIC = "?"
INTERNAL_ERROR = "internal error"


def _record_internal(exc: BaseException) -> None:
    telemetry.record_event(
        "command.internal_error",
        level="error",
        data={"error": repr(exc)},
        logger_name="ed_engine.session",
    )


class ExecStatus(str, Enum):
    OK = "ok"
    QUIT = "quit"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ExecResult:
    """Outcome of ``EdSession.execute_command``.

    ``remaining`` is the command text left unconsumed after a successful
    command; on failure the caller must not run it.
    """

    status: ExecStatus
    remaining: str = ""
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is ExecStatus.OK


class EdSession:
    """One editing session wired to a console and a file store."""

    def __init__(
        self,
        console: Console,
        *,
        files: Optional[FileStore] = None,
        config: Optional[EdConfig] = None,
        name: str = "buffer",
    ) -> None:
        self.config = config or EdConfig()
        self.context = EditorContext(
            store=LineStore(name=name),
            patterns=PatternEngine(),
            console=console,
            files=files if files is not None else MemoryFileStore(),
            config=self.config,
        )
        self.interpreter = Interpreter(self.context)
        self.logger = telemetry.get_logger("ed_engine.session")

    # -- queryable state -----------------------------------------------
    @property
    def store(self) -> LineStore:
        return self.context.store

    @property
    def console(self) -> Console:
        return self.context.console

    @property
    def current_addr(self) -> int:
        return self.context.store.current_addr

    @property
    def last_addr(self) -> int:
        return self.context.store.last_addr

    @property
    def modified(self) -> bool:
        return self.context.store.modified

    @property
    def default_filename(self) -> Optional[str]:
        return self.context.default_filename

    @default_filename.setter
    def default_filename(self, name: Optional[str]) -> None:
        self.context.default_filename = name

    @property
    def last_error(self) -> Optional[str]:
        return self.context.last_error

    @property
    def verbose(self) -> bool:
        return self.config.verbose

    @property
    def lines(self) -> List[str]:
        return self.context.store.contents()

    # -- lifecycle -----------------------------------------------------
    def initialize(self) -> None:
        """Empty buffer, marks, yank buffer, undo log, and pattern memory."""

        self.context.store.initialize()
        self.context.patterns.reset()
        self.context.default_filename = None
        self.context.last_error = None
        self.context.warned = False
        telemetry.record_event("session.initialize", logger_name="ed_engine.session")

    def execute_command(self, text: str) -> ExecResult:
        """Parse and run one command, including a global command's replay."""

        if not text.endswith("\n"):
            text += "\n"
        scanner = CommandScanner(text, read_more=self.context.console.read_line)
        try:
            result = self.interpreter.execute(scanner)
        except EdError as exc:
            self.context.warned = isinstance(exc, UnsavedChangesError)
            message = exc.message or INTERNAL_ERROR
            if not exc.message:
                _record_internal(exc)
            self._report(message, kind=type(exc).__name__)
            return ExecResult(ExecStatus.ERROR, message=message)
        except Exception as exc:  # internal-consistency failure
            self.context.warned = False
            _record_internal(exc)
            self._report(INTERNAL_ERROR, kind=type(exc).__name__)
            return ExecResult(ExecStatus.ERROR, message=INTERNAL_ERROR)

        self.context.warned = False
        status = ExecStatus.QUIT if result.quit else ExecStatus.OK
        return ExecResult(status, remaining=scanner.rest())

    def run_until_quit(self) -> int:
        """Read and run commands until ``q``/``Q`` or end of input.

        End of input with unsaved changes warns once; a second end of
        input quits anyway. Returns the process exit status.
        """

        console = self.context.console
        with telemetry.span("session::run", logger_name="ed_engine.session"):
            while True:
                if self.config.show_prompt:
                    console.show_prompt(self.config.prompt)
                line = console.read_line()
                if line is None:
                    if self.modified and not self.context.warned:
                        self.context.warned = True
                        self._report(UnsavedChangesError().message, kind="eof")
                        continue
                    return 0
                if self._run_chain(line) is ExecStatus.QUIT:
                    return 0

    def _run_chain(self, text: str) -> ExecStatus:
        result = self.execute_command(text)
        while result.ok and result.remaining:
            result = self.execute_command(result.remaining)
        return result.status

    def _report(self, message: str, *, kind: str) -> None:
        self.context.last_error = message
        telemetry.record_event(
            "command.error",
            level="warning",
            data={"kind": kind, "message": message},
            logger_name="ed_engine.session",
        )
        shown = message if self.config.verbose else GENERIC_DIAGNOSTIC
        self.context.console.show_error(shown)


__all__ = ["EdSession", "ExecResult", "ExecStatus", "GENERIC_DIAGNOSTIC"]
