"""Executable Textual app that hosts an ed session."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

try:  # pragma: no cover - imported only when the app is run
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Input, Log, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' package to use ed_engine.adapters.textual.app"
    ) from exc

from ed_engine.config import EdConfig
from ed_engine.host import Console, LocalFileStore
from ed_engine.runtime import telemetry
from ed_engine.session import EdSession

from .controller import SessionStatus, TextualEdAdapter, TextualUIHooks


def create_session_factory(
    config: EdConfig, filename: Optional[str] = None
) -> Callable[[Console], EdSession]:
    """Factory building a session on local files, optionally preloaded."""

    def factory(console: Console) -> EdSession:
        session = EdSession(console, files=LocalFileStore(), config=config)
        if filename:
            session.execute_command(f"e {filename}")
        return session

    return factory


@dataclass
class UIState:
    status_text: str = ""
    prompt_text: str = ""
    errors: int = 0


class EdApp(App[int]):
    """Output log, status line, and a command input driving one session."""

    CSS = """
	Screen {
		layout: vertical;
	}

	#output-view {
		height: 1fr;
		border: round $accent;
		padding: 0 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}

	#command-line {
		height: 3;
	}
	"""

    BINDINGS = [
        ("ctrl+c", "quit", "Quit"),
        ("ctrl+q", "quit", "Quit"),
        ("ctrl+d", "end_input", "End of input"),
    ]

    def __init__(
        self,
        *,
        config: Optional[EdConfig] = None,
        filename: Optional[str] = None,
        show_log: bool = False,
    ) -> None:
        super().__init__()
        self._state = UIState()
        self._config = config or EdConfig()
        self._filename = filename
        self._show_log = show_log
        self.adapter: TextualEdAdapter | None = None
        self._output_widget: Log | None = None
        self._status_widget: Static | None = None
        self._input_widget: Input | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="output-area"):
            self._output_widget = Log(id="output-view")
            yield self._output_widget
        self._status_widget = Static("", id="status-line")
        self._input_widget = Input(placeholder="command", id="command-line")
        yield self._status_widget
        yield self._input_widget
        yield Footer()

    def on_mount(self) -> None:
        hooks = TextualUIHooks(
            show_line=lambda line: self._dispatch(self._write_output, line),
            show_error=lambda text: self._dispatch(self._write_error, text),
            show_prompt=lambda text: self._dispatch(self._show_prompt, text),
            update_status=lambda status: self._dispatch(self._update_status, status),
            log=lambda line: self._dispatch(self._log_line, line),
        )
        self.adapter = TextualEdAdapter(
            create_session_factory(self._config, self._filename),
            hooks,
            columns=self._config.window_columns,
        )
        self.run_worker(self._run_session, thread=True, exclusive=True)
        if self._input_widget:
            self._input_widget.focus()

    def on_unmount(self) -> None:
        if self.adapter and not self.adapter.finished:
            # the second end of input quits even with unsaved changes
            self.adapter.close()
            self.adapter.close()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if not self.adapter:
            return
        self.adapter.submit(event.value)
        event.input.value = ""
        event.stop()

    def action_end_input(self) -> None:
        if self.adapter:
            self.adapter.close()

    def _run_session(self) -> None:
        assert self.adapter is not None
        code = self.adapter.run()
        self._dispatch(self.exit, code)

    def _dispatch(self, callback: Callable[..., Any], *args: Any) -> None:
        if self.is_running:
            self.call_from_thread(callback, *args)

    def _write_output(self, line: str) -> None:
        if self._output_widget:
            self._output_widget.write_line(line)

    def _write_error(self, text: str) -> None:
        self._state.errors += 1
        self._write_output(text)

    def _show_prompt(self, text: str) -> None:
        self._state.prompt_text = text
        if self._input_widget:
            self._input_widget.placeholder = text

    def _update_status(self, status: SessionStatus) -> None:
        self._state.status_text = status.describe()
        if self._status_widget:
            self._status_widget.update(self._state.status_text)

    def _log_line(self, line: str) -> None:
        if self._show_log:
            self._write_output(f"# {line}")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the ed engine in a Textual UI.")
    parser.add_argument(
        "-p",
        "--prompt",
        help="Command prompt shown in the input box",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show full error messages instead of '?'",
    )
    parser.add_argument(
        "--show-log",
        action="store_true",
        help="Echo adapter state lines into the output pane",
    )
    parser.add_argument("file", nargs="?", help="File to edit")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    telemetry.configure()
    config = EdConfig.from_env()
    if args.prompt:
        config.prompt = args.prompt
        config.show_prompt = True
    if args.verbose:
        config.verbose = True
    app = EdApp(config=config, filename=args.file, show_log=args.show_log)
    result = app.run()
    return result or 0


if __name__ == "__main__":  # pragma: no cover - manual run
    raise SystemExit(main())
