from __future__ import annotations

import threading
from typing import List

from ed_engine.adapters.textual import SessionStatus, TextualEdAdapter, TextualUIHooks
from ed_engine.config import EdConfig
from ed_engine.host import Console, MemoryFileStore
from ed_engine.session import EdSession


def make_factory(*lines: str):
    def factory(console: Console) -> EdSession:
        session = EdSession(
            console,
            files=MemoryFileStore({"doc.txt": list(lines)}),
            config=EdConfig(scripted=True, verbose=True),
        )
        if lines:
            session.execute_command("e doc.txt")
        return session

    return factory


def test_adapter_relays_output_and_status() -> None:
    shown: List[str] = []
    statuses: List[SessionStatus] = []
    hooks = TextualUIHooks(
        show_line=shown.append,
        update_status=statuses.append,
    )
    adapter = TextualEdAdapter(make_factory("one", "two"), hooks)

    for line in ("1p", "a", "three", ".", ",n", "Q"):
        adapter.submit(line)
    code = adapter.run()

    assert code == 0
    assert adapter.finished
    assert shown == ["one", "1\tone", "2\tthree", "3\ttwo"]
    assert statuses[0] == SessionStatus(2, 2, False, "doc.txt")
    assert statuses[-1] == SessionStatus(3, 3, True, "doc.txt")
    assert statuses[-1].describe() == "doc.txt  line 3/3 [modified]"


def test_adapter_relays_errors_and_logs() -> None:
    errors: List[str] = []
    logs: List[str] = []
    hooks = TextualUIHooks(
        show_line=lambda line: None,
        show_error=errors.append,
        log=logs.append,
    )
    adapter = TextualEdAdapter(make_factory(), hooks)

    adapter.submit("Z")
    adapter.close()
    adapter.run()

    assert errors == ["unknown command"]
    assert any(line.startswith("submit ->") and "'Z'" in line for line in logs)
    assert any(line.startswith("exit <-") for line in logs)


def test_adapter_end_of_input_warns_before_quitting() -> None:
    errors: List[str] = []
    hooks = TextualUIHooks(show_line=lambda line: None, show_error=errors.append)
    adapter = TextualEdAdapter(make_factory(), hooks)

    adapter.submit("a")
    adapter.submit("x")
    adapter.submit(".")
    adapter.close()
    adapter.close()

    assert adapter.run() == 0
    assert errors == ["buffer is modified"]


def test_adapter_runs_in_worker_thread() -> None:
    shown: List[str] = []
    hooks = TextualUIHooks(show_line=shown.append)
    adapter = TextualEdAdapter(make_factory("alpha"), hooks)
    worker = threading.Thread(target=adapter.run)
    worker.start()

    adapter.submit("p")
    adapter.submit("q")
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert shown == ["alpha"]


def test_literal_lines_are_split_for_display() -> None:
    shown: List[str] = []
    hooks = TextualUIHooks(show_line=shown.append)
    adapter = TextualEdAdapter(make_factory("abcdefghijkl"), hooks, columns=10)

    adapter.submit("l")
    adapter.submit("q")
    adapter.run()

    assert shown == ["abcdefghij\\", "kl$"]
