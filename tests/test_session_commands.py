from typing import Dict, List, Optional, Sequence

from ed_engine import EdSession, ExecStatus
from ed_engine.config import EdConfig
from ed_engine.host import MemoryFileStore, ScriptConsole


def make_session(
    *lines: str,
    script: str = "",
    files: Optional[Dict[str, Sequence[str]]] = None,
    **config,
) -> EdSession:
    options = {"scripted": True, "verbose": True}
    options.update(config)
    session = EdSession(
        ScriptConsole(script),
        files=MemoryFileStore(files),
        config=EdConfig(**options),
    )
    if lines:
        session.store.load(lines)
    return session


def output(session: EdSession) -> List[str]:
    return session.console.output  # type: ignore[attr-defined]


def errors(session: EdSession) -> List[str]:
    return session.console.errors  # type: ignore[attr-defined]


def run(session: EdSession, *commands: str) -> None:
    for command in commands:
        session.execute_command(command)


def test_insert_substitute_undo_round_trip() -> None:
    session = make_session(script="one\ntwo\nthree\n.\n")

    run(session, "0a", "2s/two/TWO/")
    assert session.lines == ["one", "TWO", "three"]

    run(session, "u")
    assert session.lines == ["one", "two", "three"]
    assert session.current_addr == 2
    assert errors(session) == []


def test_second_undo_redoes() -> None:
    session = make_session("a", "b", "c")

    run(session, "2d", "u", "u")

    assert session.lines == ["a", "c"]
    assert session.current_addr == 2


def test_append_text_from_the_same_input() -> None:
    session = make_session("a")

    result = session.execute_command("a\nb\nc\n.\n")

    assert result.ok
    assert session.lines == ["a", "b", "c"]
    assert session.current_addr == 3


def test_insert_and_change() -> None:
    session = make_session("a", "b", "c", script="z\n.\nB\n.\n")

    run(session, "1i", "3c")

    assert session.lines == ["z", "a", "B", "c"]
    assert session.current_addr == 3


def test_delete_sets_next_line_current() -> None:
    session = make_session("a", "b", "c", "d")

    run(session, "2,3d")
    assert session.lines == ["a", "d"]
    assert session.current_addr == 2

    run(session, "$d")
    assert session.current_addr == 1


def test_delete_then_put_restores_lines_elsewhere() -> None:
    session = make_session("a", "b", "c")

    run(session, "1d", "$x")

    assert session.lines == ["b", "c", "a"]


def test_yank_and_put() -> None:
    session = make_session("a", "b", "c")

    run(session, "1,2y", "0x")

    assert session.lines == ["a", "b", "a", "b", "c"]
    assert session.current_addr == 2


def test_put_without_yank_fails() -> None:
    session = make_session("a")

    run(session, "x")

    assert errors(session) == ["nothing to put"]


def test_join_default_range_and_single_line_no_op() -> None:
    session = make_session("a", "b", "c")

    run(session, "1", "j")
    assert session.lines == ["ab", "c"]

    run(session, "2,2j")
    assert session.lines == ["ab", "c"]


def test_move_and_transfer() -> None:
    session = make_session("a", "b", "c")

    run(session, "1m$")
    assert session.lines == ["b", "c", "a"]

    run(session, "1t0")
    assert session.lines == ["b", "b", "c", "a"]
    assert session.current_addr == 1


def test_move_into_range_is_invalid_destination() -> None:
    session = make_session("a", "b", "c")

    run(session, "1,2m1")

    assert errors(session) == ["invalid destination"]
    assert session.lines == ["a", "b", "c"]


def test_print_forms() -> None:
    session = make_session("a", "b\tc", "d")

    run(session, "1,2n", "2l", "3p", "=", "2=")

    assert output(session) == ["1\ta", "2\tb\tc", "b\\tc$", "d", "3", "2"]


def test_print_suffix_on_other_commands() -> None:
    session = make_session("a", "b", "c")

    run(session, "2dp")

    assert output(session) == ["c"]


def test_newline_and_bare_address_print() -> None:
    session = make_session("a", "b", "c")
    session.store.current_addr = 1

    run(session, "", "1")

    assert output(session) == ["b", "a"]
    assert session.current_addr == 1


def test_scroll_uses_window_size() -> None:
    session = make_session("1", "2", "3", "4", "5", window_lines=2)

    run(session, "1z", "z3")

    assert output(session) == ["1", "2", "3", "4", "5"]
    assert session.config.window_lines == 3


def test_substitute_print_flag_and_repeat() -> None:
    session = make_session("aaa", "aaa")

    run(session, "1s/a/b/p", "2s", "2s/a/c/g", "1s")

    assert output(session) == ["baa", "baa"]
    assert session.lines == ["bcc", "bcc"]


def test_substitute_splits_lines() -> None:
    session = make_session("a,b")

    run(session, "s/,/\\\n/")

    assert session.lines == ["a", "b"]
    assert session.current_addr == 2


def test_substitute_without_match_reports() -> None:
    session = make_session("a")

    run(session, "s/z/y/")

    assert errors(session) == ["no match"]


def test_marks_and_stale_marks() -> None:
    session = make_session("a", "b", "c")

    run(session, "2ka", "'ap", "'a,$p", "2d", "'ap")

    assert output(session) == ["b", "b", "c"]
    assert errors(session) == ["invalid address"]


def test_address_forms() -> None:
    session = make_session("a", "b", "c", "d")

    run(session, ",p", "2;+1p", "/b/p", "?d?p", "-,.p", "%p")

    assert output(session) == [
        "a", "b", "c", "d",
        "b", "c",
        "b",
        "d",
        "c", "d",
        "a", "b", "c", "d",
    ]


def test_address_out_of_range() -> None:
    session = make_session("a")

    run(session, "5p", "0p")

    assert errors(session) == ["invalid address", "invalid address"]


def test_unknown_command_and_bad_suffix() -> None:
    session = make_session("a")

    run(session, "Z", "pz")

    assert errors(session) == ["unknown command", "invalid command suffix"]


def test_diagnostics_are_terse_unless_verbose() -> None:
    session = make_session("a", verbose=False)

    run(session, "Z", "h", "H", "Z")

    assert errors(session) == ["?", "unknown command", "unknown command", "unknown command"]
    assert session.verbose
    assert session.last_error == "unknown command"


def test_edit_write_read_and_filename() -> None:
    files = {"in.txt": ["alpha", "beta"]}
    session = make_session(files=files)

    run(session, "e in.txt")
    assert session.lines == ["alpha", "beta"]
    assert session.default_filename == "in.txt"
    assert not session.modified

    run(session, "r", "w out.txt")
    assert session.lines == ["alpha", "beta", "alpha", "beta"]
    assert not session.modified
    assert session.context.files.files["out.txt"] == session.lines  # type: ignore[attr-defined]

    run(session, "f", "f other.txt")
    assert output(session) == ["in.txt", "other.txt"]
    assert session.default_filename == "other.txt"


def test_byte_counts_shown_when_not_scripted() -> None:
    session = make_session(files={"in.txt": ["alpha", "beta"]}, scripted=False)

    run(session, "e in.txt", "1w part.txt", "W part.txt")

    assert output(session) == ["11", "6", "11"]
    assert session.context.files.files["part.txt"] == [  # type: ignore[attr-defined]
        "alpha",
        "alpha",
        "beta",
    ]


def test_edit_refuses_modified_buffer_until_repeated() -> None:
    session = make_session("a", files={"in.txt": ["x"]})
    session.store.modified = True

    run(session, "e in.txt")
    assert session.lines == ["a"]
    assert errors(session) == ["buffer is modified"]

    run(session, "e in.txt")
    assert session.lines == ["x"]


def test_edit_keeps_yank_buffer_and_clears_undo() -> None:
    session = make_session("a", files={"in.txt": ["x"]})

    run(session, "y", "e in.txt", "u", "x")

    assert errors(session) == ["nothing to undo"]
    assert session.lines == ["x", "a"]


def test_missing_file_reports_os_message() -> None:
    session = make_session("a")

    run(session, "e nope")

    assert errors(session) == ["nope: No such file or directory"]
    assert session.lines == ["a"]


def test_filename_commands_need_a_name() -> None:
    session = make_session("a")

    run(session, "w", "f !cmd", "e !cmd", "!ls")

    assert errors(session) == [
        "no current filename",
        "invalid redirection",
        "shell commands are not implemented",
        "shell commands are not implemented",
    ]


def test_write_and_quit() -> None:
    session = make_session("a", files={})
    session.default_filename = "saved.txt"
    session.store.modified = True

    result = session.execute_command("wq")

    assert result.status is ExecStatus.QUIT
    assert session.context.files.files["saved.txt"] == ["a"]  # type: ignore[attr-defined]


def test_quit_guard_and_eof_warning() -> None:
    session = make_session(script="a\nx\n.\nq\nq\n")

    assert session.run_until_quit() == 0
    assert errors(session) == ["buffer is modified"]
    assert session.console.pending == 0  # type: ignore[attr-defined]

    session = make_session(script="a\nx\n.\n")
    assert session.run_until_quit() == 0
    assert errors(session) == ["buffer is modified"]


def test_prompt_toggle_shows_prompt() -> None:
    session = make_session(script="P\nq\n")

    session.run_until_quit()

    assert session.console.prompts == ["*"]  # type: ignore[attr-defined]


def test_remaining_command_text_is_returned() -> None:
    session = make_session("a", "b")

    result = session.execute_command("1p\n2p\n")

    assert result.ok
    assert result.remaining == "2p\n"
    assert output(session) == ["a"]


def test_initialize_resets_everything() -> None:
    session = make_session("a", "b")
    run(session, "1ka", "y")
    session.default_filename = "x"

    session.initialize()

    assert session.lines == []
    assert session.default_filename is None
    assert session.last_error is None
    run(session, "x")
    assert errors(session) == ["nothing to put"]


def test_undo_returns_cursor_after_append_insert_read_and_transfer() -> None:
    session = make_session("a", "b", "c", script="X\n.\nY\n.\n", files={"f": ["z"]})

    for command in ("1a", "3i", "1r f", "1t0"):
        run(session, "2", command)
        run(session, "u")
        assert session.lines == ["a", "b", "c"]
        assert session.current_addr == 2
        assert session.last_addr == 3

    assert errors(session) == []
