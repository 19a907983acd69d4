import io
from pathlib import Path

import pytest

from ed_engine import cli
from ed_engine.config import EdConfig, env_flag, env_int


def make_file(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "doc.txt"
    path.write_text("".join(f"{line}\n" for line in lines))
    return path


def test_config_defaults() -> None:
    config = EdConfig.from_env({})

    assert config == EdConfig()
    assert config.prompt == "*"
    assert config.window_lines == 22


def test_config_reads_prefixed_environment() -> None:
    environ = {
        "ED_ENGINE_PROMPT": "> ",
        "ED_ENGINE_VERBOSE": "yes",
        "ED_ENGINE_WINDOW_LINES": "0",
        "ED_ENGINE_WINDOW_COLUMNS": "wide",
    }

    config = EdConfig.from_env(environ)

    assert config.prompt == "> "
    assert config.verbose
    assert config.window_lines == 1
    assert config.window_columns == 72


def test_env_helpers_fall_back() -> None:
    assert env_flag("MISSING", True, environ={}) is True
    assert env_flag("FLAG", True, environ={"ED_ENGINE_FLAG": "off"}) is False
    assert env_int("N", 5, environ={"ED_ENGINE_N": "x"}) == 5


def test_cli_flags_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ED_ENGINE_VERBOSE", "0")

    config = cli.build_config(cli._parse_args(["-v", "-p", ":", "-"]))

    assert config.verbose
    assert config.scripted
    assert config.show_prompt
    assert config.prompt == ":"


def test_cli_edits_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path = make_file(tmp_path, "one", "two")
    monkeypatch.setattr("sys.stdin", io.StringIO("1d\nw\nq\n"))

    assert cli.main([str(path)]) == 0

    assert capsys.readouterr().out == "8\n4\n"
    assert path.read_text() == "two\n"


def test_cli_scripted_mode_is_silent(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path = make_file(tmp_path, "one", "two")
    monkeypatch.setattr("sys.stdin", io.StringIO("p\nZ\nq\n"))

    assert cli.main(["-s", str(path)]) == 0

    captured = capsys.readouterr()
    assert captured.out == "two\n"
    assert captured.err == "?\n"


def test_cli_usage_error_exits_with_two() -> None:
    with pytest.raises(SystemExit) as info:
        cli.main(["--no-such-flag"])

    assert info.value.code == 2
