"""Command-line entry point: ``ed-engine [-s] [-p prompt] [-v] [file]``."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from ed_engine.config import EdConfig
from ed_engine.host import LocalFileStore, StreamConsole
from ed_engine.runtime import telemetry
from ed_engine.session import EdSession


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ed-engine", description="Line-oriented text editor."
    )
    parser.add_argument(
        "-s",
        "--quiet",
        "--silent",
        dest="scripted",
        action="store_true",
        help="Suppress byte counts and diagnostics for scripts",
    )
    parser.add_argument("-p", "--prompt", help="Use PROMPT and show it")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print full error messages instead of '?'",
    )
    parser.add_argument("file", nargs="?", help="File to edit; '-' acts like -s")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> EdConfig:
    config = EdConfig.from_env()
    if args.scripted or args.file == "-":
        config.scripted = True
    if args.prompt:
        config.prompt = args.prompt
        config.show_prompt = True
    if args.verbose:
        config.verbose = True
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    telemetry.configure()
    config = build_config(args)
    session = EdSession(
        StreamConsole(columns=config.window_columns),
        files=LocalFileStore(),
        config=config,
    )
    if args.file and args.file != "-":
        session.execute_command(f"e {args.file}")
    return session.run_until_quit()


__all__ = ["build_config", "main"]
