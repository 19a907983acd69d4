"""Session configuration sourced from ``ED_ENGINE_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "ED_ENGINE_"


def env_value(
    name: str,
    default: Optional[str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    source = os.environ if environ is None else environ
    return source.get(f"{ENV_PREFIX}{name}", default)


def env_flag(
    name: str, default: bool, *, environ: Optional[Mapping[str, str]] = None
) -> bool:
    raw = env_value(name, environ=environ)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def env_int(
    name: str, fallback: int, *, environ: Optional[Mapping[str, str]] = None
) -> int:
    raw = env_value(name, environ=environ)
    if raw is None:
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


@dataclass(slots=True)
class EdConfig:
    """User-facing knobs shared by the CLI, the Textual host, and tests."""

    prompt: str = "*"
    show_prompt: bool = False
    verbose: bool = False
    scripted: bool = False
    window_lines: int = 22
    window_columns: int = 72

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EdConfig":
        defaults = cls()
        return cls(
            prompt=env_value("PROMPT", defaults.prompt, environ=environ)
            or defaults.prompt,
            show_prompt=env_flag("SHOW_PROMPT", defaults.show_prompt, environ=environ),
            verbose=env_flag("VERBOSE", defaults.verbose, environ=environ),
            scripted=env_flag("SCRIPTED", defaults.scripted, environ=environ),
            window_lines=max(
                1, env_int("WINDOW_LINES", defaults.window_lines, environ=environ)
            ),
            window_columns=max(
                8, env_int("WINDOW_COLUMNS", defaults.window_columns, environ=environ)
            ),
        )


__all__ = ["ENV_PREFIX", "EdConfig", "env_flag", "env_int", "env_value"]
