"""Environment lookups for Flow Runner, with optional .env precedence.

Values normally come from the process environment, with ``.env`` filling in
anything unset. Setting ``FLOW_RUNNER_FORCE_ENV_OVERRIDE=true`` inside ``.env``
makes the file the only source, which keeps local runs reproducible.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values, load_dotenv

ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
OVERRIDE_KEY = "FLOW_RUNNER_FORCE_ENV_OVERRIDE"

_file_values: dict[str, str | None] = {}
_file_only = False


def reload_env(file_values: Mapping[str, str | None] | None = None) -> None:
    """Re-read ``.env``; tests pass ``file_values`` instead of touching disk."""

    global _file_values, _file_only

    if file_values is None:
        _file_values = dict(dotenv_values(ENV_FILE)) if ENV_FILE.exists() else {}
    else:
        _file_values = dict(file_values)
    _file_only = (_file_values.get(OVERRIDE_KEY) or "").strip().lower() == "true"

    if file_values is None and ENV_FILE.exists():
        load_dotenv(dotenv_path=ENV_FILE, override=_file_only)


reload_env()


def get_env(key: str, default: str | None = None) -> str | None:
    if _file_only:
        value = _file_values.get(key)
        return default if value is None else value
    return os.getenv(key, default)


def get_env_bool(key: str, default: bool = False) -> bool:
    raw = get_env(key)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")
