"""Runtime settings for the flow runner, assembled from argv, environment and .env."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel, Field, NonNegativeInt, PositiveFloat, field_validator

from flowrunner.constants import (
    CLI_PATH_ENV_VAR,
    DATA_DIR_ENV_VAR,
    DATA_DIR_FLAG,
    DEFAULT_CLI_NAME,
    DEFAULT_HOST,
    DEFAULT_NODE_BINARY,
    DEFAULT_PORT,
    DEFAULT_STATIC_DIR,
    DEFAULT_TIMEOUT_SECONDS,
    PROJECT_ROOT,
    RUN_TIMEOUT_SECONDS,
)
from utils.env import get_env, get_env_bool

logger = logging.getLogger("flowrunner.config")


class Settings(BaseModel):
    """Validated configuration shared by the runner, service and HTTP layer."""

    cli_path: str = Field(default=DEFAULT_CLI_NAME, min_length=1)
    node_binary: str = Field(default=DEFAULT_NODE_BINARY, min_length=1)
    data_dir: str | None = None
    working_dir: Path = PROJECT_ROOT
    default_timeout_seconds: PositiveFloat = DEFAULT_TIMEOUT_SECONDS
    run_timeout_seconds: PositiveFloat = RUN_TIMEOUT_SECONDS
    max_output_bytes: NonNegativeInt = 0
    serialize_runs: bool = False
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    static_dir: Path = DEFAULT_STATIC_DIR
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("data_dir", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if value is None:
            return ["*"]
        if isinstance(value, str):
            origins = [origin.strip() for origin in value.split(",") if origin.strip()]
            return origins or ["*"]
        return value


def data_dir_from_argv(argv: Sequence[str]) -> str | None:
    """Return the value following ``--data-dir`` in argv, if any."""

    args = list(argv)
    for index, arg in enumerate(args):
        if arg == DATA_DIR_FLAG and index + 1 < len(args) and args[index + 1]:
            return args[index + 1]
        if arg.startswith(DATA_DIR_FLAG + "="):
            return arg.split("=", 1)[1] or None
    return None


def load_settings(argv: Sequence[str] = (), **overrides) -> Settings:
    """Build settings; argv wins over the environment for the data directory."""

    values: dict[str, object] = {
        "cli_path": get_env(CLI_PATH_ENV_VAR) or DEFAULT_CLI_NAME,
        "node_binary": get_env("FLOW_RUNNER_NODE_BINARY") or DEFAULT_NODE_BINARY,
        "data_dir": data_dir_from_argv(argv) or get_env(DATA_DIR_ENV_VAR),
        "serialize_runs": get_env_bool("FLOW_RUNNER_SERIALIZE_RUNS"),
        "cors_origins": get_env("FLOW_RUNNER_CORS_ORIGINS"),
    }

    optional_env = {
        "working_dir": "FLOW_RUNNER_WORKING_DIR",
        "default_timeout_seconds": "FLOW_RUNNER_TIMEOUT",
        "run_timeout_seconds": "FLOW_RUNNER_RUN_TIMEOUT",
        "max_output_bytes": "FLOW_RUNNER_MAX_OUTPUT_BYTES",
        "host": "FLOW_RUNNER_HOST",
        "port": "PORT",
        "static_dir": "FLOW_RUNNER_STATIC_DIR",
    }
    for field_name, env_var in optional_env.items():
        raw = get_env(env_var)
        if raw:
            values[field_name] = raw

    values.update({key: value for key, value in overrides.items() if value is not None})
    settings = Settings.model_validate(values)

    if settings.data_dir:
        logger.info("Data directory: %s", settings.data_dir)
    else:
        logger.info("No data directory configured; the CLI will use its default")
    return settings


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = load_settings()
    return _SETTINGS


def set_settings(settings: Settings | None) -> None:
    """Install process-wide settings (entry point and tests)."""

    global _SETTINGS
    _SETTINGS = settings
