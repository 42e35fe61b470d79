"""Internal defaults and constants for flowrunner."""

from __future__ import annotations

from pathlib import Path

DEFAULT_TIMEOUT_SECONDS = 60
RUN_TIMEOUT_SECONDS = 120
READ_CHUNK_SIZE = 64 * 1024
TRUNCATION_MARKER = "\n[output truncated]\n"
REAP_GRACE_SECONDS = 5

DEFAULT_CLI_NAME = "najie-flow"
DEFAULT_NODE_BINARY = "node"
SCRIPT_SUFFIX = ".js"

CLI_PATH_ENV_VAR = "NAJIE_FLOW_CLI"
DATA_DIR_ENV_VAR = "NAJIE_USER_DATA_PATH"
DATA_DIR_FLAG = "--data-dir"

# Keeps CLI output free of ANSI escapes so the parsers see plain text.
CHILD_ENV_DEFAULTS: dict[str, str] = {"FORCE_COLOR": "0"}

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5176

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_STATIC_DIR = PROJECT_ROOT / "ui" / "dist"
