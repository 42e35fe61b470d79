"""
Pytest configuration for Flow Runner tests
"""

import asyncio
import sys
from pathlib import Path

import pytest

# Ensure the parent directory is in the Python path for imports
parent_dir = Path(__file__).resolve().parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import utils.env as env_config  # noqa: E402

# Ensure tests operate with runtime environment rather than .env overrides during imports
env_config.reload_env({"FLOW_RUNNER_FORCE_ENV_OVERRIDE": "false"})

from flowrunner import config as flowrunner_config  # noqa: E402
from flowrunner.config import Settings  # noqa: E402

# Configure asyncio for Windows compatibility
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

_CONFIG_ENV_VARS = (
    "NAJIE_FLOW_CLI",
    "NAJIE_USER_DATA_PATH",
    "FLOW_RUNNER_NODE_BINARY",
    "FLOW_RUNNER_WORKING_DIR",
    "FLOW_RUNNER_TIMEOUT",
    "FLOW_RUNNER_RUN_TIMEOUT",
    "FLOW_RUNNER_MAX_OUTPUT_BYTES",
    "FLOW_RUNNER_SERIALIZE_RUNS",
    "FLOW_RUNNER_HOST",
    "FLOW_RUNNER_STATIC_DIR",
    "FLOW_RUNNER_CORS_ORIGINS",
    "PORT",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Strip flow runner configuration from the environment and reset cached settings."""
    for var in _CONFIG_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    flowrunner_config.set_settings(None)
    yield
    flowrunner_config.set_settings(None)


@pytest.fixture
def project_path(tmp_path):
    """
    Provides a temporary directory for tests.
    This ensures all file operations during tests are isolated.
    """
    test_dir = tmp_path / "test_workspace"
    test_dir.mkdir(parents=True, exist_ok=True)
    return test_dir


@pytest.fixture
def python_cli_settings(project_path):
    """Settings that use the running interpreter as the CLI, so argv is ``-c <code>``."""
    return Settings(cli_path=sys.executable, working_dir=project_path, static_dir=project_path / "dist")
