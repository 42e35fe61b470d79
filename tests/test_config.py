"""Tests for settings assembly from argv and environment."""

import pytest
from pydantic import ValidationError

import utils.env as env_config
from flowrunner.config import data_dir_from_argv, get_settings, load_settings
from flowrunner.constants import DEFAULT_CLI_NAME, DEFAULT_PORT


def test_defaults():
    settings = load_settings()

    assert settings.cli_path == DEFAULT_CLI_NAME
    assert settings.data_dir is None
    assert settings.default_timeout_seconds == 60
    assert settings.run_timeout_seconds == 120
    assert settings.port == DEFAULT_PORT
    assert settings.cors_origins == ["*"]
    assert settings.max_output_bytes == 0


def test_argv_data_dir_wins_over_environment(monkeypatch):
    monkeypatch.setenv("NAJIE_USER_DATA_PATH", "/from/env")

    assert load_settings(["--data-dir", "/from/argv"]).data_dir == "/from/argv"
    assert load_settings([]).data_dir == "/from/env"


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["--data-dir", "/d"], "/d"),
        (["--port", "1", "--data-dir=/e"], "/e"),
        (["--data-dir"], None),
        ([], None),
    ],
)
def test_data_dir_from_argv(argv, expected):
    assert data_dir_from_argv(argv) == expected


def test_environment_values(monkeypatch):
    monkeypatch.setenv("NAJIE_FLOW_CLI", "/opt/najie/cli.js")
    monkeypatch.setenv("FLOW_RUNNER_TIMEOUT", "15")
    monkeypatch.setenv("FLOW_RUNNER_SERIALIZE_RUNS", "true")
    monkeypatch.setenv("FLOW_RUNNER_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("PORT", "8080")

    settings = load_settings()

    assert settings.cli_path == "/opt/najie/cli.js"
    assert settings.default_timeout_seconds == 15
    assert settings.serialize_runs is True
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.port == 8080


def test_overrides_beat_environment(monkeypatch):
    monkeypatch.setenv("PORT", "8080")

    assert load_settings(port=9000).port == 9000
    assert load_settings(port=None).port == 8080


def test_invalid_values_fail_fast(monkeypatch):
    monkeypatch.setenv("FLOW_RUNNER_TIMEOUT", "-1")

    with pytest.raises(ValidationError):
        load_settings()


def test_dotenv_override_mode(monkeypatch):
    monkeypatch.setenv("NAJIE_FLOW_CLI", "from-process-env")
    env_config.reload_env({"FLOW_RUNNER_FORCE_ENV_OVERRIDE": "true", "NAJIE_FLOW_CLI": "from-dotenv"})
    try:
        assert load_settings().cli_path == "from-dotenv"
    finally:
        env_config.reload_env({"FLOW_RUNNER_FORCE_ENV_OVERRIDE": "false"})


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
