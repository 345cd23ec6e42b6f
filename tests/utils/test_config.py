"""Tests for configuration loading and precedence."""

import os
from unittest.mock import patch

import pytest

from src.utils.config import load_config, resolve_env_vars


@pytest.fixture
def clean_env():
    """Strip config-related variables for the duration of a test."""
    stripped = {
        k: v
        for k, v in os.environ.items()
        if not (k.startswith("BIZADVISOR_") or k.startswith("OPENROUTER_"))
    }
    with patch.dict(os.environ, stripped, clear=True):
        yield


class TestLoadConfig:
    def test_defaults_without_file(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        config = load_config()
        assert config.advisor.model == "openrouter/auto"
        assert config.advisor.timeout_seconds == 60
        assert config.advisor.api_key is None
        assert config.attachments.inline_max_bytes == 1024 * 1024

    def test_yaml_file_with_env_reference(self, clean_env, tmp_path, monkeypatch):
        monkeypatch.setenv("MY_KEY", "sk-from-env")
        path = tmp_path / "bizadvisor.yaml"
        path.write_text(
            "advisor:\n  api_key: ${MY_KEY}\n  model: some/model\n"
            "attachments:\n  inline_max_bytes: 10\n"
        )
        config = load_config(str(path))
        assert config.advisor.api_key == "sk-from-env"
        assert config.advisor.model == "some/model"
        assert config.attachments.inline_max_bytes == 10

    def test_section_env_overrides_yaml(self, clean_env, tmp_path, monkeypatch):
        path = tmp_path / "bizadvisor.yaml"
        path.write_text("advisor:\n  timeout_seconds: 30\n")
        monkeypatch.setenv("BIZADVISOR_ADVISOR_TIMEOUT_SECONDS", "12.5")
        config = load_config(str(path))
        assert config.advisor.timeout_seconds == 12.5

    def test_openrouter_variables_win(self, clean_env, tmp_path, monkeypatch):
        path = tmp_path / "bizadvisor.yaml"
        path.write_text("advisor:\n  api_key: from-yaml\n")
        monkeypatch.setenv("BIZADVISOR_ADVISOR_API_KEY", "from-section")
        monkeypatch.setenv("OPENROUTER_API_KEY", "from-openrouter")
        monkeypatch.setenv("OPENROUTER_APP_TITLE", "BizAdvisor")
        config = load_config(str(path))
        assert config.advisor.api_key == "from-openrouter"
        assert config.advisor.app_title == "BizAdvisor"

    def test_config_path_env(self, clean_env, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("advisor:\n  model: env/path\n")
        monkeypatch.setenv("BIZADVISOR_CONFIG_PATH", str(path))
        assert load_config().advisor.model == "env/path"

    def test_explicit_missing_path_raises(self, clean_env, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))


def test_resolve_env_vars_missing_is_empty(monkeypatch):
    monkeypatch.delenv("SURELY_NOT_SET", raising=False)
    assert resolve_env_vars("a${SURELY_NOT_SET}b") == "ab"
