"""Tests for settings and Concourse environment loading."""

import pytest

from github_webhook_resource.config import ConcourseEnvironment, Settings, load_environment, load_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ATC_EXTERNAL_URL",
        "BUILD_TEAM_NAME",
        "BUILD_PIPELINE_NAME",
        "GITHUB_WEBHOOK_CONFIG",
        "GITHUB_WEBHOOK_LOG_LEVEL",
        "GITHUB_WEBHOOK_LOG_JSON",
        "GITHUB_WEBHOOK_REQUEST_TIMEOUT",
        "GITHUB_WEBHOOK_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConcourseEnvironment:
    def test_reads_process_environment(self, clean_env):
        clean_env.setenv("ATC_EXTERNAL_URL", "https://ci.example.com")
        clean_env.setenv("BUILD_TEAM_NAME", "main")
        clean_env.setenv("BUILD_PIPELINE_NAME", "deploy")
        env = load_environment()
        assert env.external_url == "https://ci.example.com"
        assert env.team_name == "main"
        assert env.pipeline_name == "deploy"

    def test_missing_values_are_empty(self, clean_env):
        env = load_environment()
        assert env.external_url == ""
        assert env.team_name == ""
        assert env.pipeline_name == ""

    def test_frozen(self):
        env = ConcourseEnvironment(ATC_EXTERNAL_URL="https://ci", BUILD_TEAM_NAME="t", BUILD_PIPELINE_NAME="p")
        with pytest.raises(Exception):
            env.team_name = "other"


class TestSettings:
    def test_defaults(self, clean_env):
        settings = Settings()
        assert settings.log_level == "INFO"
        assert settings.log_json is False
        assert settings.request_timeout == 30.0
        assert settings.user_agent == "concourse-github-webhook-resource"

    def test_env_prefix(self, clean_env):
        clean_env.setenv("GITHUB_WEBHOOK_REQUEST_TIMEOUT", "5")
        clean_env.setenv("GITHUB_WEBHOOK_LOG_JSON", "true")
        settings = Settings()
        assert settings.request_timeout == 5.0
        assert settings.log_json is True

    def test_yaml_overlay(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("log_level: DEBUG\nrequest_timeout: 12\n")
        settings = load_settings(path)
        assert settings.log_level == "DEBUG"
        assert settings.request_timeout == 12.0

    def test_yaml_from_env_var(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("user_agent: custom\n")
        clean_env.setenv("GITHUB_WEBHOOK_CONFIG", str(path))
        assert load_settings().user_agent == "custom"

    def test_env_beats_yaml(self, clean_env, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("request_timeout: 12\n")
        clean_env.setenv("GITHUB_WEBHOOK_REQUEST_TIMEOUT", "3")
        assert load_settings(path).request_timeout == 3.0

    def test_missing_yaml_ignored(self, clean_env, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings.log_level == "INFO"
