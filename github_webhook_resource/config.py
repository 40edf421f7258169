"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = "concourse-github-webhook-resource"


class ConcourseEnvironment(BaseSettings):
    """Build metadata Concourse exports into every resource container.

    Values are read once at startup and handed to the reconciler explicitly.
    Missing variables come through as empty strings and are reported by
    request validation rather than here.
    """

    model_config = SettingsConfigDict(
        case_sensitive=True,
        populate_by_name=True,
        frozen=True,
    )

    external_url: str = Field(default="", validation_alias="ATC_EXTERNAL_URL")
    team_name: str = Field(default="", validation_alias="BUILD_TEAM_NAME")
    pipeline_name: str = Field(default="", validation_alias="BUILD_PIPELINE_NAME")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GITHUB_WEBHOOK_",
        case_sensitive=False,
    )

    log_level: str = "INFO"
    log_json: bool = False
    request_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = os.environ.get("GITHUB_WEBHOOK_CONFIG")

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # Env vars take precedence over YAML values
    env_overrides = Settings().model_dump(exclude_unset=True)
    return Settings(**{**yaml_data, **env_overrides})


def load_environment() -> ConcourseEnvironment:
    return ConcourseEnvironment()
