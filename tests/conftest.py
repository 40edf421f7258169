"""Shared fixtures: a fake GitHub hooks API and Concourse environment."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from github_webhook_resource.config import ConcourseEnvironment, Settings
from github_webhook_resource.utils.logging import setup_logging


EXTERNAL_URL = "https://ci.example.com"
TEAM = "main"
PIPELINE = "deploy"
CALLBACK = (
    "https://ci.example.com/api/v1/teams/main/pipelines/deploy"
    "/resources/app-repo/check/webhook?webhook_token=wt-123"
)
HOOKS_URL = "https://api.github.com/repos/acme/app/hooks"


class FakeGitHub:
    """In-memory stand-in for the repository hooks endpoints."""

    def __init__(self, hooks: list[dict[str, Any]] | None = None, next_id: int = 500) -> None:
        self.hooks = list(hooks or [])
        self.next_id = next_id
        self.requests: list[httpx.Request] = []
        self.fail_status: int | None = None
        self.list_body: Any = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "Not Found"})

        if request.method == "GET":
            body = self.list_body if self.list_body is not None else self.hooks
            return httpx.Response(200, json=body)

        if request.method == "POST":
            payload = json.loads(request.content)
            hook = {
                "id": self.next_id,
                "name": payload["name"],
                "config": {"url": payload["config"]["url"], "content_type": "json"},
            }
            self.next_id += 1
            self.hooks.append(hook)
            return httpx.Response(201, json=hook)

        if request.method == "DELETE":
            hook_id = request.url.path.rsplit("/", 1)[1]
            self.hooks = [h for h in self.hooks if str(h["id"]) != hook_id]
            return httpx.Response(204)

        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def methods(self) -> list[str]:
        return [r.method for r in self.requests]


def hook(hook_id: int, url: str) -> dict[str, Any]:
    return {"id": hook_id, "name": "web", "config": {"url": url, "content_type": "json"}}


def out_payload(**params: Any) -> dict[str, Any]:
    base = {
        "org": "acme",
        "repo": "app",
        "operation": "create",
        "resource_name": "app-repo",
        "webhook_token": "wt-123",
    }
    base.update(params)
    return {
        "source": {"github_api": "https://api.github.com", "github_token": "ghp-secret"},
        "params": base,
    }


def log_events(caplog: pytest.LogCaptureFixture) -> list[dict[str, Any]]:
    return [r.msg for r in caplog.records if isinstance(r.msg, dict)]


@pytest.fixture(autouse=True, scope="session")
def _configure_logging():
    setup_logging(level="INFO")


@pytest.fixture
def concourse_env():
    return ConcourseEnvironment(
        ATC_EXTERNAL_URL=EXTERNAL_URL,
        BUILD_TEAM_NAME=TEAM,
        BUILD_PIPELINE_NAME=PIPELINE,
    )


@pytest.fixture
def settings():
    return Settings(request_timeout=5.0)


@pytest.fixture
def github():
    return FakeGitHub()
