"""Request payloads, hook descriptors and the version document."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Operation(str, Enum):
    CREATE = "create"
    DELETE = "delete"


# ---------------------------------------------------------------------------
# Concourse payloads
# ---------------------------------------------------------------------------

class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    github_api: str
    github_token: str


class Params(BaseModel):
    model_config = ConfigDict(frozen=True)

    org: str
    repo: str
    operation: Operation
    resource_name: str
    webhook_token: str


class OutRequest(BaseModel):
    """Payload Concourse writes to the ``out`` script's stdin."""

    model_config = ConfigDict(frozen=True)

    source: Source
    params: Params


class CheckRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: dict[str, Any] = Field(default_factory=dict)
    version: dict[str, str] | None = None


class InRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: dict[str, Any] = Field(default_factory=dict)
    version: dict[str, str] | None = None
    params: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# GitHub hooks
# ---------------------------------------------------------------------------

@dataclass
class Hook:
    """A repository webhook as returned by the GitHub hooks API."""

    id: int | str
    url: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Hook:
        # A config that is not an object, or a non-string url, can never match
        config = data.get("config")
        url = config.get("url") if isinstance(config, dict) else None
        return cls(id=data["id"], url=url if isinstance(url, str) else "")


@dataclass
class Version:
    id: str

    @classmethod
    def for_hook(cls, hook_id: int | str) -> Version:
        return cls(id=str(hook_id))

    def to_output(self) -> dict[str, dict[str, str]]:
        return {"version": {"id": self.id}}
