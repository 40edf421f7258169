"""Bring a repository's webhooks in line with the requested operation."""

from __future__ import annotations

import time
from typing import Callable
from urllib.parse import quote

from github_webhook_resource.config import ConcourseEnvironment
from github_webhook_resource.github.client import GitHubClient
from github_webhook_resource.models import Hook, Operation, OutRequest, Params, Source, Version
from github_webhook_resource.utils.logging import get_logger

log = get_logger(__name__)

CALLBACK_TEMPLATE = (
    "{external_url}/api/v1/teams/{team}/pipelines/{pipeline}"
    "/resources/{resource}/check/webhook?webhook_token={token}"
)

# Characters a full URI keeps unescaped, on top of quote()'s letters, digits and "_.-~"
_URI_SAFE = ";,/?:@&=+$#!*'()"


def encode_uri(url: str) -> str:
    """Percent-encode a complete URL, leaving its reserved characters intact."""
    return quote(url, safe=_URI_SAFE)


def hooks_endpoint(source: Source, params: Params) -> str:
    return f"{source.github_api.rstrip('/')}/repos/{params.org}/{params.repo}/hooks"


def callback_url(env: ConcourseEnvironment, params: Params) -> str:
    """The Concourse check-webhook URL GitHub should call for this resource."""
    return encode_uri(
        CALLBACK_TEMPLATE.format(
            external_url=env.external_url,
            team=env.team_name,
            pipeline=env.pipeline_name,
            resource=params.resource_name,
            token=params.webhook_token,
        )
    )


def find_hook(hooks: list[Hook], url: str) -> Hook | None:
    """Exact, case-sensitive match on ``config.url``."""
    for hook in hooks:
        if hook.url and hook.url == url:
            return hook
    return None


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


async def reconcile(
    request: OutRequest,
    env: ConcourseEnvironment,
    client: GitHubClient,
    clock: Callable[[], int] = epoch_millis,
) -> Version:
    params = request.params
    endpoint = hooks_endpoint(request.source, params)
    target = callback_url(env, params)

    hooks = await client.list_hooks(endpoint)
    existing = find_hook(hooks, target)
    log.info(
        "hooks_listed",
        repo=f"{params.org}/{params.repo}",
        count=len(hooks),
        matched=existing.id if existing else None,
        operation=params.operation.value,
    )

    if params.operation == Operation.CREATE:
        if existing is not None:
            log.info("hook_exists", hook_id=existing.id)
            return Version.for_hook(existing.id)
        created = await client.create_hook(endpoint, target)
        log.info("hook_created", hook_id=created.id)
        return Version.for_hook(created.id)

    if existing is None:
        log.info("hook_absent", resource=params.resource_name)
        return Version.for_hook(clock())
    await client.delete_hook(endpoint, existing.id)
    log.info("hook_deleted", hook_id=existing.id)
    return Version.for_hook(existing.id)
