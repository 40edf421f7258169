"""Concourse entry points: ``check``, ``in`` and ``out``.

Each command reads its request from stdin, writes exactly one JSON document
to stdout on success and logs to stderr. Any ``ResourceError`` raised below
is turned into exit status 1 here and nowhere else.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable

import click
import httpx
from pydantic import ValidationError

from github_webhook_resource.config import ConcourseEnvironment, Settings, load_environment, load_settings
from github_webhook_resource.core.reconciler import reconcile
from github_webhook_resource.core.validation import decode_payload, validate_out_request
from github_webhook_resource.errors import InputError, ResourceError
from github_webhook_resource.github.client import GitHubClient
from github_webhook_resource.models import CheckRequest, InRequest, Version
from github_webhook_resource.utils.logging import get_logger, setup_logging

log = get_logger(__name__)


async def run_out(
    buffer: bytes | str,
    env: ConcourseEnvironment,
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Version:
    data = decode_payload(buffer)
    request = validate_out_request(data, env)
    async with GitHubClient(
        request.source.github_token,
        timeout=settings.request_timeout,
        user_agent=settings.user_agent,
        transport=transport,
    ) as client:
        return await reconcile(request, env, client)


def run_check(buffer: bytes | str) -> list[dict[str, str]]:
    request = _parse(CheckRequest, decode_payload(buffer))
    # Versions only come from puts; echo back whatever Concourse already has
    if request.version:
        return [request.version]
    return []


def run_in(buffer: bytes | str, destination: Path) -> dict[str, Any]:
    request = _parse(InRequest, decode_payload(buffer))
    if not request.version or "id" not in request.version:
        log.error("missing_required_field", field="version.id")
        raise InputError("in requires a version with an id")
    destination.mkdir(parents=True, exist_ok=True)
    (destination / "id").write_text(request.version["id"])
    log.info("version_fetched", hook_id=request.version["id"], destination=str(destination))
    return {"version": request.version}


def _parse(model: Any, data: dict[str, Any]) -> Any:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        log.error("invalid_request", error=str(e))
        raise InputError(f"invalid request: {e}") from e


def emit(document: Any) -> None:
    """Write the result document to stdout; stdout carries nothing else."""
    click.echo(json.dumps(document, indent=2))
    log.info("result_emitted", result=document)


def _prepare(config_path: str | None, log_level: str | None) -> Settings:
    settings = load_settings(config_path)
    if log_level:
        settings.log_level = log_level
    setup_logging(level=settings.log_level, json_output=settings.log_json)
    return settings


def _execute(ctx: click.Context, step: Callable[[], Awaitable[Any] | Any]) -> None:
    try:
        result = step()
        if asyncio.iscoroutine(result):
            result = asyncio.run(result)
    except ResourceError as e:
        log.error("resource_failed", error=type(e).__name__, message=str(e))
        ctx.exit(1)
    emit(result)


def _read_stdin() -> bytes:
    return sys.stdin.buffer.read()


def _options(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")(func)
    func = click.option("--config", "config_path", default=None, help="Path to config YAML file")(func)
    return func


@click.command("out")
@click.argument("source_dir", required=False, type=click.Path())
@_options
@click.pass_context
def out_cli(ctx: click.Context, source_dir: str | None, config_path: str | None, log_level: str | None) -> None:
    """Create or delete the repository webhook for this resource."""
    settings = _prepare(config_path, log_level)
    env = load_environment()
    transport = (ctx.obj or {}).get("transport")
    buffer = _read_stdin()

    async def step() -> dict[str, Any]:
        version = await run_out(buffer, env, settings, transport=transport)
        return version.to_output()

    _execute(ctx, step)


@click.command("in")
@click.argument("destination", type=click.Path(file_okay=False))
@_options
@click.pass_context
def in_cli(ctx: click.Context, destination: str, config_path: str | None, log_level: str | None) -> None:
    """Fetch a version: writes the hook id into DESTINATION."""
    _prepare(config_path, log_level)
    buffer = _read_stdin()
    _execute(ctx, lambda: run_in(buffer, Path(destination)))


@click.command("check")
@_options
@click.pass_context
def check_cli(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """Report versions; only puts ever produce new ones."""
    _prepare(config_path, log_level)
    buffer = _read_stdin()
    _execute(ctx, lambda: run_check(buffer))


@click.group()
def cli() -> None:
    """Concourse resource that manages a GitHub repository webhook."""


cli.add_command(out_cli)
cli.add_command(in_cli)
cli.add_command(check_cli)


if __name__ == "__main__":
    cli()
