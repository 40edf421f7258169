"""Decoding and validation of the JSON requests Concourse sends on stdin."""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from github_webhook_resource.config import ConcourseEnvironment
from github_webhook_resource.errors import InputError, ValidationFailed
from github_webhook_resource.models import Operation, OutRequest
from github_webhook_resource.utils.logging import get_logger

log = get_logger(__name__)

REQUIRED_PAYLOAD_FIELDS = (
    "source.github_api",
    "source.github_token",
    "params.org",
    "params.repo",
    "params.resource_name",
    "params.webhook_token",
)

SUPPORTED_OPERATIONS = tuple(op.value for op in Operation)


def decode_payload(buffer: bytes | str) -> dict[str, Any]:
    """Decode a stdin buffer into a JSON object."""
    try:
        data = json.loads(buffer)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        log.error("input_decode_failed", error=str(e))
        raise InputError(f"stdin is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        log.error("input_decode_failed", error="top-level value is not an object")
        raise InputError("stdin must contain a JSON object")
    return data


def lookup(data: dict[str, Any], path: str) -> Any:
    """Resolve a dotted path like ``params.repo``; None if any hop is missing."""
    node: Any = data
    for part in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(part)
    return node


def _check_present(value: Any, name: str, problems: list[str]) -> bool:
    if value is None or value == "":
        log.error("missing_required_field", field=name)
        problems.append(f"missing {name}")
        return False
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        log.error("invalid_field_type", field=name, expected="string", got=type(value).__name__)
        problems.append(f"{name} must be a string")
        return False
    return True


def _as_text(section: dict[str, Any]) -> dict[str, Any]:
    # YAML turns values like `webhook_token: 12345` into JSON numbers
    return {
        key: str(value) if isinstance(value, (int, float)) and not isinstance(value, bool) else value
        for key, value in section.items()
    }


def _check_operation(value: Any, problems: list[str]) -> bool:
    if not _check_present(value, "params.operation", problems):
        return False
    if str(value).lower() not in SUPPORTED_OPERATIONS:
        log.error(
            "unsupported_operation",
            operation=value,
            supported=list(SUPPORTED_OPERATIONS),
        )
        problems.append(f"unsupported operation {value!r}")
        return False
    return True


def validate_out_request(data: dict[str, Any], env: ConcourseEnvironment) -> OutRequest:
    """Check every required value and build the typed request.

    All checks run even after one fails so a single build log shows every
    problem; the aggregate result never flips back to valid.
    """
    problems: list[str] = []
    valid = True

    env_values = {
        "ATC_EXTERNAL_URL": env.external_url,
        "BUILD_TEAM_NAME": env.team_name,
        "BUILD_PIPELINE_NAME": env.pipeline_name,
    }
    for name, value in env_values.items():
        ok = _check_present(value, name, problems)
        valid = valid and ok

    for path in REQUIRED_PAYLOAD_FIELDS:
        ok = _check_present(lookup(data, path), path, problems)
        valid = valid and ok

    operation = lookup(data, "params.operation")
    ok = _check_operation(operation, problems)
    valid = valid and ok

    if not valid:
        raise ValidationFailed(problems)

    params = _as_text(data["params"])
    params["operation"] = params["operation"].lower()
    try:
        return OutRequest.model_validate({"source": _as_text(data["source"]), "params": params})
    except ValidationError as e:
        raise InputError(f"invalid request: {e}") from e
