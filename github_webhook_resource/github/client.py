"""GitHub REST client for the repository hooks API.

Only the three calls the resource needs are implemented: list, create and
delete. Failures are logged once here and raised as ``GitHubAPIError``;
there is no retry.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit, urlunsplit

import httpx

from github_webhook_resource.config import DEFAULT_USER_AGENT
from github_webhook_resource.errors import GitHubAPIError
from github_webhook_resource.models import Hook
from github_webhook_resource.utils.logging import get_logger

log = get_logger(__name__)

_MAX_LOGGED_BODY = 500


def settings_url(api_url: str) -> str:
    """Best-effort mapping of a hooks API URL to the repository's settings page.

    ``https://api.github.com/repos/o/r/hooks`` becomes
    ``https://github.com/o/r/settings/hooks``; GitHub Enterprise URLs lose
    their ``/api/v3`` prefix instead.
    """
    parts = urlsplit(api_url)
    host = parts.netloc
    path = parts.path
    if host == "api.github.com":
        host = "github.com"
    path = path.removeprefix("/api/v3")
    path = path.removeprefix("/repos")
    idx = path.find("/hooks")
    if idx != -1:
        path = path[:idx] + "/settings/hooks"
    return urlunsplit((parts.scheme, host, path, "", ""))


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


class GitHubClient:
    """Async client for repository webhooks.

    Example:
        >>> async with GitHubClient(token="ghp_xxx") as client:
        ...     hooks = await client.list_hooks(hooks_url)
    """

    def __init__(
        self,
        token: str,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/vnd.github+json",
                "Authorization": f"token {token}",
                "User-Agent": user_agent,
            },
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self, method: str, url: str, body: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Send one request; any transport error or non-2xx status raises."""
        log.debug("github_request", method=method, url=url)
        try:
            response = await self._client.request(method, url, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _error_message(e.response)
            self._log_failure(type(e).__name__, message, url, status, e.response.text)
            raise GitHubAPIError(
                message,
                status_code=status,
                response_body=e.response.text,
                request_url=url,
            ) from e
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            self._log_failure(type(e).__name__, message, url, None)
            raise GitHubAPIError(message, request_url=url) from e
        return response

    def _log_failure(
        self, error: str, message: str, url: str, status: int | None, body: str = ""
    ) -> None:
        log.error(
            "github_request_failed",
            error=error,
            status=status,
            message=message,
            url=url,
            response_body=body[:_MAX_LOGGED_BODY] or None,
        )
        if status == 404:
            log.error(
                "github_not_found_hint",
                hint=(
                    "GitHub answers 404 when the token cannot see the hooks. The token "
                    "owner must be an administrator of the repository and the token needs "
                    "the public_repo scope (repo for private repositories) or admin:repo_hook."
                ),
                settings_url=settings_url(url),
            )

    async def list_hooks(self, hooks_url: str) -> list[Hook]:
        response = await self.request("GET", hooks_url)
        data = _json_or_none(response)
        if not isinstance(data, list):
            log.error("github_unexpected_response", url=hooks_url, expected="array")
            raise GitHubAPIError(
                "hook list response is not an array",
                status_code=response.status_code,
                response_body=response.text,
                request_url=hooks_url,
            )
        return [Hook.from_api(item) for item in data if isinstance(item, dict) and "id" in item]

    async def create_hook(self, hooks_url: str, callback_url: str) -> Hook:
        body = {
            "name": "web",
            "config": {"url": callback_url, "content-type": "json"},
        }
        response = await self.request("POST", hooks_url, body)
        data = _json_or_none(response)
        if not isinstance(data, dict) or "id" not in data:
            log.error("github_unexpected_response", url=hooks_url, expected="hook with id")
            raise GitHubAPIError(
                "created hook response has no id",
                status_code=response.status_code,
                response_body=response.text,
                request_url=hooks_url,
            )
        return Hook.from_api(data)

    async def delete_hook(self, hooks_url: str, hook_id: int | str) -> None:
        await self.request("DELETE", f"{hooks_url}/{hook_id}")
