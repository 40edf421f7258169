"""Exceptions raised by the resource scripts.

Nothing below the CLI layer terminates the process: failures are raised as
``ResourceError`` subclasses and the command entry points turn them into a
nonzero exit status.
"""

from __future__ import annotations


class ResourceError(Exception):
    """Base class for every failure that should fail the Concourse step."""


class InputError(ResourceError):
    """Standard input could not be decoded into a request."""


class ValidationFailed(ResourceError):
    """One or more required fields were missing or invalid.

    Attributes:
        problems: One diagnostic per failed check, in check order.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__(f"{len(self.problems)} configuration problem(s): " + "; ".join(self.problems))


class GitHubAPIError(ResourceError):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code, if a response was received.
        response_body: Response body from the GitHub API.
        request_url: The URL that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
        request_url: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_url = request_url
        super().__init__(message)
