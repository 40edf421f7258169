"""GitHub hooks API client."""

from github_webhook_resource.github.client import GitHubClient, settings_url

__all__ = ["GitHubClient", "settings_url"]
