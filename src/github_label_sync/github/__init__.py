"""GitHub collaborators: API client and repository state provider."""

from github_label_sync.github.client import GitHubClient
from github_label_sync.github.provider import GitHubStateProvider

__all__ = ["GitHubClient", "GitHubStateProvider"]
