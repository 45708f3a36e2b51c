"""Repository state provider backed by the GitHub API."""

from __future__ import annotations

import logging
from collections.abc import Callable

from github_label_sync.engine.orchestrator import RepositoryState
from github_label_sync.errors import FetchError
from github_label_sync.github.client import GitHubClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GitHubClient]


class GitHubStateProvider:
    """Fetch labels and open issues for a repository in one pass.

    Instances are callable so they can be handed straight to `sync_all`.
    """

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._token = token
        self._base_url = base_url
        self._client_factory = client_factory or self._default_client

    def _default_client(self, repository: str) -> GitHubClient:
        return GitHubClient(token=self._token, repository=repository, base_url=self._base_url)

    def client(self, repository: str) -> GitHubClient:
        return self._client_factory(repository)

    def __call__(self, repository: str) -> RepositoryState:
        try:
            client = self._client_factory(repository)
        except Exception as e:
            raise FetchError(repository, str(e)) from e

        try:
            # Labels and issues are read back to back so trigger membership and
            # the label diff come from the same pass.
            labels = client.list_labels()
            issues = client.list_open_issues()
        except Exception as e:
            raise FetchError(repository, str(e)) from e
        finally:
            client.close()

        logger.info(
            "Fetched repository state",
            extra={"repo": repository, "labels": len(labels), "issues": len(issues)},
        )
        return RepositoryState(labels=tuple(labels), issues=tuple(issues))
