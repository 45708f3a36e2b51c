"""Unit tests for the GitHub state provider."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from github_label_sync.engine.orchestrator import RepositoryState
from github_label_sync.errors import FetchError
from github_label_sync.github.client import GitHubClient
from github_label_sync.github.provider import GitHubStateProvider
from github_label_sync.labels import Issue, ObservedLabel


def test_provider_returns_snapshot_and_closes_client() -> None:
    client = Mock(spec=GitHubClient)
    client.list_labels.return_value = [ObservedLabel(name="bug", color="d73a4a")]
    client.list_open_issues.return_value = [Issue(number=1, title="t", labels=frozenset({"bug"}))]
    provider = GitHubStateProvider(token="t", client_factory=lambda repository: client)

    state = provider("o/r")

    assert state == RepositoryState(
        labels=(ObservedLabel(name="bug", color="d73a4a"),),
        issues=(Issue(number=1, title="t", labels=frozenset({"bug"})),),
    )
    client.close.assert_called_once_with()


def test_provider_wraps_api_failures() -> None:
    client = Mock(spec=GitHubClient)
    client.list_labels.side_effect = requests.HTTPError("404 Not Found")
    provider = GitHubStateProvider(token="t", client_factory=lambda repository: client)

    with pytest.raises(FetchError) as excinfo:
        provider("o/missing")

    assert excinfo.value.repository == "o/missing"
    assert "404" in str(excinfo.value)
    client.close.assert_called_once_with()


def test_provider_wraps_connection_failures() -> None:
    def factory(repository: str) -> GitHubClient:
        raise ValueError("bad credentials")

    provider = GitHubStateProvider(token="t", client_factory=factory)

    with pytest.raises(FetchError, match="bad credentials"):
        provider("o/r")
