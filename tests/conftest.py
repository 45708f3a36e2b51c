"""Test configuration and fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from github_label_sync.engine.orchestrator import RepositoryState
from github_label_sync.labels import Issue, LabelSpec, ObservedLabel, RepositoryConfig


@pytest.fixture
def desired_labels() -> list[LabelSpec]:
    """Provide a small declared label set."""
    return [
        LabelSpec(name="bug", color="#D73A4A", description="Something is broken"),
        LabelSpec(name="needs-triage", color="ededed", description="Not looked at yet"),
        LabelSpec(name="priority/unset", color="cccccc", description=""),
    ]


@pytest.fixture
def observed_labels() -> list[ObservedLabel]:
    """Provide labels as they exist in the repository."""
    return [
        ObservedLabel(name="wontfix", color="ffffff", description="This will not be worked on"),
        ObservedLabel(name="bug", color="d73a4a", description="Something is broken"),
        ObservedLabel(name="needs-triage", color="fbca04", description="Not looked at yet"),
    ]


@pytest.fixture
def issues() -> list[Issue]:
    """Provide open issues with a mix of trigger labels."""
    return [
        Issue(number=1, title="Crash on start", labels=frozenset({"needs-triage"})),
        Issue(number=2, title="Typo", labels=frozenset({"bug", "needs-triage"})),
        Issue(number=3, title="Question", labels=frozenset()),
    ]


@pytest.fixture
def sibling_rules() -> dict[str, list[str]]:
    return {"needs-triage": ["priority/unset"], "bug": ["needs-triage"]}


@pytest.fixture
def repository_config(desired_labels: list[LabelSpec]) -> RepositoryConfig:
    return RepositoryConfig(repository="octo-org/api", labels=tuple(desired_labels), strict=False)


@pytest.fixture
def repository_state(observed_labels: list[ObservedLabel], issues: list[Issue]) -> RepositoryState:
    return RepositoryState(labels=tuple(observed_labels), issues=tuple(issues))


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    """Write a valid two-repository manifest and return its path."""
    path = tmp_path / "labelsync.json"
    path.write_text(
        json.dumps(
            {
                "strict": False,
                "repos": {
                    "octo-org/api": {
                        "strict": True,
                        "labels": [
                            {
                                "name": "bug",
                                "color": "#D73A4A",
                                "description": "Something is broken",
                                "siblings": ["needs-triage"],
                            },
                            {"name": "needs-triage", "color": "ededed"},
                        ],
                        "siblings": {"needs-triage": ["priority/unset"]},
                    },
                    "octo-org/web": {
                        "labels": [{"name": "design", "color": "5319e7"}],
                    },
                },
            },
            indent=2,
        ),
        encoding="utf-8",
    )
    return path
