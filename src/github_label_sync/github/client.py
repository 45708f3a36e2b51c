"""GitHub API client wrapper.

This wraps PyGithub (labels) and a plain requests session (issues) so GitHub calls
stay out of the engine and tests can inject fakes.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from github import Auth, Github
from github.Repository import Repository

from github_label_sync.labels import Issue, LabelSpec, ObservedLabel

logger = logging.getLogger(__name__)


class GitHubClient:
    """Label and issue operations for a single repository."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
        session: requests.Session | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository.strip("/ "):
            raise ValueError("GitHub repository is required")

        self._repository_name = repository.strip("/ ")
        self._rest_base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-label-sync",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

        self._repo = self._github.get_repo(self._repository_name)
        logger.info(
            "Authenticated with GitHub and connected to repository",
            extra={"repo": self._repository_name},
        )

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _repo_url(self, path: str) -> str:
        path = path.strip("/")
        base = f"{self._rest_base_url}/repos/{self._repository_name}"
        return f"{base}/{path}" if path else base

    def _get_paginated_json_list(
        self, url: str, params: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Fetch a REST endpoint returning a JSON list, following page numbers."""

        items: list[dict[str, Any]] = []
        per_page = 100
        page = 1
        while True:
            resp = self._session.get(
                url,
                params={**(params or {}), "per_page": per_page, "page": page},
                timeout=30,
            )
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                break

            items.extend(p for p in payload if isinstance(p, dict))

            if len(payload) < per_page:
                break
            page += 1
        return items

    def list_labels(self) -> list[ObservedLabel]:
        labels = [
            ObservedLabel(
                name=label.name,
                color=label.color or "",
                description=label.description or "",
            )
            for label in self._repo.get_labels()
        ]
        logger.debug(
            "Fetched repository labels",
            extra={"repo": self._repository_name, "count": len(labels)},
        )
        return labels

    @staticmethod
    def _parse_issue_json(data: dict[str, Any]) -> Issue | None:
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            return None

        title = data.get("title")
        body = data.get("body")
        names: set[str] = set()
        for label in data.get("labels") or []:
            name = label.get("name") if isinstance(label, dict) else label
            if isinstance(name, str) and name:
                names.add(name)

        return Issue(
            number=number,
            title=title if isinstance(title, str) else "",
            description=body if isinstance(body, str) else "",
            labels=frozenset(names),
        )

    def list_open_issues(self) -> list[Issue]:
        """Return open issues, excluding pull requests."""

        raw = self._get_paginated_json_list(self._repo_url("issues"), params={"state": "open"})
        issues: list[Issue] = []
        for item in raw:
            # The issues endpoint also lists pull requests.
            if "pull_request" in item:
                continue
            issue = self._parse_issue_json(item)
            if issue is not None:
                issues.append(issue)
        logger.debug(
            "Fetched open issues",
            extra={"repo": self._repository_name, "count": len(issues)},
        )
        return issues

    def create_label(self, spec: LabelSpec) -> None:
        logger.info("Creating label", extra={"repo": self._repository_name, "label": spec.name})
        self._repo.create_label(name=spec.name, color=spec.color, description=spec.description)

    def update_label(self, spec: LabelSpec) -> None:
        """Replace the color and description of an existing label."""

        logger.info("Updating label", extra={"repo": self._repository_name, "label": spec.name})
        label = self._repo.get_label(spec.name)
        label.edit(name=spec.name, color=spec.color, description=spec.description)

    def delete_label(self, name: str) -> None:
        logger.info("Deleting label", extra={"repo": self._repository_name, "label": name})
        self._repo.get_label(name).delete()

    def add_labels_to_issue(self, *, issue_number: int, labels: list[str]) -> list[str]:
        """Attach labels to an issue. Returns the issue's labels afterwards."""

        if issue_number <= 0:
            raise ValueError("issue_number must be a positive integer")
        if not labels:
            return []

        url = self._repo_url(f"issues/{issue_number}/labels")
        resp = self._session.post(url, json={"labels": labels}, timeout=30)
        resp.raise_for_status()
        payload = resp.json()

        logger.info(
            "Attached labels to issue",
            extra={"repo": self._repository_name, "issue_number": issue_number, "labels": labels},
        )
        if not isinstance(payload, list):
            return []
        return [
            item["name"]
            for item in payload
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        ]

    def close(self) -> None:
        if self._github is not None:
            self._github.close()
        self._session.close()
