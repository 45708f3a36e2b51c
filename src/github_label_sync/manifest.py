"""Load the label manifest (`labelsync.json`).

The manifest is validated once, at the boundary, into typed `RepositoryConfig`
values and sibling rules. Each repository entry is validated on its own so a
mistake in one repository does not block the others.

Example:

    {
      "strict": false,
      "repos": {
        "octo-org/api": {
          "strict": true,
          "labels": [
            {"name": "bug", "color": "#d73a4a", "siblings": ["needs-triage"]}
          ],
          "siblings": {"needs-triage": ["priority/unset"]}
        }
      }
    }
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from github_label_sync.errors import ConfigurationError
from github_label_sync.labels import LabelSpec, RepositoryConfig, SiblingRules, normalize_color

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^[0-9a-f]{6}$")


class LabelEntry(BaseModel):
    """A single declared label."""

    model_config = ConfigDict(extra="forbid")

    name: str
    color: str
    description: str = Field(default="")
    siblings: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("label name must not be empty")
        return value

    @field_validator("color")
    @classmethod
    def _hex_color(cls, value: str) -> str:
        color = normalize_color(value)
        if not _HEX_COLOR.match(color):
            raise ValueError(f"invalid color {value!r}: expected 6 hex digits")
        return color

    @field_validator("siblings")
    @classmethod
    def _siblings_not_blank(cls, value: list[str]) -> list[str]:
        if any(not s.strip() for s in value):
            raise ValueError("sibling label names must not be empty")
        return value


class RepositoryEntry(BaseModel):
    """Manifest entry for a single repository."""

    model_config = ConfigDict(extra="forbid")

    strict: bool | None = None
    labels: list[LabelEntry] = Field(default_factory=list)
    siblings: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("siblings")
    @classmethod
    def _rules_not_blank(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        for trigger, siblings in value.items():
            if not trigger.strip():
                raise ValueError("sibling trigger names must not be empty")
            if any(not s.strip() for s in siblings):
                raise ValueError(f"siblings of {trigger!r} must not contain empty names")
        return value


@dataclass(frozen=True, slots=True)
class RepositoryManifest:
    """A validated repository entry: its label config plus sibling rules."""

    config: RepositoryConfig
    rules: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def repository(self) -> str:
        return self.config.repository


@dataclass(frozen=True, slots=True)
class Manifest:
    """All repositories declared in a manifest.

    `errors` maps repository ids whose entries failed validation to a message.
    """

    repositories: tuple[RepositoryManifest, ...] = ()
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def configs(self) -> list[RepositoryConfig]:
        return [repo.config for repo in self.repositories]

    @property
    def rules(self) -> dict[str, SiblingRules]:
        return {repo.repository: repo.rules for repo in self.repositories}

    def select(self, repositories: list[str]) -> Manifest:
        """Return a manifest restricted to `repositories`.

        Raises:
            ConfigurationError: If a requested repository is not in the manifest.
        """

        known = {repo.repository for repo in self.repositories} | set(self.errors)
        missing = [r for r in repositories if r not in known]
        if missing:
            raise ConfigurationError(f"Not in manifest: {', '.join(missing)}")
        wanted = set(repositories)
        return Manifest(
            repositories=tuple(r for r in self.repositories if r.repository in wanted),
            errors={k: v for k, v in self.errors.items() if k in wanted},
        )


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise ConfigurationError(f"Duplicate key in manifest: {key!r}")
        result[key] = value
    return result


def _merge_rules(entry: RepositoryEntry) -> dict[str, tuple[str, ...]]:
    merged: dict[str, list[str]] = {}
    for label in entry.labels:
        if label.siblings:
            merged.setdefault(label.name, [])
            merged[label.name].extend(label.siblings)
    for trigger, siblings in entry.siblings.items():
        merged.setdefault(trigger, [])
        merged[trigger].extend(siblings)
    # Keep first occurrence when a sibling is declared in both places.
    return {trigger: tuple(dict.fromkeys(siblings)) for trigger, siblings in merged.items()}


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ()))
        message = item.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def parse_manifest(text: str) -> Manifest:
    """Parse manifest JSON text.

    Raises:
        ConfigurationError: If the document as a whole is unusable. Problems in a
            single repository entry are reported in `Manifest.errors` instead.
    """

    try:
        raw = json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Manifest is not valid JSON: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError("Manifest must be a JSON object")

    unknown = sorted(set(raw) - {"strict", "repos"})
    if unknown:
        raise ConfigurationError(f"Unknown manifest keys: {', '.join(unknown)}")

    default_strict = raw.get("strict", False)
    if not isinstance(default_strict, bool):
        raise ConfigurationError("Manifest 'strict' must be true or false")

    repos = raw.get("repos")
    if not isinstance(repos, dict):
        raise ConfigurationError("Manifest must contain a 'repos' object")

    repositories: list[RepositoryManifest] = []
    errors: dict[str, str] = {}
    for repository, body in repos.items():
        if not repository.strip():
            errors[repository] = "Repository identifier is required"
            continue
        try:
            entry = RepositoryEntry.model_validate(body)
        except ValidationError as e:
            errors[repository] = _format_validation_error(e)
            logger.warning(
                "Invalid repository entry in manifest",
                extra={"repo": repository, "error": errors[repository]},
            )
            continue

        config = RepositoryConfig(
            repository=repository,
            labels=tuple(
                LabelSpec(name=label.name, color=label.color, description=label.description)
                for label in entry.labels
            ),
            strict=default_strict if entry.strict is None else entry.strict,
        )
        repositories.append(RepositoryManifest(config=config, rules=_merge_rules(entry)))

    return Manifest(repositories=tuple(repositories), errors=errors)


def load_manifest(path: Path) -> Manifest:
    """Read and parse the manifest at `path`."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read manifest {path}: {e}") from e

    manifest = parse_manifest(text)
    logger.info(
        "Manifest loaded",
        extra={
            "path": str(path),
            "repositories": len(manifest.repositories),
            "invalid": len(manifest.errors),
        },
    )
    return manifest
