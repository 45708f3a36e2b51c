"""Unit tests for manifest loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from github_label_sync.errors import ConfigurationError
from github_label_sync.labels import LabelSpec
from github_label_sync.manifest import load_manifest, parse_manifest


def test_load_manifest(manifest_path: Path) -> None:
    manifest = load_manifest(manifest_path)

    assert manifest.errors == {}
    assert [r.repository for r in manifest.repositories] == ["octo-org/api", "octo-org/web"]

    api = manifest.repositories[0]
    assert api.config.strict is True
    assert api.config.labels == (
        LabelSpec(name="bug", color="d73a4a", description="Something is broken"),
        LabelSpec(name="needs-triage", color="ededed", description=""),
    )
    assert api.rules == {"bug": ("needs-triage",), "needs-triage": ("priority/unset",)}

    web = manifest.repositories[1]
    assert web.config.strict is False
    assert web.rules == {}


def test_rules_merge_label_and_repository_siblings() -> None:
    manifest = parse_manifest(
        json.dumps(
            {
                "repos": {
                    "o/r": {
                        "labels": [{"name": "bug", "color": "d73a4a", "siblings": ["a", "b"]}],
                        "siblings": {"bug": ["b", "c"], "epic": ["planning"]},
                    }
                }
            }
        )
    )

    assert manifest.rules["o/r"] == {"bug": ("a", "b", "c"), "epic": ("planning",)}


def test_invalid_repository_entry_does_not_affect_others() -> None:
    manifest = parse_manifest(
        json.dumps(
            {
                "repos": {
                    "o/bad": {"labels": [{"name": "bug", "color": "not-a-color"}]},
                    "o/good": {"labels": [{"name": "bug", "color": "d73a4a"}]},
                }
            }
        )
    )

    assert [r.repository for r in manifest.repositories] == ["o/good"]
    assert "o/bad" in manifest.errors
    assert "color" in manifest.errors["o/bad"]


def test_unknown_label_fields_are_rejected() -> None:
    manifest = parse_manifest(
        json.dumps({"repos": {"o/r": {"labels": [{"name": "x", "color": "000000", "alias": []}]}}})
    )

    assert "o/r" in manifest.errors


def test_blank_repository_key_is_reported() -> None:
    manifest = parse_manifest(json.dumps({"repos": {" ": {"labels": []}}}))

    assert manifest.errors == {" ": "Repository identifier is required"}


def test_duplicate_label_names_are_left_for_the_engine() -> None:
    manifest = parse_manifest(
        json.dumps(
            {
                "repos": {
                    "o/r": {
                        "labels": [
                            {"name": "bug", "color": "d73a4a"},
                            {"name": "bug", "color": "000000"},
                        ]
                    }
                }
            }
        )
    )

    assert [s.name for s in manifest.configs[0].labels] == ["bug", "bug"]


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        '{"repos": []}',
        '{"strict": "yes", "repos": {}}',
        '{"repos": {}, "extra": 1}',
        '{"repos": {"o/r": {}, "o/r": {}}}',
    ],
)
def test_document_level_errors_raise(text: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_manifest(text)


def test_missing_file_raises_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read manifest"):
        load_manifest(tmp_path / "missing.json")


def test_select_restricts_repositories(manifest_path: Path) -> None:
    manifest = load_manifest(manifest_path).select(["octo-org/web"])

    assert [r.repository for r in manifest.repositories] == ["octo-org/web"]


def test_select_unknown_repository_raises(manifest_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="octo-org/nope"):
        load_manifest(manifest_path).select(["octo-org/nope"])
