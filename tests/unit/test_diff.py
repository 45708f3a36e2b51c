"""Unit tests for the label diff engine."""

from __future__ import annotations

import pytest

from github_label_sync.engine.diff import diff_labels, find_duplicate_names
from github_label_sync.errors import ConfigurationError
from github_label_sync.labels import (
    Addition,
    ChangedField,
    ChangeKind,
    LabelSpec,
    ObservedLabel,
    Removal,
    Unchanged,
    Update,
)


def test_color_only_change_is_an_update() -> None:
    desired = [LabelSpec(name="bug", color="ff0000", description="d1")]
    observed = [ObservedLabel(name="bug", color="00ff00", description="d1")]

    changes = diff_labels(desired, observed)

    assert len(changes) == 1
    change = changes[0]
    assert isinstance(change, Update)
    assert change.changed_fields == frozenset({ChangedField.COLOR})
    assert change.spec == desired[0]


def test_description_change_is_exact_match() -> None:
    desired = [LabelSpec(name="bug", color="ff0000", description="Broken")]
    observed = [ObservedLabel(name="bug", color="ff0000", description="broken")]

    (change,) = diff_labels(desired, observed)

    assert isinstance(change, Update)
    assert change.changed_fields == frozenset({ChangedField.DESCRIPTION})


def test_color_comparison_ignores_case_and_hash() -> None:
    desired = [LabelSpec(name="bug", color="#FF0000", description="")]
    observed = [ObservedLabel(name="bug", color="ff0000", description="")]

    assert diff_labels(desired, observed) == [Unchanged(observed[0])]


def test_missing_remote_description_matches_empty() -> None:
    desired = [LabelSpec(name="bug", color="ff0000")]
    observed = [
        ObservedLabel(name="bug", color="ff0000", description=None)  # type: ignore[arg-type]
    ]

    assert [c.kind for c in diff_labels(desired, observed)] == [ChangeKind.UNCHANGED]


def test_diff_ordering(
    desired_labels: list[LabelSpec], observed_labels: list[ObservedLabel]
) -> None:
    changes = diff_labels(desired_labels, observed_labels)

    assert [(c.kind, c.name) for c in changes] == [
        (ChangeKind.UPDATE, "needs-triage"),
        (ChangeKind.ADDITION, "priority/unset"),
        (ChangeKind.REMOVAL, "wontfix"),
        (ChangeKind.UNCHANGED, "bug"),
    ]


def test_names_are_partitioned(
    desired_labels: list[LabelSpec], observed_labels: list[ObservedLabel]
) -> None:
    changes = diff_labels(desired_labels, observed_labels)

    names = [c.name for c in changes]
    assert len(names) == len(set(names))
    assert set(names) == {s.name for s in desired_labels} | {o.name for o in observed_labels}


def test_diff_is_deterministic(
    desired_labels: list[LabelSpec], observed_labels: list[ObservedLabel]
) -> None:
    assert diff_labels(desired_labels, observed_labels) == diff_labels(
        desired_labels, observed_labels
    )


def test_empty_desired_yields_advisory_removals_only() -> None:
    observed = [ObservedLabel(name="wontfix", color="ffffff", description="")]

    changes = diff_labels([], observed)

    assert changes == [Removal(observed[0])]
    assert changes[0].executable is False


def test_additions_carry_the_full_spec() -> None:
    spec = LabelSpec(name="new", color="123abc", description="fresh")

    assert diff_labels([spec], []) == [Addition(spec)]


def test_duplicate_desired_names_fail_fast() -> None:
    desired = [
        LabelSpec(name="bug", color="ff0000"),
        LabelSpec(name="bug", color="00ff00"),
    ]

    with pytest.raises(ConfigurationError, match="bug"):
        diff_labels(desired, [])


def test_find_duplicate_names_keeps_first_occurrence_order() -> None:
    specs = [
        LabelSpec(name="b", color="000000"),
        LabelSpec(name="a", color="000000"),
        LabelSpec(name="b", color="000000"),
        LabelSpec(name="a", color="000000"),
        LabelSpec(name="c", color="000000"),
    ]

    assert find_duplicate_names(specs) == ["b", "a"]


def test_duplicate_observed_names_use_first() -> None:
    desired = [LabelSpec(name="bug", color="ff0000")]
    observed = [
        ObservedLabel(name="bug", color="ff0000"),
        ObservedLabel(name="bug", color="00ff00"),
    ]

    assert diff_labels(desired, observed) == [Unchanged(observed[0])]
