"""Label diff engine.

Turns (declared labels, repository labels) into a list of label changes. This is a
pure function: it performs no I/O and keeps no state between calls.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from github_label_sync.errors import ConfigurationError
from github_label_sync.labels import (
    Addition,
    ChangedField,
    LabelChange,
    LabelSpec,
    ObservedLabel,
    Removal,
    Unchanged,
    Update,
    normalize_color,
)


def find_duplicate_names(specs: Sequence[LabelSpec]) -> list[str]:
    """Return label names declared more than once, in first-occurrence order."""

    counts = Counter(spec.name for spec in specs)
    seen: set[str] = set()
    duplicates: list[str] = []
    for spec in specs:
        if counts[spec.name] > 1 and spec.name not in seen:
            duplicates.append(spec.name)
            seen.add(spec.name)
    return duplicates


def changed_fields(spec: LabelSpec, observed: ObservedLabel) -> frozenset[ChangedField]:
    fields: set[ChangedField] = set()
    if normalize_color(spec.color) != normalize_color(observed.color):
        fields.add(ChangedField.COLOR)
    if spec.description != (observed.description or ""):
        fields.add(ChangedField.DESCRIPTION)
    return frozenset(fields)


def diff_labels(
    desired: Sequence[LabelSpec],
    observed: Sequence[ObservedLabel],
) -> list[LabelChange]:
    """Compute the changes needed to turn `observed` into `desired`.

    Additions and updates come first, in `desired` order. Removals and unchanged
    labels follow, in `observed` order. Every label name appears in exactly one
    change.

    Raises:
        ConfigurationError: If `desired` declares the same name more than once.
    """

    duplicates = find_duplicate_names(desired)
    if duplicates:
        raise ConfigurationError(f"Duplicate label names: {', '.join(duplicates)}")

    desired_by_name = {spec.name: spec for spec in desired}
    observed_by_name: dict[str, ObservedLabel] = {}
    for label in observed:
        # GitHub never returns duplicates; keep the first if a provider does.
        observed_by_name.setdefault(label.name, label)

    changes: list[LabelChange] = []
    for spec in desired:
        current = observed_by_name.get(spec.name)
        if current is None:
            changes.append(Addition(spec))
            continue
        fields = changed_fields(spec, current)
        if fields:
            changes.append(Update(spec=spec, observed=current, changed_fields=fields))

    emitted: set[str] = set()
    for label in observed:
        if label.name in emitted:
            continue
        emitted.add(label.name)
        if label.name not in desired_by_name:
            changes.append(Removal(label))
        elif not changed_fields(desired_by_name[label.name], label):
            changes.append(Unchanged(label))

    return changes
