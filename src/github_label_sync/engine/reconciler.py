"""Repository reconciler.

Combines the diff engine and the sibling propagation engine for one repository.
`reconcile` is a pure function of its inputs: it never talks to GitHub, so the
result describes a plan, not what was actually applied.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from github_label_sync.engine.diff import diff_labels, find_duplicate_names
from github_label_sync.engine.siblings import SiblingPlan, plan_siblings, validate_sibling_rules
from github_label_sync.errors import ConfigurationError
from github_label_sync.labels import (
    Addition,
    Issue,
    ObservedLabel,
    Removal,
    RepositoryConfig,
    SiblingRules,
    Unchanged,
    Update,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Everything that should change in one repository."""

    repository: str
    strict: bool
    additions: tuple[Addition, ...] = ()
    updates: tuple[Update, ...] = ()
    removals: tuple[Removal, ...] = ()
    unchanged: tuple[Unchanged, ...] = ()
    sibling_plans: tuple[SiblingPlan, ...] = ()
    errors: tuple[str, ...] = ()

    @property
    def executable_removals(self) -> tuple[Removal, ...]:
        return tuple(r for r in self.removals if r.executable)

    @property
    def advisory_removals(self) -> tuple[Removal, ...]:
        return tuple(r for r in self.removals if not r.executable)

    @property
    def pending_plans(self) -> tuple[SiblingPlan, ...]:
        """Sibling plans that actually add something."""

        return tuple(p for p in self.sibling_plans if not p.is_empty)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.additions or self.updates or self.executable_removals or self.pending_plans
        )


def validate_repository_config(config: RepositoryConfig) -> None:
    """Check the structural invariants of a repository configuration.

    Raises:
        ConfigurationError: On a blank repository id or duplicate label names.
    """

    if not isinstance(config.repository, str) or not config.repository.strip():
        raise ConfigurationError("Repository identifier is required")

    duplicates = find_duplicate_names(config.labels)
    if duplicates:
        raise ConfigurationError(
            f"Duplicate label names: {', '.join(duplicates)}",
            repository=config.repository,
        )

    for spec in config.labels:
        if not spec.name.strip():
            raise ConfigurationError("Label name must not be empty", repository=config.repository)


def _unknown_sibling_targets(
    rules: SiblingRules,
    config: RepositoryConfig,
    observed_labels: Sequence[ObservedLabel],
) -> list[str]:
    known = {spec.name for spec in config.labels} | {label.name for label in observed_labels}
    unknown: list[str] = []
    for siblings in rules.values():
        for sibling in siblings:
            if sibling not in known and sibling not in unknown:
                unknown.append(sibling)
    return unknown


def _case_collisions(
    additions: Sequence[Addition], observed_labels: Sequence[ObservedLabel]
) -> dict[str, str]:
    """Map observed label names to declared names that differ only by case.

    GitHub compares label names case-insensitively, so creating `Bug` next to
    an existing `bug` fails while deleting `bug` would succeed.
    """

    observed = {label.name.casefold(): label.name for label in observed_labels}
    collisions: dict[str, str] = {}
    for addition in additions:
        existing = observed.get(addition.name.casefold())
        if existing is not None and existing != addition.name:
            collisions[existing] = addition.name
    return collisions


def reconcile(
    config: RepositoryConfig,
    observed_labels: Sequence[ObservedLabel],
    issues: Sequence[Issue],
    rules: SiblingRules | None = None,
    *,
    chained: bool = False,
) -> ReconciliationResult:
    """Plan label changes and sibling attachments for one repository.

    Removals are only marked executable when `config.strict` is set; otherwise
    they stay in the result as advisory entries. An existing label whose name
    differs from a declared one only by case is never removed.

    Sibling propagation uses the issues' current labels as fetched, not the
    labels they would have once this plan is applied.

    Raises:
        ConfigurationError: If `config` or `rules` are malformed. Raised before
            any diffing happens.
    """

    validate_repository_config(config)
    rules = rules or {}
    validate_sibling_rules(rules, repository=config.repository)

    additions: list[Addition] = []
    updates: list[Update] = []
    removals: list[Removal] = []
    unchanged: list[Unchanged] = []
    for change in diff_labels(config.labels, observed_labels):
        if isinstance(change, Addition):
            additions.append(change)
        elif isinstance(change, Update):
            updates.append(change)
        elif isinstance(change, Removal):
            removals.append(replace(change, executable=config.strict))
        else:
            unchanged.append(change)

    collisions = _case_collisions(additions, observed_labels)
    removals = [replace(r, executable=False) if r.name in collisions else r for r in removals]

    plans = plan_siblings(rules, issues, chained=chained)

    errors = [
        f"Label {declared!r} differs from existing label {existing!r} only by case; "
        f"{existing!r} is kept"
        for existing, declared in collisions.items()
    ]
    errors += [
        f"Sibling label {name!r} is not declared and does not exist in the repository"
        for name in _unknown_sibling_targets(rules, config, observed_labels)
    ]

    result = ReconciliationResult(
        repository=config.repository,
        strict=config.strict,
        additions=tuple(additions),
        updates=tuple(updates),
        removals=tuple(removals),
        unchanged=tuple(unchanged),
        sibling_plans=tuple(plans),
        errors=tuple(errors),
    )

    logger.debug(
        "Reconciled repository",
        extra={
            "repo": config.repository,
            "additions": len(result.additions),
            "updates": len(result.updates),
            "removals": len(result.removals),
            "executable_removals": len(result.executable_removals),
            "issues_to_label": len(result.pending_plans),
        },
    )
    return result
