"""Sibling propagation engine.

A sibling rule says "whenever an issue carries label X, it should also carry
labels Y and Z". Propagation only ever adds labels; it never removes a label
from an issue, even when the trigger itself goes away.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from github_label_sync.errors import ConfigurationError
from github_label_sync.labels import Issue, SiblingRules


@dataclass(frozen=True, slots=True)
class SiblingPlan:
    """Labels to attach to a single issue.

    An empty `labels_to_add` is a valid plan meaning "nothing to do".
    """

    issue: Issue
    labels_to_add: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.labels_to_add


def validate_sibling_rules(rules: SiblingRules, *, repository: str | None = None) -> None:
    """Reject rules with blank trigger or sibling names."""

    for trigger, siblings in rules.items():
        if not isinstance(trigger, str) or not trigger.strip():
            raise ConfigurationError(
                "Sibling rule has an empty trigger label", repository=repository
            )
        if isinstance(siblings, str):
            raise ConfigurationError(
                f"Siblings of {trigger!r} must be a list of label names, not a string",
                repository=repository,
            )
        for sibling in siblings:
            if not isinstance(sibling, str) or not sibling.strip():
                raise ConfigurationError(
                    f"Sibling rule for {trigger!r} contains an empty label name",
                    repository=repository,
                )


def _siblings_for(
    rules: SiblingRules,
    present: frozenset[str],
    *,
    chained: bool,
) -> tuple[str, ...]:
    planned: list[str] = []
    planned_set: set[str] = set()
    active = set(present)

    while True:
        grew = False
        for trigger, siblings in rules.items():
            if trigger not in active:
                continue
            for sibling in siblings:
                if sibling in present or sibling in planned_set:
                    continue
                planned.append(sibling)
                planned_set.add(sibling)
                grew = True
        if not chained or not grew:
            break
        active = set(present) | planned_set

    return tuple(planned)


def plan_siblings(
    rules: SiblingRules,
    issues: Sequence[Issue],
    *,
    chained: bool = False,
) -> list[SiblingPlan]:
    """Compute which sibling labels each issue is missing.

    Triggers are evaluated against each issue's current labels only. With
    `chained=True`, siblings that are themselves triggers are expanded within
    the same pass, so a single application reaches a fixed point even for rule
    chains such as a -> b -> c.

    Labels within a plan follow first-occurrence order across the rule set.
    Every issue gets a plan, in input order.
    """

    return [
        SiblingPlan(issue=issue, labels_to_add=_siblings_for(rules, issue.labels, chained=chained))
        for issue in issues
    ]


def apply_plan(plan: SiblingPlan) -> Issue:
    """Return the plan's issue as it looks once the planned labels are attached."""

    return plan.issue.with_labels(plan.labels_to_add)
