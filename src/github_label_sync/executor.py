"""Apply a reconciliation plan to GitHub.

Operations run in plan order: additions, updates, executable removals, then
sibling attachments. Label changes go first so a sibling that is also a new
label exists before it is attached. Advisory removals are never applied.

A failing operation is recorded and the remaining operations still run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from github_label_sync.engine.reconciler import ReconciliationResult
from github_label_sync.errors import MutationError
from github_label_sync.github.client import GitHubClient
from github_label_sync.labels import LabelSpec

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    CREATE_LABEL = "create_label"
    UPDATE_LABEL = "update_label"
    DELETE_LABEL = "delete_label"
    ATTACH_LABELS = "attach_labels"


@dataclass(frozen=True, slots=True)
class OperationOutcome:
    """Result of one planned operation.

    `target` is the label name for label operations and "#<number>" for issue
    attachments, so outcomes can be matched back to plan entries.
    """

    kind: OperationKind
    target: str
    success: bool
    skipped: bool = False
    message: str = ""
    labels: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ExecutionReport:
    repository: str
    dry_run: bool
    outcomes: tuple[OperationOutcome, ...] = ()
    errors: tuple[MutationError, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors

    def outcomes_of(self, kind: OperationKind) -> list[OperationOutcome]:
        return [o for o in self.outcomes if o.kind == kind]


@dataclass(frozen=True, slots=True)
class _Operation:
    kind: OperationKind
    target: str
    spec: LabelSpec | None = None
    issue_number: int | None = None
    labels: tuple[str, ...] = ()

    def run(self, client: GitHubClient) -> None:
        if self.kind == OperationKind.CREATE_LABEL:
            client.create_label(self.spec)
        elif self.kind == OperationKind.UPDATE_LABEL:
            client.update_label(self.spec)
        elif self.kind == OperationKind.DELETE_LABEL:
            client.delete_label(self.target)
        else:
            client.add_labels_to_issue(issue_number=self.issue_number, labels=list(self.labels))


def _plan_operations(result: ReconciliationResult) -> list[_Operation]:
    operations: list[_Operation] = []
    for addition in result.additions:
        operations.append(_Operation(OperationKind.CREATE_LABEL, addition.name, spec=addition.spec))
    for update in result.updates:
        operations.append(_Operation(OperationKind.UPDATE_LABEL, update.name, spec=update.spec))
    for removal in result.executable_removals:
        operations.append(_Operation(OperationKind.DELETE_LABEL, removal.name))
    for plan in result.pending_plans:
        operations.append(
            _Operation(
                OperationKind.ATTACH_LABELS,
                f"#{plan.issue.number}",
                issue_number=plan.issue.number,
                labels=plan.labels_to_add,
            )
        )
    return operations


def apply_reconciliation(
    client: GitHubClient | None,
    result: ReconciliationResult,
    *,
    dry_run: bool = False,
) -> ExecutionReport:
    """Execute the changes planned in `result` through `client`.

    With `dry_run=True` nothing is called, `client` may be None, and every
    operation is reported as skipped.
    """

    if client is None and not dry_run:
        raise ValueError("A GitHub client is required unless dry_run is set")

    repository = result.repository
    outcomes: list[OperationOutcome] = []
    errors: list[MutationError] = []

    for op in _plan_operations(result):
        if dry_run:
            outcomes.append(
                OperationOutcome(
                    kind=op.kind, target=op.target, success=True, skipped=True, labels=op.labels
                )
            )
            continue

        try:
            op.run(client)
        except Exception as e:
            error = MutationError(repository, f"{op.kind.value} {op.target}", str(e))
            logger.warning(
                "Operation failed",
                extra={
                    "repo": repository,
                    "operation": op.kind.value,
                    "target": op.target,
                    "error": str(e),
                },
            )
            errors.append(error)
            outcomes.append(
                OperationOutcome(
                    kind=op.kind, target=op.target, success=False, message=str(e), labels=op.labels
                )
            )
            continue

        outcomes.append(
            OperationOutcome(kind=op.kind, target=op.target, success=True, labels=op.labels)
        )

    logger.info(
        "Dry run: no changes applied" if dry_run else "Applied reconciliation",
        extra={"repo": repository, "operations": len(outcomes), "failed": len(errors)},
    )
    return ExecutionReport(
        repository=repository,
        dry_run=dry_run,
        outcomes=tuple(outcomes),
        errors=tuple(errors),
    )
