"""Human readable text reports.

Rendering only: everything shown here is read from result objects, nothing is
decided here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from github_label_sync.engine.orchestrator import OutcomeStatus, RepositoryOutcome, SyncResult
from github_label_sync.engine.reconciler import ReconciliationResult
from github_label_sync.executor import ExecutionReport, OperationOutcome
from github_label_sync.labels import LabelSpec, ObservedLabel


def _label_line(label: LabelSpec | ObservedLabel, suffix: str = "") -> list[str]:
    lines = [f"  - {label.name} (#{label.color}){suffix}"]
    if label.description:
        lines.append(f"      {label.description}")
    return lines


def _section(title: str, body: list[str], empty: str) -> list[str]:
    return [title, *(body or [f"  {empty}"])]


def render_reconciliation(result: ReconciliationResult) -> str:
    """Render the plan for a single repository."""

    lines = [f"== {result.repository} =="]

    additions: list[str] = []
    for addition in result.additions:
        additions.extend(_label_line(addition.spec))
    lines += _section(f"New labels ({len(result.additions)}):", additions, "No new labels.")

    updates: list[str] = []
    for update in result.updates:
        fields = ", ".join(sorted(f.value for f in update.changed_fields))
        updates.extend(_label_line(update.spec, f" [changed: {fields}]"))
    lines += _section(f"Updated labels ({len(result.updates)}):", updates, "No labels updated.")

    removals: list[str] = []
    listed = result.executable_removals if result.strict else result.removals
    for removal in listed:
        removals.extend(_label_line(removal.label))
    if result.strict:
        title = f"Removed labels ({len(listed)}):"
        lines += _section(title, removals, "No labels removed.")
    else:
        lines += _section(
            f"Labels that should be removed ({len(result.removals)}):",
            removals,
            "No labels removed.",
        )
        if result.removals:
            lines.append(
                f"  {len(result.advisory_removals)} labels should be removed; "
                "set strict to true to remove them."
            )

    siblings = [
        f"  - Issue #{plan.issue.number} {plan.issue.title}: add {', '.join(plan.labels_to_add)}"
        for plan in result.pending_plans
    ]
    lines += _section(
        f"Sibling labels ({len(result.pending_plans)} issues):", siblings, "No issues to label."
    )

    if result.errors:
        lines.append("Warnings:")
        lines += [f"  - {error}" for error in result.errors]

    return "\n".join(lines)


def _outcome_line(outcome: OperationOutcome) -> str:
    status = "skipped" if outcome.skipped else ("ok" if outcome.success else "failed")
    line = f"  - {outcome.kind.value} {outcome.target}: {status}"
    if outcome.labels:
        line += f" ({', '.join(outcome.labels)})"
    if outcome.message:
        line += f": {outcome.message}"
    return line


def render_execution(report: ExecutionReport) -> str:
    lines = [f"Applied to {report.repository}:" if not report.dry_run else "Dry run, not applied:"]
    lines += [_outcome_line(o) for o in report.outcomes] or ["  Nothing to do."]
    return "\n".join(lines)


def _failure_line(outcome: RepositoryOutcome) -> str:
    return f"  - {outcome.repository}: {outcome.error or outcome.status.value}"


def render_sync(
    result: SyncResult,
    executions: Mapping[str, ExecutionReport] | None = None,
    *,
    dry_run: bool = False,
) -> str:
    """Render the report for a whole sync run."""

    executions = executions or {}
    outcomes: Sequence[RepositoryOutcome] = list(result.outcomes.values())
    lines = ["GitHub Label Sync Report"]
    if dry_run:
        lines.append("(dry run: no changes were applied)")
    lines.append("")

    config_errors = [o for o in outcomes if o.status == OutcomeStatus.CONFIGURATION_ERROR]
    lines.append("Configuration errors:")
    lines += [_failure_line(o) for o in config_errors] or ["  Everything looks fine."]
    lines.append("")

    sync_errors = [
        o for o in outcomes if o.status in (OutcomeStatus.FETCH_ERROR, OutcomeStatus.ERROR)
    ]
    lines.append("Sync errors:")
    lines += [_failure_line(o) for o in sync_errors] or ["  Everything looks fine."]
    lines.append("")

    if result.cancelled:
        lines.append("Cancelled:")
        lines += [f"  - {o.repository}" for o in result.cancelled]
        lines.append("")

    lines.append(f"Changes ({len(result.successes)} repositories):")
    if not result.successes:
        lines.append("  No successful sync reports.")
    for outcome in result.successes:
        if outcome.result is None:
            continue
        lines.append("")
        lines.append(render_reconciliation(outcome.result))
        execution = executions.get(outcome.repository)
        if execution is not None:
            lines.append(render_execution(execution))

    return "\n".join(lines)
