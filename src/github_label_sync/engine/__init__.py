"""Reconciliation engine: pure diffing, sibling planning and multi-repo fan-out."""

from github_label_sync.engine.diff import diff_labels
from github_label_sync.engine.orchestrator import (
    OutcomeStatus,
    RepositoryOutcome,
    RepositoryState,
    StateProvider,
    SyncResult,
    sync_all,
)
from github_label_sync.engine.reconciler import (
    ReconciliationResult,
    reconcile,
    validate_repository_config,
)
from github_label_sync.engine.siblings import SiblingPlan, apply_plan, plan_siblings

__all__ = [
    "OutcomeStatus",
    "ReconciliationResult",
    "RepositoryOutcome",
    "RepositoryState",
    "SiblingPlan",
    "StateProvider",
    "SyncResult",
    "apply_plan",
    "diff_labels",
    "plan_siblings",
    "reconcile",
    "sync_all",
    "validate_repository_config",
]
