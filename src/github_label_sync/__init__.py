"""GitHub Label Sync.

Reconciles a declared set of labels, and the sibling labels they imply on issues,
against the live state of GitHub repositories.
"""

__version__ = "0.1.0"

from github_label_sync.config import LabelSyncSettings
from github_label_sync.engine import ReconciliationResult, SyncResult, reconcile, sync_all
from github_label_sync.errors import ConfigurationError, FetchError, MutationError
from github_label_sync.labels import Issue, LabelSpec, ObservedLabel, RepositoryConfig

__all__ = [
    "__version__",
    "ConfigurationError",
    "FetchError",
    "Issue",
    "LabelSpec",
    "LabelSyncSettings",
    "MutationError",
    "ObservedLabel",
    "ReconciliationResult",
    "RepositoryConfig",
    "SyncResult",
    "reconcile",
    "sync_all",
]
