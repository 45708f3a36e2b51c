"""Sync orchestrator: run the reconciler across many repositories.

Each repository is an independent unit of work. Repositories are fetched and
reconciled concurrently on a bounded thread pool, and a failure in one of them is
recorded as that repository's outcome without affecting the others.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum

from github_label_sync.engine.reconciler import (
    ReconciliationResult,
    reconcile,
    validate_repository_config,
)
from github_label_sync.errors import ConfigurationError, FetchError
from github_label_sync.labels import Issue, ObservedLabel, RepositoryConfig, SiblingRules

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RepositoryState:
    """A snapshot of a repository's labels and open issues."""

    labels: tuple[ObservedLabel, ...] = ()
    issues: tuple[Issue, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", tuple(self.labels))
        object.__setattr__(self, "issues", tuple(self.issues))


StateProvider = Callable[[str], RepositoryState]


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    CONFIGURATION_ERROR = "configuration_error"
    FETCH_ERROR = "fetch_error"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class RepositoryOutcome:
    """What happened to one repository during a sync run.

    `result` is only set when `status` is SUCCESS.
    """

    repository: str
    status: OutcomeStatus
    result: ReconciliationResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS


@dataclass(frozen=True, slots=True)
class SyncResult:
    """Outcomes of a sync run, keyed by repository id in sorted order."""

    outcomes: Mapping[str, RepositoryOutcome] = field(default_factory=dict)

    @classmethod
    def from_outcomes(cls, outcomes: Iterable[RepositoryOutcome]) -> SyncResult:
        by_repo = {outcome.repository: outcome for outcome in outcomes}
        return cls(outcomes={repo: by_repo[repo] for repo in sorted(by_repo)})

    def __getitem__(self, repository: str) -> RepositoryOutcome:
        return self.outcomes[repository]

    def __contains__(self, repository: object) -> bool:
        return repository in self.outcomes

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def successes(self) -> list[RepositoryOutcome]:
        return [o for o in self.outcomes.values() if o.ok]

    @property
    def failures(self) -> list[RepositoryOutcome]:
        return [
            o
            for o in self.outcomes.values()
            if o.status not in (OutcomeStatus.SUCCESS, OutcomeStatus.CANCELLED)
        ]

    @property
    def cancelled(self) -> list[RepositoryOutcome]:
        return [o for o in self.outcomes.values() if o.status == OutcomeStatus.CANCELLED]

    @property
    def results(self) -> list[ReconciliationResult]:
        return [o.result for o in self.successes if o.result is not None]

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes.values())


def _sync_repository(
    config: RepositoryConfig,
    fetch_state: StateProvider,
    rules: SiblingRules,
    cancel_event: threading.Event,
    chained: bool,
) -> RepositoryOutcome:
    repository = config.repository

    def _cancelled() -> RepositoryOutcome:
        logger.info("Repository sync cancelled", extra={"repo": repository})
        return RepositoryOutcome(repository=repository, status=OutcomeStatus.CANCELLED)

    try:
        validate_repository_config(config)
    except ConfigurationError as e:
        logger.warning(
            "Invalid repository configuration", extra={"repo": repository, "error": str(e)}
        )
        return RepositoryOutcome(
            repository=repository, status=OutcomeStatus.CONFIGURATION_ERROR, error=str(e)
        )

    if cancel_event.is_set():
        return _cancelled()

    try:
        state = fetch_state(repository)
    except ConfigurationError as e:
        return RepositoryOutcome(
            repository=repository, status=OutcomeStatus.CONFIGURATION_ERROR, error=str(e)
        )
    except Exception as e:
        error = e if isinstance(e, FetchError) else FetchError(repository, str(e))
        logger.warning(
            "Failed to fetch repository state",
            extra={"repo": repository, "error": str(error)},
        )
        return RepositoryOutcome(
            repository=repository, status=OutcomeStatus.FETCH_ERROR, error=str(error)
        )

    if cancel_event.is_set():
        return _cancelled()

    try:
        result = reconcile(config, state.labels, state.issues, rules, chained=chained)
    except ConfigurationError as e:
        return RepositoryOutcome(
            repository=repository, status=OutcomeStatus.CONFIGURATION_ERROR, error=str(e)
        )

    logger.info(
        "Repository reconciled",
        extra={"repo": repository, "has_changes": result.has_changes},
    )
    return RepositoryOutcome(repository=repository, status=OutcomeStatus.SUCCESS, result=result)


def sync_all(
    configs: Sequence[RepositoryConfig],
    fetch_state: StateProvider,
    *,
    rules: Mapping[str, SiblingRules] | None = None,
    max_workers: int = 4,
    cancel_event: threading.Event | None = None,
    chained: bool = False,
) -> SyncResult:
    """Reconcile every configured repository.

    Args:
        configs: Desired state per repository.
        fetch_state: Provider returning the current state of a repository. Any
            exception it raises is recorded as a fetch error for that repository.
        rules: Sibling rules per repository id.
        max_workers: Upper bound on repositories processed concurrently.
        cancel_event: When set, repositories that have not finished are reported
            as cancelled instead of succeeding.
        chained: Expand sibling rule chains within a single pass.

    Raises:
        KeyboardInterrupt: Re-raised after `cancel_event` is set and queued
            repositories are dropped.

    Returns:
        A SyncResult with one outcome per repository id.
    """

    if max_workers < 1:
        raise ValueError("max_workers must be a positive integer")

    rules = rules or {}
    cancel_event = cancel_event or threading.Event()

    outcomes: list[RepositoryOutcome] = []
    counts = Counter(config.repository for config in configs)
    pending: list[RepositoryConfig] = []
    for config in configs:
        if counts[config.repository] > 1:
            continue
        pending.append(config)
    for repository in sorted(r for r, n in counts.items() if n > 1):
        outcomes.append(
            RepositoryOutcome(
                repository=repository,
                status=OutcomeStatus.CONFIGURATION_ERROR,
                error=f"Repository {repository!r} is configured {counts[repository]} times",
            )
        )

    if not pending:
        return SyncResult.from_outcomes(outcomes)

    logger.info(
        "Starting label sync",
        extra={"repositories": len(pending), "max_workers": min(max_workers, len(pending))},
    )

    executor = ThreadPoolExecutor(max_workers=min(max_workers, len(pending)))
    try:
        futures: dict[Future[RepositoryOutcome], RepositoryConfig] = {}
        for config in pending:
            future = executor.submit(
                _sync_repository,
                config,
                fetch_state,
                rules.get(config.repository, {}),
                cancel_event,
                chained,
            )
            futures[future] = config

        for future in as_completed(futures):
            config = futures[future]
            try:
                outcome = future.result()
            except Exception as e:
                logger.exception(
                    "Unexpected error while syncing repository", extra={"repo": config.repository}
                )
                outcome = RepositoryOutcome(
                    repository=config.repository, status=OutcomeStatus.ERROR, error=str(e)
                )
            outcomes.append(outcome)
    except BaseException:
        # Interrupted: queued repositories are dropped, running ones stop at their
        # next cancellation check.
        cancel_event.set()
        executor.shutdown(wait=False, cancel_futures=True)
        raise
    executor.shutdown()

    result = SyncResult.from_outcomes(outcomes)
    logger.info(
        "Label sync finished",
        extra={
            "succeeded": len(result.successes),
            "failed": len(result.failures),
            "cancelled": len(result.cancelled),
        },
    )
    return result
