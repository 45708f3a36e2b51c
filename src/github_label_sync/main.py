"""CLI entrypoint for label sync.

Commands:
- validate: check the manifest without talking to GitHub
- plan:     fetch repository state and print the planned changes
- sync:     plan, then apply the changes (unless --dry-run)
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path

from pydantic import ValidationError

from github_label_sync import __version__
from github_label_sync.config import LabelSyncSettings
from github_label_sync.engine.orchestrator import (
    OutcomeStatus,
    RepositoryOutcome,
    SyncResult,
    sync_all,
)
from github_label_sync.engine.reconciler import validate_repository_config
from github_label_sync.engine.siblings import validate_sibling_rules
from github_label_sync.errors import ConfigurationError
from github_label_sync.executor import ExecutionReport, apply_reconciliation
from github_label_sync.github.provider import GitHubStateProvider
from github_label_sync.logging import configure_logging
from github_label_sync.manifest import Manifest, load_manifest
from github_label_sync.report import render_sync

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST = Path("labelsync.json")


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the label manifest (defaults to LABEL_SYNC_CONFIG or labelsync.json)",
    )
    parser.add_argument(
        "--repo",
        "--repository",
        dest="repositories",
        action="append",
        default=[],
        help="Only sync this repository ('owner/repo'); may be repeated",
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Maximum number of repositories processed concurrently",
    )
    parser.add_argument(
        "--chained",
        action="store_true",
        help="Expand sibling rule chains (a -> b -> c) within a single run",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="label-sync",
        description="Reconcile GitHub labels and sibling labels against a manifest",
    )
    parser.add_argument("--version", action="version", version=f"github-label-sync {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    validate = subparsers.add_parser("validate", help="Validate the manifest")
    validate.add_argument(
        "--config",
        default=str(DEFAULT_MANIFEST),
        help="Path to the label manifest",
    )

    plan = subparsers.add_parser("plan", help="Show planned changes without applying them")
    _add_common_arguments(plan)

    sync = subparsers.add_parser("sync", help="Apply label changes and sibling labels")
    _add_common_arguments(sync)
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without applying anything",
    )

    return parser


def _validate(path: Path) -> int:
    try:
        manifest = load_manifest(path)
    except ConfigurationError as e:
        print(f"Invalid manifest {path}: {e}", file=sys.stderr)
        return 2

    invalid = dict(manifest.errors)
    for repo in manifest.repositories:
        try:
            validate_repository_config(repo.config)
            validate_sibling_rules(repo.rules, repository=repo.repository)
        except ConfigurationError as e:
            invalid[repo.repository] = e.message
            continue
        print(f"ok      {repo.repository} ({len(repo.config.labels)} labels)")
    for repository, message in sorted(invalid.items()):
        print(f"invalid {repository}: {message}")
    return 0 if not invalid else 2


def _with_manifest_errors(result: SyncResult, manifest: Manifest) -> SyncResult:
    invalid = [
        RepositoryOutcome(
            repository=repository,
            status=OutcomeStatus.CONFIGURATION_ERROR,
            error=message,
        )
        for repository, message in manifest.errors.items()
    ]
    return SyncResult.from_outcomes([*result.outcomes.values(), *invalid])


def _apply(
    provider: GitHubStateProvider,
    result: SyncResult,
    *,
    dry_run: bool,
) -> tuple[dict[str, ExecutionReport], bool]:
    executions: dict[str, ExecutionReport] = {}
    failed = False
    for reconciliation in result.results:
        if dry_run:
            executions[reconciliation.repository] = apply_reconciliation(
                None, reconciliation, dry_run=True
            )
            continue
        if not reconciliation.has_changes:
            continue
        try:
            client = provider.client(reconciliation.repository)
        except Exception:
            logger.exception(
                "Could not connect to repository", extra={"repo": reconciliation.repository}
            )
            failed = True
            continue
        try:
            executions[reconciliation.repository] = apply_reconciliation(client, reconciliation)
        finally:
            client.close()
    failed = failed or any(not report.ok for report in executions.values())
    return executions, failed


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "validate":
        return _validate(Path(args.config))

    try:
        settings = LabelSyncSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    config_path = Path(args.config) if args.config else settings.config_path
    try:
        manifest = load_manifest(config_path)
        if args.repositories:
            manifest = manifest.select(args.repositories)
    except ConfigurationError as e:
        print(f"Invalid manifest {config_path}: {e}", file=sys.stderr)
        return 2

    dry_run = args.command == "plan" or getattr(args, "dry_run", False) or settings.dry_run
    max_workers = args.max_workers or settings.max_workers
    provider = GitHubStateProvider(token=settings.github_token, base_url=settings.github_base_url)
    cancel_event = threading.Event()

    try:
        result = sync_all(
            manifest.configs,
            provider,
            rules=manifest.rules,
            max_workers=max_workers,
            cancel_event=cancel_event,
            chained=args.chained,
        )
        result = _with_manifest_errors(result, manifest)

        executions: dict[str, ExecutionReport] = {}
        execution_failed = False
        if args.command == "sync":
            executions, execution_failed = _apply(provider, result, dry_run=dry_run)

        print(render_sync(result, executions, dry_run=dry_run))
        return 0 if result.ok and not execution_failed else 1

    except KeyboardInterrupt:
        cancel_event.set()
        print("Interrupted", file=sys.stderr)
        return 130

    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
