#!/usr/bin/env python3
"""Programmatic label sync example.

This demonstrates using the engine directly:

* load the manifest (`labelsync.json`)
* fetch repository state from GitHub
* plan changes for every repository and print the report
* optionally apply them

Token and API URL come from `.env` (see `LabelSyncSettings`).
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from pathlib import Path

from github_label_sync.config import LabelSyncSettings
from github_label_sync.engine import sync_all
from github_label_sync.executor import apply_reconciliation
from github_label_sync.github import GitHubStateProvider
from github_label_sync.logging import configure_logging
from github_label_sync.manifest import load_manifest
from github_label_sync.report import render_sync


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan (and optionally apply) label changes.")
    parser.add_argument("--config", default="labelsync.json", help="Path to the label manifest")
    parser.add_argument("--apply", action="store_true", help="Apply the planned changes")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = LabelSyncSettings()
    configure_logging(settings.log_level)

    manifest = load_manifest(Path(args.config))
    provider = GitHubStateProvider(token=settings.github_token, base_url=settings.github_base_url)

    result = sync_all(manifest.configs, provider, rules=manifest.rules, max_workers=2)

    executions = {}
    if args.apply:
        for reconciliation in result.results:
            client = provider.client(reconciliation.repository)
            try:
                executions[reconciliation.repository] = apply_reconciliation(client, reconciliation)
            finally:
                client.close()

    print(render_sync(result, executions, dry_run=not args.apply))
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
