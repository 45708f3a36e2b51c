"""Runtime settings for the label sync CLI.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The token variable is dedicated (`LABEL_SYNC_GITHUB_TOKEN`) so it does not collide
with other tools that read `GITHUB_TOKEN`.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LabelSyncSettings(BaseSettings):
    """Settings for a label sync run.

    Environment variables:
    - LABEL_SYNC_GITHUB_TOKEN
    - GITHUB_BASE_URL          (optional)
    - LOG_LEVEL                (optional)
    - LABEL_SYNC_CONFIG        (optional)
    - LABEL_SYNC_MAX_WORKERS   (optional)
    - LABEL_SYNC_DRY_RUN       (optional)

    Notes:
        Tests can point at a specific env file via
        `LabelSyncSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias="LABEL_SYNC_GITHUB_TOKEN",
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    config_path: Path = Field(
        default=Path("labelsync.json"),
        validation_alias="LABEL_SYNC_CONFIG",
        description="Path to the label manifest",
    )

    max_workers: int = Field(
        default=4,
        gt=0,
        validation_alias="LABEL_SYNC_MAX_WORKERS",
        description="Maximum number of repositories synced concurrently",
    )

    dry_run: bool = Field(
        default=False,
        validation_alias="LABEL_SYNC_DRY_RUN",
        description="Plan and report changes without applying them",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
    )

    @model_validator(mode="after")
    def _require_github_auth(self) -> LabelSyncSettings:
        if not self.github_token.strip():
            raise ValueError("LABEL_SYNC_GITHUB_TOKEN is required")
        return self
