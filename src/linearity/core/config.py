"""Application state and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from linearity.core.base import BaseConfig, BaseState
from linearity.core.log import Logger
from linearity.core.yaml_settings import (
    GitConfigSettingsSource,
    YamlWithIncludesSettingsSource,
    load_defaults,
)

# ============================================================
# CONFIG MODELS (loaded from git config/YAML/env/CLI)
# ============================================================


class GitConfig(BaseConfig):
    """Repository location and remote naming."""

    workdir: Path = Field(
        default=Path("."),
        description="Path to the local git working directory",
    )
    remote: str = Field(
        default="origin",
        description="Remote holding the pull request and base branches",
    )
    target_branch: str | None = Field(
        default=None,
        description=(
            "Merge into this branch instead of the pull request's base "
            "branch"
        ),
    )


class MergeSettings(BaseConfig):
    """Merge policy, resolved once per run and never modified."""

    model_config = ConfigDict(frozen=True)

    title_prefix: str = Field(
        default="",
        description="Text prepended verbatim to every merge commit title",
    )
    squash: bool = Field(
        default=False,
        description="Squash-merge through the review host",
    )
    squash_single_commit: bool = Field(
        default=False,
        description=(
            "Squash when the branch has exactly one commit of its own, "
            "unless --squash/--no-squash is given"
        ),
    )
    delete_remote_branch: bool = Field(
        default=False,
        description="Delete the pull request branch on the remote after merging",
    )
    sleep_before_delete: float = Field(
        default=3.0,
        ge=0,
        description=(
            "Seconds to wait before deleting the remote branch, so the "
            "host's own automatic deletion wins the race"
        ),
    )
    edit: bool = Field(
        default=False,
        description="Open an editor on the merge commit message",
    )
    diffstat_width: int = Field(
        default=72,
        gt=0,
        description="Column width of the diff stat in merge messages",
    )


def _default_commands() -> dict[str, dict[str, str]]:
    return load_defaults().get("config", {}).get("commands", {})


class Config(BaseConfig):
    """Everything loaded before a run starts."""

    logger: Logger = Field(
        default_factory=Logger,
        description="Logger configuration",
    )
    git: GitConfig = Field(
        default_factory=GitConfig,
        description="Repository settings",
    )
    merge: MergeSettings = Field(
        default_factory=MergeSettings,
        description="Merge policy settings",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("linearity"))
        ),
        description="Directory for log files",
    )
    commands: dict[str, dict[str, str]] = Field(
        default_factory=_default_commands,
        description="Command templates for git and gh, by tool",
    )


# ============================================================
# RUNTIME STATE MODELS (mutable during workflow execution)
# ============================================================


class RunState(BaseState):
    """Per-run state shared by the workflow nodes."""

    command: str = Field(
        default="update",
        description="Workflow being run: update or merge",
    )
    pull_request_ref: str | None = Field(
        default=None,
        description="Pull request number, URL or branch; current branch when unset",
    )
    squash_override: bool | None = Field(
        default=None,
        description="Explicit --squash/--no-squash from the command line",
    )
    pull_request: Any = Field(
        default=None,
        description="PullRequestInfo snapshot fetched at start",
    )
    feature_branch: str | None = None
    base_branch: str | None = None
    original_ref: str | None = Field(
        default=None,
        description="Ref checked out when the run started",
    )
    active_ref: str | None = Field(
        default=None,
        description="Ref currently checked out, threaded through execution",
    )
    squash: bool | None = Field(
        default=None,
        description="Squash decision, taken once per run",
    )
    inspections: int = 0
    plan: Any = None
    changed_refs: dict[str, str | None] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)


class Runtime(BaseModel):
    """Runtime state and the ports the workflow talks to."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    run: RunState = Field(default_factory=RunState)
    repository: Any = Field(
        default=None,
        description="Repository port; GitRepository when unset",
    )
    gateway: Any = Field(
        default=None,
        description="Pull-request gateway port; GhGateway when unset",
    )
    sleep: Any = Field(
        default=None,
        description="Sleep function used by cleanup; time.sleep when unset",
    )


# ============================================================
# STATE (config + runtime combined)
# ============================================================


class State(BaseSettings):
    """Configuration plus runtime state; flows through every node.

    Configuration sources, highest priority first:
    1. Command-line arguments (when run through CliApp)
    2. Constructor arguments
    3. Environment variables (LINEARITY_CONFIG__MERGE__SQUASH=true)
    4. .env file
    5. git config ``linearity.*`` keys
    6. YAML: ./linearity.yaml and --include files over the user
       config over package defaults
    """

    config: Config = Field(
        default_factory=Config,
        description="Configuration (from git config/YAML/env/CLI)",
    )
    runtime: Runtime = Field(
        default_factory=Runtime,
        description="Runtime state (mutates during workflow execution)",
    )
    include: list[str] | None = Field(
        default=None,
        description="Additional YAML files to merge into the configuration",
    )

    model_config = SettingsConfigDict(
        yaml_file="linearity.yaml",
        env_file=".env",
        env_prefix="LINEARITY_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML carries the packaged defaults and ranks lowest
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            GitConfigSettingsSource(settings_cls),
            YamlWithIncludesSettingsSource(settings_cls),
            file_secret_settings,
        )


__all__ = [
    "State",
    "Config",
    "GitConfig",
    "MergeSettings",
    "Runtime",
    "RunState",
]
