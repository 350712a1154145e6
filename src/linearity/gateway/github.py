"""Pull request gateway: review host metadata and remote squash merges.

The implementation uses the ``gh`` CLI, which brings its own
authentication.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field

from linearity.core.errors import GatewayError
from linearity.core.log import logger
from linearity.core.runner import Runner, format_command


class PullRequestInfo(BaseModel):
    """Read-only snapshot of a pull request taken at the start of a run."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    body: str = ""
    url: str
    base_branch: str
    head_branch: str
    head_sha: str | None = None
    squash_allowed: bool = Field(
        default=True,
        description="Whether the host accepts squash merges",
    )


class PullRequestGateway(Protocol):
    """What the engine needs from the review host.

    Every method raises GatewayError with the host's message on failure.
    """

    def get_base_branch(self, ref: str | None) -> str: ...

    def get_metadata(self, ref: str | None) -> PullRequestInfo: ...

    def squash_merge(
        self, number: int, title: str, message: str, head_sha: str
    ) -> None: ...

    def get_auto_delete_setting(self) -> bool: ...


class GhGateway:
    """PullRequestGateway implemented with ``gh``."""

    def __init__(
        self,
        workdir: Path,
        commands: dict[str, str],
        runner: Runner | None = None,
    ):
        """Initialize the gateway.

        Args:
            workdir: Repository directory gh runs in
            commands: Template mapping (the ``commands.gh`` section)
            runner: Command runner, a new Runner when None
        """
        self.workdir = Path(workdir)
        self.commands = commands
        self.runner = runner or Runner()

    def _run(self, name: str, **args) -> str:
        command = format_command(self.commands[name], **args)
        logger.debug(f"gh {name}", command=command)
        result = self.runner.execute(command, cwd=self.workdir, check=False)
        if result.exited != 0:
            raise GatewayError(
                result.stderr.strip() or result.stdout.strip()
                or f"gh {name} failed with exit status {result.exited}"
            )
        return result.stdout

    def _run_json(self, name: str, **args) -> dict:
        output = self._run(name, **args)
        try:
            return json.loads(output)
        except json.JSONDecodeError as e:
            raise GatewayError(f"unexpected output from gh {name}: {e}") from e

    def get_base_branch(self, ref: str | None) -> str:
        base = self._run("pr_base", ref=ref).strip()
        if not base:
            raise GatewayError(f"pull request {ref or ''} has no base branch")
        return base

    def get_metadata(self, ref: str | None) -> PullRequestInfo:
        data = self._run_json("pr_view", ref=ref)
        repo = self._run_json("repo_view")
        return PullRequestInfo(
            number=data["number"],
            title=data["title"],
            body=data.get("body") or "",
            url=data["url"],
            base_branch=self.get_base_branch(ref),
            head_branch=data["headRefName"],
            head_sha=data.get("headRefOid"),
            squash_allowed=repo.get("squashMergeAllowed", True),
        )

    def squash_merge(
        self, number: int, title: str, message: str, head_sha: str
    ) -> None:
        logger.info(f"Requesting squash merge of #{number}")
        self._run(
            "pr_squash",
            number=number,
            title=title,
            body=message,
            sha=head_sha,
        )

    def get_auto_delete_setting(self) -> bool:
        return bool(self._run_json("repo_view").get("deleteBranchOnMerge"))
