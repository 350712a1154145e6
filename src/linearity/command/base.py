"""Shared subcommand behaviour."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, Field

from linearity.core.errors import LinearityError
from linearity.core.log import logger

if TYPE_CHECKING:
    from linearity.core.config import State


class WorkflowCommand(BaseModel):
    """A subcommand that runs the workflow graph for one pull request."""

    pr: str | None = Field(
        default=None,
        description=(
            "Pull request number, URL or branch "
            "(default: the pull request of the current branch)"
        ),
    )

    command_name: ClassVar[str] = "update"

    def prepare(self, state: State) -> None:
        """Copy command-line choices into runtime state."""
        state.runtime.run.command = self.command_name
        state.runtime.run.pull_request_ref = self.pr

    async def run_workflow(self, state: State) -> int:
        """Run the workflow and map its outcome to an exit code.

        Returns:
            0 on success (a no-op counts), 1 on a reported failure
        """
        from linearity.workflow.graph import run_workflow

        self.prepare(state)
        try:
            outcome = await run_workflow(state)
        except LinearityError as e:
            logger.error(f"{self.command_name} failed: {e}")
            if e.hint:
                logger.info(f"Next step: {e.hint}")
            return 1

        for warning in outcome.warnings:
            logger.warning(warning)
        logger.info(f"{self.command_name}: {outcome.reason}")
        return 0
