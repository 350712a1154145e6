"""Inspect node - gather pull request and repository state."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from linearity.core.config import State
from linearity.core.errors import RepositoryError
from linearity.core.log import logger
from linearity.core.result import RunOutcome
from linearity.gateway.github import GhGateway
from linearity.git.repository import GitRepository

# Synthetic merge discarded, then the real update: two passes at most
MAX_INSPECTIONS = 3


@dataclass
class Inspect(BaseNode[State, None, RunOutcome]):
    """Fetch, then collect everything planning needs.

    Runs again after a plan that asks for re-inspection; the pull
    request snapshot and the original ref are only taken on the first
    pass.
    """

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> PlanUpdate | PlanMerge:
        config = ctx.state.config
        runtime = ctx.state.runtime
        run = runtime.run

        if runtime.repository is None:
            runtime.repository = GitRepository(
                config.git.workdir, config.commands.get("git", {})
            )
        if runtime.gateway is None:
            runtime.gateway = GhGateway(
                config.git.workdir, config.commands.get("gh", {})
            )
        repository = runtime.repository

        run.inspections += 1
        if run.inspections > MAX_INSPECTIONS:
            raise RepositoryError(
                f"{run.feature_branch} did not settle after "
                f"{MAX_INSPECTIONS - 1} passes",
                hint=f"git log --graph --oneline {run.feature_branch}",
            )

        if run.pull_request is None:
            if not repository.is_clean():
                raise RepositoryError(
                    "working tree has uncommitted changes",
                    hint="git stash",
                )
            pr = runtime.gateway.get_metadata(run.pull_request_ref)
            run.pull_request = pr
            run.feature_branch = pr.head_branch
            run.base_branch = config.git.target_branch or pr.base_branch
            run.original_ref = repository.current_ref()
            run.active_ref = run.original_ref
            logger.info(
                f"Pull request #{pr.number}: {run.feature_branch} -> "
                f"{run.base_branch}",
                url=pr.url,
            )

        repository.fetch(config.git.remote)
        # Both must exist locally before planning
        repository.resolve(run.feature_branch)
        repository.resolve(f"{config.git.remote}/{run.base_branch}")

        if run.command == "merge":
            from linearity.workflow.nodes.plan_merge import PlanMerge
            return PlanMerge()
        from linearity.workflow.nodes.plan_update import PlanUpdate
        return PlanUpdate()
