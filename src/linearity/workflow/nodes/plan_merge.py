"""PlanMerge node - choose between fast-forward, squash and merge."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, GraphRunContext

from linearity.core.config import State
from linearity.core.result import RunOutcome
from linearity.engine.reconcile import Reconciler


@dataclass
class PlanMerge(BaseNode[State, None, RunOutcome]):
    """Plan merging the feature branch into its base."""

    async def run(self, ctx: GraphRunContext[State]) -> Execute:
        config = ctx.state.config
        run = ctx.state.runtime.run

        reconciler = Reconciler(
            ctx.state.runtime.repository,
            config.merge,
            remote=config.git.remote,
        )

        # Taken once, before classification, since it picks the branch
        if run.squash is None:
            run.squash = reconciler.decide_squash(
                run.feature_branch, run.base_branch, run.squash_override
            )

        run.plan = reconciler.plan_merge(
            run.feature_branch,
            run.base_branch,
            run.pull_request,
            run.squash,
            original_ref=run.original_ref,
        )

        from linearity.workflow.nodes.execute import Execute
        return Execute()
