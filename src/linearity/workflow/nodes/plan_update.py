"""PlanUpdate node - decide how to bring the feature branch up to date."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from linearity.core.config import State
from linearity.core.log import logger
from linearity.core.result import RunOutcome
from linearity.engine.plan import NoOpSignal
from linearity.engine.reconcile import Reconciler


@dataclass
class PlanUpdate(BaseNode[State, None, RunOutcome]):
    """Plan the update path, or stop when there is nothing to do."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> Execute | End[RunOutcome]:
        config = ctx.state.config
        run = ctx.state.runtime.run

        reconciler = Reconciler(
            ctx.state.runtime.repository,
            config.merge,
            remote=config.git.remote,
        )
        plan = reconciler.plan_update(
            run.feature_branch,
            run.base_branch,
            pr=run.pull_request,
            original_ref=run.original_ref,
        )

        if isinstance(plan, NoOpSignal):
            logger.info(f"{run.feature_branch}: {plan.reason}")
            return End(RunOutcome(
                success=True,
                reason=plan.reason,
                active_ref=run.active_ref,
                changed_refs=run.changed_refs,
            ))

        run.plan = plan
        from linearity.workflow.nodes.execute import Execute
        return Execute()
