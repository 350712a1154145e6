"""Execute node - run the planned operations."""

from __future__ import annotations

import time
from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from linearity.core.config import State
from linearity.core.log import logger
from linearity.core.result import RunOutcome
from linearity.engine.executor import MergeExecutor
from linearity.engine.plan import ExecutionContext


def execution_context(state: State) -> ExecutionContext:
    runtime = state.runtime
    return ExecutionContext(
        repository=runtime.repository,
        gateway=runtime.gateway,
        sleep=runtime.sleep or time.sleep,
    )


@dataclass
class Execute(BaseNode[State, None, RunOutcome]):
    """Run the current plan and route on what it asked for."""

    async def run(
        self, ctx: GraphRunContext[State]
    ) -> Inspect | Cleanup | End[RunOutcome]:
        run = ctx.state.runtime.run
        plan = run.plan

        report = MergeExecutor(execution_context(ctx.state)).run(
            plan, run.active_ref
        )
        run.active_ref = report.active_ref
        run.changed_refs.update(report.changed_refs)
        run.plan = None

        if plan.reinspect:
            logger.info("Re-inspecting branch state")
            from linearity.workflow.nodes.inspect import Inspect
            return Inspect()

        if run.command == "merge":
            from linearity.workflow.nodes.cleanup import Cleanup
            return Cleanup()

        logger.info(f"{plan.description}: done")
        return End(RunOutcome(
            success=True,
            reason=plan.description,
            active_ref=run.active_ref,
            changed_refs=run.changed_refs,
        ))
