"""Cleanup node - remove the merged branch."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from linearity.core.config import State
from linearity.core.log import logger
from linearity.core.result import RunOutcome
from linearity.engine.executor import MergeExecutor
from linearity.engine.reconcile import Reconciler
from linearity.workflow.nodes.execute import execution_context


@dataclass
class Cleanup(BaseNode[State, None, RunOutcome]):
    """Delete the feature branch locally and, if configured, remotely.

    Only reached after a successful merge. Failures here are reported
    as warnings; the merge itself already happened.
    """

    async def run(self, ctx: GraphRunContext[State]) -> End[RunOutcome]:
        config = ctx.state.config
        runtime = ctx.state.runtime
        run = runtime.run

        auto_delete = False
        if config.merge.delete_remote_branch:
            auto_delete = runtime.gateway.get_auto_delete_setting()

        plan = Reconciler(
            runtime.repository, config.merge, remote=config.git.remote
        ).plan_cleanup(run.feature_branch, auto_delete)

        report = MergeExecutor(execution_context(ctx.state)).run(
            plan, run.active_ref
        )
        run.active_ref = report.active_ref
        run.changed_refs.update(report.changed_refs)
        run.warnings.extend(report.warnings)

        pr = run.pull_request
        logger.info(f"Merged #{pr.number} into {run.base_branch}")
        return End(RunOutcome(
            success=True,
            reason=f"merged #{pr.number} into {run.base_branch}",
            active_ref=run.active_ref,
            changed_refs=run.changed_refs,
            warnings=run.warnings,
        ))
