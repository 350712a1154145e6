"""Run a MergePlan against the repository and the review host."""

from __future__ import annotations

from dataclasses import dataclass, field

from linearity.core.errors import LinearityError, RepositoryError
from linearity.core.log import logger
from linearity.engine.plan import ExecutionContext, MergePlan


@dataclass
class ExecutionReport:
    """Outcome of a plan that ran to the end.

    Attributes:
        active_ref: Ref checked out after the last step
        changed_refs: Ref name -> new commit id, None when deleted
        completed: Descriptions of the steps that ran
        warnings: Failures of best-effort steps
    """

    active_ref: str
    changed_refs: dict[str, str | None] = field(default_factory=dict)
    completed: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class MergeExecutor:
    """Apply plan operations strictly in order.

    The first failure stops the plan, runs its recovery steps and
    re-raises the failure. Best-effort plans record failures as
    warnings and keep going.
    """

    def __init__(self, ctx: ExecutionContext):
        self.ctx = ctx

    def run(self, plan: MergePlan, active_ref: str) -> ExecutionReport:
        """Execute plan starting with active_ref checked out."""
        report = ExecutionReport(active_ref=active_ref)

        with logger.span(plan.description):
            for op in plan.consume():
                description = op.describe()
                logger.info(f"Running: {description}")
                try:
                    report.active_ref = op.apply(self.ctx, report.active_ref)
                except LinearityError as e:
                    if not plan.best_effort:
                        logger.error(f"Failed: {description}: {e}")
                        self._recover(plan, report.active_ref)
                        raise
                    warning = f"{description}: {e}"
                    logger.warning(f"Skipped: {warning}")
                    report.warnings.append(warning)
                    continue
                report.completed.append(description)
                self._record(op.touches(report.active_ref), report)

        return report

    def _record(self, refs: list[str], report: ExecutionReport) -> None:
        for ref in refs:
            try:
                report.changed_refs[ref] = self.ctx.repository.resolve(ref)
            except RepositoryError:
                report.changed_refs[ref] = None

    def _recover(self, plan: MergePlan, active_ref: str) -> None:
        """Run recovery steps; their own failures are only logged."""
        for op in plan.recovery:
            try:
                active_ref = op.apply(self.ctx, active_ref)
                logger.info(f"Recovered: {op.describe()}")
            except LinearityError as e:
                logger.warning(f"Recovery step failed: {op.describe()}: {e}")
