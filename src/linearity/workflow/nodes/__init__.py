"""Workflow nodes for graph state machine."""

from linearity.workflow.nodes.cleanup import Cleanup
from linearity.workflow.nodes.execute import Execute
from linearity.workflow.nodes.inspect import Inspect
from linearity.workflow.nodes.plan_merge import PlanMerge
from linearity.workflow.nodes.plan_update import PlanUpdate

__all__ = [
    "Inspect",
    "PlanUpdate",
    "PlanMerge",
    "Execute",
    "Cleanup",
]
