"""Reconciliation engine: planning and executing branch operations."""

from linearity.engine.executor import ExecutionReport, MergeExecutor
from linearity.engine.plan import MergePlan, NoOpSignal
from linearity.engine.reconcile import Reconciler

__all__ = [
    "ExecutionReport",
    "MergeExecutor",
    "MergePlan",
    "NoOpSignal",
    "Reconciler",
]
