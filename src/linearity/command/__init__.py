"""CLI command modules for linearity."""

from linearity.command.merge import MergeCommand
from linearity.command.update import UpdateCommand

__all__ = ["MergeCommand", "UpdateCommand"]
