"""Update command - bring a pull request branch up to date with its base."""

from typing import ClassVar

from linearity.command.base import WorkflowCommand


class UpdateCommand(WorkflowCommand):
    """Update the pull request branch with its base branch.

    Leaves a single update merge on top of the branch, with the base
    tip as first parent, so the later merge is a fast-forward. Running
    it again without the base moving does nothing.
    """

    command_name: ClassVar[str] = "update"
