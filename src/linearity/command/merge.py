"""Merge command - merge a pull request into its base branch."""

from typing import ClassVar

from pydantic import Field

from linearity.command.base import WorkflowCommand


class MergeCommand(WorkflowCommand):
    """Merge the pull request into its base branch and clean up.

    Fast-forwards when the branch was updated with `update`, squashes
    through the review host when asked to, and otherwise creates a
    merge commit with a message built from the pull request.
    """

    command_name: ClassVar[str] = "merge"

    squash: bool | None = Field(
        default=None,
        description=(
            "Force (--squash) or forbid (--no-squash) a squash merge, "
            "overriding configuration"
        ),
    )

    def prepare(self, state) -> None:
        super().prepare(state)
        state.runtime.run.squash_override = self.squash
