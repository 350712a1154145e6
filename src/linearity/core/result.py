"""Result of a workflow run."""

from pydantic import BaseModel, Field


class RunOutcome(BaseModel):
    """What an update or merge run achieved."""

    success: bool
    reason: str
    active_ref: str | None = None
    changed_refs: dict[str, str | None] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
