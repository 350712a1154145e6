"""Operation plans produced by the reconciler and run by the executor.

Each operation maps to one repository call, one gateway call or a
pause. apply() returns the ref checked out afterwards, so the active
ref is threaded through a plan instead of read back from the
repository.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from linearity.core.errors import ConflictError, RepositoryError


@dataclass
class ExecutionContext:
    """Ports an operation may use."""

    repository: Any
    gateway: Any = None
    sleep: Callable[[float], None] = time.sleep


class Operation(ABC):
    """One step of a plan."""

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable description, used in logs and reports."""

    @abstractmethod
    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        """Perform the step and return the new active ref."""

    def touches(self, active_ref: str) -> list[str]:
        """Refs whose target this step may change."""
        return []


@dataclass(frozen=True)
class Checkout(Operation):
    ref: str
    detach: bool = False

    def describe(self) -> str:
        return f"checkout {'--detach ' if self.detach else ''}{self.ref}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.checkout(self.ref, detach=self.detach)
        # A detached HEAD is tracked as HEAD itself
        return "HEAD" if self.detach else self.ref


@dataclass(frozen=True)
class BranchHere(Operation):
    """Point a branch at the current commit and check it out."""

    branch: str

    def describe(self) -> str:
        return f"point {self.branch} at HEAD"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.branch_here(self.branch)
        return self.branch

    def touches(self, active_ref: str) -> list[str]:
        return [self.branch]


@dataclass(frozen=True)
class MergeNoFastForward(Operation):
    """Create a merge commit; a conflicted merge is aborted."""

    ref: str
    message: str | None = None
    edit: bool = False

    def describe(self) -> str:
        return f"merge --no-ff {self.ref}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        try:
            ctx.repository.merge_no_ff(
                self.ref, message=self.message, edit=self.edit
            )
        except ConflictError as e:
            ctx.repository.merge_abort()
            raise ConflictError(
                f"{e.message}; merge aborted",
                hint=e.hint or f"git merge {self.ref}  # resolve by hand",
            ) from e
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [active_ref]


@dataclass(frozen=True)
class MergeFastForward(Operation):
    ref: str

    def describe(self) -> str:
        return f"merge --ff-only {self.ref}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.merge_ff(self.ref)
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [active_ref]


@dataclass(frozen=True)
class ResetHard(Operation):
    """Move the checked-out branch to commit."""

    branch: str
    commit: str

    def describe(self) -> str:
        return f"reset {self.branch} to {self.commit[:12]}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        if active_ref != self.branch:
            raise RepositoryError(
                f"refusing to reset {self.branch}: {active_ref} is checked out"
            )
        ctx.repository.reset_hard(self.commit)
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [self.branch]


@dataclass(frozen=True)
class Push(Operation):
    remote: str
    branch: str
    force: bool = False

    def describe(self) -> str:
        flag = "--force-with-lease " if self.force else ""
        return f"push {flag}{self.remote} {self.branch}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        if self.force:
            ctx.repository.force_push(self.remote, self.branch)
        else:
            ctx.repository.push(self.remote, self.branch)
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [f"{self.remote}/{self.branch}"]


@dataclass(frozen=True)
class Pull(Operation):
    remote: str
    branch: str

    def describe(self) -> str:
        return f"pull --ff-only {self.remote} {self.branch}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.pull_ff(self.remote, self.branch)
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [self.branch, f"{self.remote}/{self.branch}"]


@dataclass(frozen=True)
class DeleteBranch(Operation):
    branch: str
    force: bool = True

    def describe(self) -> str:
        return f"delete branch {self.branch}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.delete_branch(self.branch, force=self.force)
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [self.branch]


@dataclass(frozen=True)
class DeleteRemoteBranch(Operation):
    remote: str
    branch: str

    def describe(self) -> str:
        return f"delete {self.remote}/{self.branch}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.delete_remote_branch(self.remote, self.branch)
        return active_ref

    def touches(self, active_ref: str) -> list[str]:
        return [f"{self.remote}/{self.branch}"]


@dataclass(frozen=True)
class PruneRemote(Operation):
    remote: str

    def describe(self) -> str:
        return f"prune {self.remote}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.repository.prune_remote(self.remote)
        return active_ref


@dataclass(frozen=True)
class Sleep(Operation):
    seconds: float

    def describe(self) -> str:
        return f"wait {self.seconds:g}s"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.sleep(self.seconds)
        return active_ref


@dataclass(frozen=True)
class SquashMerge(Operation):
    """Ask the review host to squash-merge the pull request."""

    number: int
    title: str
    message: str
    head_sha: str

    def describe(self) -> str:
        return f"squash-merge #{self.number} at {self.head_sha[:12]}"

    def apply(self, ctx: ExecutionContext, active_ref: str) -> str:
        ctx.gateway.squash_merge(
            self.number, self.title, self.message, self.head_sha
        )
        return active_ref


@dataclass(frozen=True)
class NoOpSignal:
    """Nothing to do; reason says why."""

    reason: str


@dataclass
class MergePlan:
    """Ordered operations for one step of a run.

    Attributes:
        description: What the plan achieves, for logs
        operations: Steps, run in order
        recovery: Steps run after a failure, best effort
        reinspect: Classify the branch again after this plan
        best_effort: Log failing steps and carry on
    """

    description: str
    operations: list[Operation]
    recovery: list[Operation] = field(default_factory=list)
    reinspect: bool = False
    best_effort: bool = False
    _consumed: bool = field(default=False, repr=False)

    def consume(self) -> list[Operation]:
        """Hand out the operations; a plan can only be run once."""
        if self._consumed:
            raise RuntimeError(f"plan '{self.description}' was already run")
        self._consumed = True
        return list(self.operations)

    def describe(self) -> list[str]:
        return [op.describe() for op in self.operations]
