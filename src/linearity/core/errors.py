"""Error taxonomy for update and merge runs.

Every error carries a one-line diagnosis and, where there is one, the
command the operator should run next.
"""

from __future__ import annotations


class LinearityError(Exception):
    """Base class for failures reported to the operator."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        return self.message


class RepositoryError(LinearityError):
    """A ref could not be resolved or an ancestry query was impossible.

    Fatal for the run; never retried.
    """


class NotFastForwardable(RepositoryError):
    """A fast-forward-only merge found diverged history."""


class ConflictError(LinearityError):
    """A merge stopped on conflicts.

    The merge is aborted and the original branch restored before this
    reaches the operator.
    """


class GatewayError(LinearityError):
    """The review host rejected a request; carries its raw message."""


class PushRejected(LinearityError):
    """The remote refused a ref update (moved ref, protection rules)."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(
            message,
            hint or "inspect the branch and re-run the same command",
        )


__all__ = [
    "LinearityError",
    "RepositoryError",
    "NotFastForwardable",
    "ConflictError",
    "GatewayError",
    "PushRejected",
]
