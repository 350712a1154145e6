"""Repository port and its git implementation."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from linearity.core.errors import (
    ConflictError,
    NotFastForwardable,
    PushRejected,
    RepositoryError,
)
from linearity.core.log import logger
from linearity.core.runner import Runner, format_command

_REJECTION_MARKERS = (
    "[rejected]",
    "non-fast-forward",
    "stale info",
    "fetch first",
    "protected branch",
    "[remote rejected]",
)


class Repository(Protocol):
    """Operations the engine needs from a repository.

    Refs are passed as names or commit ids. Every method raises a
    LinearityError subclass on failure.
    """

    def fetch(self, remote: str) -> None: ...

    def resolve(self, ref: str) -> str:
        """Commit id of ref; RepositoryError when it does not exist."""
        ...

    def parents_of(self, commit: str) -> list[str]: ...

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True when ancestor is reachable from descendant (or equal)."""
        ...

    def current_ref(self) -> str:
        """Checked-out branch name, or commit id when detached."""
        ...

    def is_clean(self) -> bool: ...

    def checkout(self, ref: str, detach: bool = False) -> None: ...

    def branch_here(self, branch: str) -> None:
        """Point branch at HEAD and check it out."""
        ...

    def merge_no_ff(
        self, ref: str, message: str | None = None, edit: bool = False
    ) -> None:
        """Create a merge commit; ConflictError leaves the merge in progress."""
        ...

    def merge_ff(self, ref: str) -> None:
        """Fast-forward only; NotFastForwardable on diverged history."""
        ...

    def merge_abort(self) -> None: ...

    def reset_hard(self, commit: str) -> None: ...

    def push(self, remote: str, branch: str) -> None: ...

    def force_push(self, remote: str, branch: str) -> None: ...

    def delete_branch(self, branch: str, force: bool = False) -> None: ...

    def delete_remote_branch(self, remote: str, branch: str) -> None: ...

    def prune_remote(self, remote: str) -> None: ...

    def pull_ff(self, remote: str, branch: str) -> None: ...

    def log_subjects(self, range_spec: str) -> list[str]:
        """Subjects of commits in range_spec, newest first."""
        ...

    def count_commits(self, range_spec: str) -> int: ...

    def diff_stat(self, range_spec: str, width: int) -> str: ...


class GitRepository:
    """Repository backed by the git command line.

    Commands come from the ``commands.git`` templates in the
    configuration, so each port method maps to exactly one git
    invocation.
    """

    def __init__(
        self,
        workdir: Path,
        commands: dict[str, str],
        runner: Runner | None = None,
    ):
        """Initialize the repository wrapper.

        Args:
            workdir: Working directory of the repository
            commands: Template mapping (the ``commands.git`` section)
            runner: Command runner, a new Runner when None
        """
        self.workdir = Path(workdir)
        self.commands = commands
        self.runner = runner or Runner()

    def _run(
        self,
        name: str,
        check: bool = False,
        interactive: bool = False,
        log_level: str | None = None,
        **args,
    ):
        command = format_command(self.commands[name], **args)
        logger.debug(f"git {name}", command=command)
        result = self.runner.execute(
            command,
            cwd=self.workdir,
            check=False,
            interactive=interactive,
            log_level=log_level,
        )
        if result.stdout and not log_level:
            logger.spew(f"git {name} output", output=result.stdout)
        if check and result.exited != 0:
            raise RepositoryError(
                f"git {name} failed: {self._output(result)}"
            )
        return result

    @staticmethod
    def _output(result) -> str:
        return (result.stderr.strip() or result.stdout.strip()
                or f"exit status {result.exited}")

    def fetch(self, remote: str) -> None:
        self._run("fetch", check=True, remote=remote)

    def resolve(self, ref: str) -> str:
        result = self._run("resolve", ref=ref)
        sha = result.stdout.strip()
        if result.exited != 0 or not sha:
            raise RepositoryError(
                f"cannot resolve '{ref}'",
                hint=f"git fetch && git branch --list '{ref}'",
            )
        return sha

    def parents_of(self, commit: str) -> list[str]:
        result = self._run("parents", commit=commit)
        if result.exited != 0:
            raise RepositoryError(
                f"cannot read parents of '{commit}': {self._output(result)}",
                hint="git fetch --unshallow",
            )
        return result.stdout.split()[1:]

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        result = self._run(
            "is_ancestor", ancestor=ancestor, descendant=descendant
        )
        # merge-base exits 1 for "no", anything else is an error
        if result.exited == 0:
            return True
        if result.exited == 1:
            return False
        raise RepositoryError(
            f"cannot compare '{ancestor}' with '{descendant}': "
            f"{self._output(result)}",
            hint="git fetch --unshallow",
        )

    def current_ref(self) -> str:
        result = self._run("current_branch")
        if result.exited == 0 and result.stdout.strip():
            return result.stdout.strip()
        return self._run("head", check=True).stdout.strip()

    def is_clean(self) -> bool:
        return not self._run("status", check=True).stdout.strip()

    def checkout(self, ref: str, detach: bool = False) -> None:
        self._run(
            "checkout_detach" if detach else "checkout", check=True, ref=ref
        )

    def branch_here(self, branch: str) -> None:
        self._run("branch_here", check=True, branch=branch)

    def merge_no_ff(
        self, ref: str, message: str | None = None, edit: bool = False
    ) -> None:
        if message is None:
            result = self._run("merge_no_ff", log_level="debug", ref=ref)
        else:
            result = self._run(
                "merge_no_ff_edit" if edit else "merge_no_ff_message",
                interactive=edit,
                log_level="debug",
                ref=ref,
                message=message,
            )
        if result.exited == 0:
            return
        output = self._output(result)
        if "CONFLICT" in result.stdout or "conflict" in output.lower():
            raise ConflictError(f"merging '{ref}' produced conflicts")
        raise RepositoryError(f"git merge '{ref}' failed: {output}")

    def merge_ff(self, ref: str) -> None:
        result = self._run("merge_ff", log_level="debug", ref=ref)
        if result.exited != 0:
            raise NotFastForwardable(
                f"cannot fast-forward to '{ref}': {self._output(result)}",
                hint=f"git log --oneline --graph HEAD {ref}",
            )

    def merge_abort(self) -> None:
        self._run("merge_abort", check=True)

    def reset_hard(self, commit: str) -> None:
        self._run("reset_hard", check=True, commit=commit)

    def _push(self, name: str, remote: str, branch: str) -> None:
        result = self._run(name, remote=remote, branch=branch)
        if result.exited == 0:
            return
        output = self._output(result)
        if any(marker in output for marker in _REJECTION_MARKERS):
            raise PushRejected(f"push of '{branch}' rejected: {output}")
        raise RepositoryError(f"push of '{branch}' failed: {output}")

    def push(self, remote: str, branch: str) -> None:
        self._push("push", remote, branch)

    def force_push(self, remote: str, branch: str) -> None:
        self._push("force_push", remote, branch)

    def delete_branch(self, branch: str, force: bool = False) -> None:
        self._run(
            "delete_branch_force" if force else "delete_branch",
            check=True,
            branch=branch,
        )

    def delete_remote_branch(self, remote: str, branch: str) -> None:
        self._push("push_delete", remote, branch)

    def prune_remote(self, remote: str) -> None:
        self._run("prune", check=True, remote=remote)

    def pull_ff(self, remote: str, branch: str) -> None:
        result = self._run("pull_ff", remote=remote, branch=branch)
        if result.exited != 0:
            raise NotFastForwardable(
                f"cannot pull '{remote}/{branch}': {self._output(result)}"
            )

    def log_subjects(self, range_spec: str) -> list[str]:
        result = self._run("log_subjects", check=True, range=range_spec)
        return result.stdout.splitlines()

    def count_commits(self, range_spec: str) -> int:
        result = self._run("count_commits", check=True, range=range_spec)
        return int(result.stdout.strip() or 0)

    def diff_stat(self, range_spec: str, width: int) -> str:
        result = self._run(
            "diff_stat", check=True, range=range_spec, width=width
        )
        return result.stdout.rstrip()
