"""In-memory stand-ins for the repository and gateway ports."""

from linearity.core.errors import (
    ConflictError,
    GatewayError,
    NotFastForwardable,
    PushRejected,
    RepositoryError,
)
from linearity.gateway.github import PullRequestInfo


class FakeRepository:
    """Scripted commit graph implementing the Repository port.

    Commits are plain strings. Local branches and remote-tracking refs
    (``origin/main``) live in separate maps; HEAD is either a local
    branch name or a commit id when detached.
    """

    def __init__(self):
        self.parents: dict[str, list[str]] = {}
        self.subjects: dict[str, str] = {}
        self.order: list[str] = []
        self.branches: dict[str, str] = {}
        self.remotes: dict[str, str] = {}
        self.head = ""
        self.calls: list[tuple] = []
        self.conflicts: set[str] = set()
        self.reject_push: set[str] = set()
        self.clean = True
        self.merge_in_progress = False
        self.diffstat = " file.txt | 2 +-\n 1 file changed, 1 insertion(+), 1 deletion(-)"
        self._merges = 0

    # Graph construction helpers

    def commit(self, sha: str, *parents: str, subject: str | None = None):
        self.parents[sha] = list(parents)
        self.subjects[sha] = subject or f"Commit {sha}"
        self.order.append(sha)
        return sha

    def _sha(self) -> str:
        return self.branches.get(self.head, self.head)

    def _move_head(self, sha: str) -> None:
        if self.head in self.branches:
            self.branches[self.head] = sha
        else:
            self.head = sha

    def _ancestors(self, sha: str) -> set[str]:
        seen = set()
        stack = [sha]
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.add(current)
            stack.extend(self.parents[current])
        return seen

    def _unique(self, range_spec: str) -> list[str]:
        exclude, _, include = range_spec.partition("..")
        include = include.lstrip(".")
        unique = (
            self._ancestors(self.resolve(include))
            - self._ancestors(self.resolve(exclude))
        )
        return [sha for sha in reversed(self.order) if sha in unique]

    # Repository port

    def fetch(self, remote):
        self.calls.append(("fetch", remote))

    def resolve(self, ref):
        if ref == "HEAD":
            return self._sha()
        if ref in self.branches:
            return self.branches[ref]
        if ref in self.remotes:
            return self.remotes[ref]
        if ref in self.parents:
            return ref
        raise RepositoryError(f"cannot resolve '{ref}'")

    def parents_of(self, commit):
        return list(self.parents[self.resolve(commit)])

    def is_ancestor(self, ancestor, descendant):
        return self.resolve(ancestor) in self._ancestors(self.resolve(descendant))

    def current_ref(self):
        return self.head

    def is_clean(self):
        return self.clean

    def checkout(self, ref, detach=False):
        self.calls.append(("checkout", ref, detach))
        sha = self.resolve(ref)
        if not detach and ref in self.branches:
            self.head = ref
        elif not detach and f"origin/{ref}" in self.remotes:
            # git creates a tracking branch on checkout
            self.branches[ref] = self.remotes[f"origin/{ref}"]
            self.head = ref
        else:
            self.head = sha

    def branch_here(self, branch):
        self.calls.append(("branch_here", branch))
        self.branches[branch] = self._sha()
        self.head = branch

    def merge_no_ff(self, ref, message=None, edit=False):
        self.calls.append(("merge_no_ff", ref, message, edit))
        if ref in self.conflicts:
            self.merge_in_progress = True
            raise ConflictError(f"merging '{ref}' produced conflicts")
        self._merges += 1
        sha = self.commit(
            f"M{self._merges}",
            self._sha(),
            self.resolve(ref),
            subject=(message or f"Merge {ref}").splitlines()[0],
        )
        self._move_head(sha)

    def merge_ff(self, ref):
        self.calls.append(("merge_ff", ref))
        target = self.resolve(ref)
        current = self._sha()
        if self.is_ancestor(target, current):
            return
        if not self.is_ancestor(current, target):
            raise NotFastForwardable(f"cannot fast-forward to '{ref}'")
        self._move_head(target)

    def merge_abort(self):
        self.calls.append(("merge_abort",))
        self.merge_in_progress = False

    def reset_hard(self, commit):
        self.calls.append(("reset_hard", commit))
        self._move_head(self.resolve(commit))

    def _push(self, name, remote, branch):
        self.calls.append((name, remote, branch))
        if branch in self.reject_push:
            raise PushRejected(f"push of '{branch}' rejected")
        self.remotes[f"{remote}/{branch}"] = self.branches[branch]

    def push(self, remote, branch):
        self._push("push", remote, branch)

    def force_push(self, remote, branch):
        self._push("force_push", remote, branch)

    def delete_branch(self, branch, force=False):
        self.calls.append(("delete_branch", branch, force))
        if self.head == branch:
            raise RepositoryError(f"cannot delete checked out branch '{branch}'")
        self.branches.pop(branch)

    def delete_remote_branch(self, remote, branch):
        self.calls.append(("delete_remote_branch", remote, branch))
        if self.remotes.pop(f"{remote}/{branch}", None) is None:
            raise RepositoryError(f"remote ref does not exist: {branch}")

    def prune_remote(self, remote):
        self.calls.append(("prune_remote", remote))

    def pull_ff(self, remote, branch):
        self.calls.append(("pull_ff", remote, branch))
        self.branches[branch] = self.remotes[f"{remote}/{branch}"]

    def log_subjects(self, range_spec):
        return [self.subjects[sha] for sha in self._unique(range_spec)]

    def count_commits(self, range_spec):
        return len(self._unique(range_spec))

    def diff_stat(self, range_spec, width):
        self.calls.append(("diff_stat", range_spec, width))
        return self.diffstat

    def names(self) -> list[str]:
        """Names of the port methods called, in order."""
        return [call[0] for call in self.calls]


class FakeGateway:
    """PullRequestGateway returning a fixed pull request."""

    def __init__(self, pr: PullRequestInfo, repository=None, auto_delete=False):
        self.pr = pr
        self.repository = repository
        self.auto_delete = auto_delete
        self.reject_squash: str | None = None
        self.calls: list[tuple] = []

    def get_base_branch(self, ref):
        return self.pr.base_branch

    def get_metadata(self, ref):
        self.calls.append(("get_metadata", ref))
        return self.pr

    def squash_merge(self, number, title, message, head_sha):
        self.calls.append(("squash_merge", number, title, message, head_sha))
        if self.reject_squash:
            raise GatewayError(self.reject_squash)
        if self.repository is not None:
            upstream = f"origin/{self.pr.base_branch}"
            tip = self.repository.remotes[upstream]
            self.repository.commit("SQ", tip, subject=title)
            self.repository.remotes[upstream] = "SQ"

    def get_auto_delete_setting(self):
        self.calls.append(("get_auto_delete_setting",))
        return self.auto_delete


def make_pr(**overrides) -> PullRequestInfo:
    values = {
        "number": 42,
        "title": "Add frobnicator",
        "body": "Frobnicates the widgets.",
        "url": "https://github.com/acme/widgets/pull/42",
        "base_branch": "main",
        "head_branch": "feature",
        "head_sha": None,
    }
    values.update(overrides)
    return PullRequestInfo(**values)


def diverged_repository(feature_commits: int = 2) -> FakeRepository:
    """main and feature forked from A0; main moved on to B1.

    feature is checked out and both branches are pushed.
    """
    repo = FakeRepository()
    repo.commit("A0", subject="Initial commit")
    repo.commit("B1", "A0", subject="Fix typo on main")
    tip = "A0"
    for n in range(1, feature_commits + 1):
        tip = repo.commit(f"F{n}", tip, subject=f"Feature step {n}")
    repo.branches = {"main": "B1", "feature": tip}
    repo.remotes = {"origin/main": "B1", "origin/feature": tip}
    repo.head = "feature"
    return repo
