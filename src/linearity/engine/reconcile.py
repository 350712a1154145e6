"""Decide which operations bring a pull request branch to its goal.

Update path
-----------
The goal is a feature branch whose head is a merge with the base tip
as first parent and the feature work as second parent. Merging such a
branch into the base is a fast-forward, so the base keeps a clean
first-parent history and no foxtrot merge is ever created.

Before that merge is built, a foxtrot-shaped merge (feature first,
base second) is pushed and immediately unwound with a force-push. The
review host recomputes its comparison base from that push without
revoking approvals, which pushing the final merge alone would do.
Only one update merge may exist at a time: an outdated one is reset
away and the branch is inspected again.

Merge path
----------
Fast-forward when the update left the branch ready, squash through
the review host when asked to, otherwise a regular ``--no-ff`` merge
with a composed message.
"""

from __future__ import annotations

from linearity.core.config import MergeSettings
from linearity.core.errors import GatewayError, RepositoryError
from linearity.core.log import logger
from linearity.engine.plan import (
    BranchHere,
    Checkout,
    DeleteBranch,
    DeleteRemoteBranch,
    MergeFastForward,
    MergeNoFastForward,
    MergePlan,
    NoOpSignal,
    Operation,
    PruneRemote,
    Pull,
    Push,
    ResetHard,
    Sleep,
    SquashMerge,
)
from linearity.gateway.github import PullRequestInfo
from linearity.git.repository import Repository
from linearity.git.topology import TopologyState, classify, is_foxtrot_merge
from linearity.message.composer import MessageComposer, split_message


class Reconciler:
    """Plan update, merge and cleanup steps from current topology."""

    def __init__(
        self,
        repository: Repository,
        settings: MergeSettings,
        remote: str = "origin",
        composer: MessageComposer | None = None,
    ):
        self.repository = repository
        self.settings = settings
        self.remote = remote
        self.composer = composer or MessageComposer(
            repository,
            title_prefix=settings.title_prefix,
            diffstat_width=settings.diffstat_width,
        )

    def upstream(self, base: str) -> str:
        return f"{self.remote}/{base}"

    def _restore(self, original_ref: str | None) -> list[Operation]:
        return [Checkout(original_ref)] if original_ref else []

    def plan_update(
        self,
        feature: str,
        base: str,
        pr: PullRequestInfo | None = None,
        original_ref: str | None = None,
    ) -> MergePlan | NoOpSignal:
        """Plan bringing feature up to date with the upstream of base."""
        upstream = self.upstream(base)
        base_tip = self.repository.resolve(upstream)
        head = self.repository.resolve(feature)

        # A foxtrot merge still at a head contains the base tip, so it
        # has to be unwound before the no-op check can be trusted.
        interrupted = self._interrupted_update(feature, head, base_tip)
        if interrupted is not None:
            work = self.repository.parents_of(interrupted)[0]
            logger.warn(
                f"{feature} has a foxtrot merge left by an earlier update",
                merge=interrupted,
                work=work,
            )
            return MergePlan(
                description=f"Unwind interrupted update of {feature}",
                operations=[
                    Checkout(feature),
                    ResetHard(feature, work),
                    Push(self.remote, feature, force=True),
                ],
                recovery=self._restore(original_ref),
                reinspect=True,
            )

        if self.repository.is_ancestor(base_tip, head):
            return NoOpSignal("already up to date")

        state = classify(self.repository, head, base_tip)
        logger.info(f"{feature} is {state.value} against {upstream}")

        if state is TopologyState.SYNTHETIC_UPDATE_MERGE:
            work = self.repository.parents_of(head)[1]
            return MergePlan(
                description=f"Discard outdated update merge on {feature}",
                operations=[
                    Checkout(feature),
                    ResetHard(feature, work),
                    Push(self.remote, feature, force=True),
                ],
                recovery=self._restore(original_ref),
                reinspect=True,
            )

        message = (
            self.composer.compose(pr, head, base_tip)
            if pr is not None else None
        )
        operations: list[Operation] = [
            # Foxtrot merge, pushed then unwound
            Checkout(feature),
            MergeNoFastForward(upstream),
            Push(self.remote, feature),
            ResetHard(feature, head),
            Push(self.remote, feature, force=True),
            # Update merge: base tip first, feature work second
            Checkout(base_tip, detach=True),
            MergeNoFastForward(head, message=message),
            BranchHere(feature),
            Push(self.remote, feature),
        ]
        # Recovery puts the local branch back where it started, whichever
        # step failed; a later run finishes what the remote still shows.
        recovery: list[Operation] = [
            Checkout(feature),
            ResetHard(feature, head),
        ]
        if original_ref and original_ref != feature:
            operations.append(Checkout(original_ref))
            recovery.append(Checkout(original_ref))

        return MergePlan(
            description=f"Update {feature} with {upstream}",
            operations=operations,
            recovery=recovery,
        )

    def _interrupted_update(
        self, feature: str, head: str, base_tip: str
    ) -> str | None:
        """Foxtrot merge left behind by an update that stopped early.

        Either the local head is one, or the pushed branch is one built
        directly on the local head (the unwinding force-push failed).
        """
        if is_foxtrot_merge(self.repository, head, base_tip):
            return head
        try:
            pushed = self.repository.resolve(f"{self.remote}/{feature}")
        except RepositoryError:
            return None
        if (
            pushed != head
            and is_foxtrot_merge(self.repository, pushed, base_tip)
            and self.repository.parents_of(pushed)[0] == head
        ):
            return pushed
        return None

    def decide_squash(
        self, feature: str, base: str, override: bool | None = None
    ) -> bool:
        """Whether to squash; an explicit override always wins."""
        if override is not None:
            return override
        if self.settings.squash:
            return True
        if self.settings.squash_single_commit:
            unique = self.repository.count_commits(
                f"{self.upstream(base)}..{feature}"
            )
            if unique == 1:
                logger.info(f"{feature} has a single commit; squashing")
                return True
        return False

    def plan_merge(
        self,
        feature: str,
        base: str,
        pr: PullRequestInfo,
        squash: bool,
        original_ref: str | None = None,
    ) -> MergePlan:
        """Plan merging feature into base."""
        upstream = self.upstream(base)
        base_tip = self.repository.resolve(upstream)
        head = self.repository.resolve(feature)
        state = classify(self.repository, head, base_tip)
        recovery = self._restore(original_ref)

        if state is TopologyState.FASTFORWARD_CANDIDATE and not squash:
            return MergePlan(
                description=f"Fast-forward {base} to {feature}",
                operations=[
                    Checkout(base),
                    MergeFastForward(upstream),
                    MergeFastForward(feature),
                    Push(self.remote, base),
                ],
                recovery=recovery,
            )

        if squash:
            if not pr.squash_allowed:
                raise GatewayError(
                    "squash merges are disabled for this repository",
                    hint="re-run with --no-squash",
                )
            title, body = split_message(
                self.composer.compose(pr, feature, upstream, squashing=True)
            )
            return MergePlan(
                description=f"Squash-merge #{pr.number} into {base}",
                operations=[
                    SquashMerge(pr.number, title, body, head),
                    Checkout(base),
                    Pull(self.remote, base),
                ],
                recovery=recovery,
            )

        if is_foxtrot_merge(self.repository, head, base_tip):
            raise RepositoryError(
                f"{feature} ends in a merge of {upstream} into it",
                hint="run 'linearity update' first",
            )

        message = self.composer.compose(pr, feature, upstream)
        return MergePlan(
            description=f"Merge {feature} into {base}",
            operations=[
                Checkout(base),
                MergeFastForward(upstream),
                MergeNoFastForward(
                    feature, message=message, edit=self.settings.edit
                ),
                Push(self.remote, base),
            ],
            recovery=recovery,
        )

    def plan_cleanup(self, feature: str, auto_delete: bool) -> MergePlan:
        """Plan removing the merged branch locally and on the remote.

        The local branch is force-deleted: after a squash or an update
        merge it does not look merged to git. When the host deletes
        merged branches itself, only stale remote refs are pruned.
        """
        operations: list[Operation] = [DeleteBranch(feature, force=True)]
        if self.settings.delete_remote_branch:
            if self.settings.sleep_before_delete > 0:
                operations.append(Sleep(self.settings.sleep_before_delete))
            if auto_delete:
                operations.append(PruneRemote(self.remote))
            else:
                operations.append(DeleteRemoteBranch(self.remote, feature))
        return MergePlan(
            description=f"Clean up {feature}",
            operations=operations,
            best_effort=True,
        )
