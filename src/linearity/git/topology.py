"""Classify the shape of a feature branch head relative to its base."""

from __future__ import annotations

from enum import Enum

from linearity.core.log import logger
from linearity.git.repository import Repository


class TopologyState(str, Enum):
    """Shape of the feature branch head.

    PLAIN: not a merge left behind by an update.
    SYNTHETIC_UPDATE_MERGE: an update merge whose base side is now
        behind the base tip; it has to be replaced.
    FASTFORWARD_CANDIDATE: an update merge sitting exactly on the base
        tip; the base can fast-forward onto the feature branch.
    """

    PLAIN = "plain"
    SYNTHETIC_UPDATE_MERGE = "synthetic-update-merge"
    FASTFORWARD_CANDIDATE = "fastforward-candidate"


def classify(
    repository: Repository, feature_head: str, base_tip: str
) -> TopologyState:
    """Classify feature_head against base_tip.

    Pure function of the two commits and their ancestry.

    Raises:
        RepositoryError: If either commit cannot be resolved or its
            ancestry cannot be read
    """
    head = repository.resolve(feature_head)
    tip = repository.resolve(base_tip)
    parents = repository.parents_of(head)

    if len(parents) != 2:
        state = TopologyState.PLAIN
    elif parents[0] == tip:
        state = TopologyState.FASTFORWARD_CANDIDATE
    elif repository.is_ancestor(parents[0], tip):
        # parents[0] != tip here, so the base moved past it
        state = TopologyState.SYNTHETIC_UPDATE_MERGE
    else:
        state = TopologyState.PLAIN

    logger.debug(
        "Classified feature head",
        head=head,
        base_tip=tip,
        parents=parents,
        state=state.value,
    )
    return state


def is_foxtrot_merge(
    repository: Repository, commit: str, base_tip: str
) -> bool:
    """True when commit merges the base into feature work, feature first.

    This is the shape an update pushes and then unwinds, so finding it
    at a branch head means an earlier update stopped halfway. Such a
    head already contains the base tip, and classify() calls it PLAIN.
    """
    parents = repository.parents_of(commit)
    if len(parents) != 2:
        return False
    tip = repository.resolve(base_tip)
    return (
        repository.is_ancestor(parents[1], tip)
        and not repository.is_ancestor(parents[0], tip)
    )
