"""Tests for feature branch classification."""

import pytest

from fakes import FakeRepository, diverged_repository
from linearity.core.errors import RepositoryError
from linearity.git.topology import TopologyState, classify, is_foxtrot_merge


@pytest.fixture
def graph():
    """A0 <- B1 <- B2 on the base, F1 on the feature.

    U1 is an update merge of F1 onto B1, FX the same merge with the
    parents the other way round, X1 a merge of some other branch into
    the feature.
    """
    repo = FakeRepository()
    repo.commit("A0")
    repo.commit("B1", "A0")
    repo.commit("B2", "B1")
    repo.commit("F1", "A0")
    repo.commit("U1", "B1", "F1")
    repo.commit("FX", "F1", "B1")
    repo.commit("S1", "A0")
    repo.commit("X1", "F1", "S1")
    repo.commit("O1", "A0", "F1", "S1")
    return repo


def test_single_parent_is_plain(graph):
    assert classify(graph, "F1", "B2") is TopologyState.PLAIN


def test_update_merge_on_base_tip_is_fastforward_candidate(graph):
    assert classify(graph, "U1", "B1") is TopologyState.FASTFORWARD_CANDIDATE


def test_update_merge_behind_base_tip_is_synthetic(graph):
    """The base moved on after the update merge was made."""
    assert classify(graph, "U1", "B2") is TopologyState.SYNTHETIC_UPDATE_MERGE


def test_merge_with_unrelated_first_parent_is_plain(graph):
    assert classify(graph, "X1", "B2") is TopologyState.PLAIN


def test_octopus_merge_is_plain(graph):
    assert classify(graph, "O1", "B2") is TopologyState.PLAIN


def test_accepts_branch_names(graph):
    graph.branches = {"feature": "U1", "main": "B2"}

    assert (
        classify(graph, "feature", "main")
        is TopologyState.SYNTHETIC_UPDATE_MERGE
    )


def test_unknown_ref_raises(graph):
    with pytest.raises(RepositoryError):
        classify(graph, "no-such-branch", "B1")


def test_classification_is_pure(graph):
    before = dict(graph.branches)
    for _ in range(2):
        assert classify(graph, "U1", "B2") is TopologyState.SYNTHETIC_UPDATE_MERGE
    assert graph.branches == before
    assert graph.calls == []


def test_fresh_branch_is_plain():
    repo = diverged_repository()
    assert classify(repo, "feature", "origin/main") is TopologyState.PLAIN


def test_state_values():
    assert TopologyState.PLAIN.value == "plain"
    assert TopologyState("synthetic-update-merge") is (
        TopologyState.SYNTHETIC_UPDATE_MERGE
    )


@pytest.mark.parametrize("tip", ["B1", "B2"])
def test_base_merged_into_feature_is_foxtrot(graph, tip):
    assert is_foxtrot_merge(graph, "FX", tip)
    # Already contains the base, so classification alone misses it
    assert classify(graph, "FX", tip) is TopologyState.PLAIN


@pytest.mark.parametrize("commit", ["F1", "U1", "X1", "O1"])
def test_other_shapes_are_not_foxtrot(graph, commit):
    assert not is_foxtrot_merge(graph, commit, "B2")
