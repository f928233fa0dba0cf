"""Tests for the workflow graph and generated transition matrix."""

import networkx as nx
import pytest

from contentflow.contracts import UnmappedStateError, WorkflowState
from contentflow.core.workflow import (
    DEFAULT_WORKFLOW,
    WORKFLOW_STAGES,
    is_legal_transition,
    is_terminal,
    next_states,
)

S = WorkflowState


class TestTransitionMatrix:
    def test_every_vocabulary_state_has_a_row(self) -> None:
        assert set(DEFAULT_WORKFLOW.transitions) == set(WorkflowState)

    def test_created_moves_to_icp_pending(self) -> None:
        assert next_states(S.CREATED) == frozenset({S.ICP_PENDING, S.CANCELLED})

    def test_processing_can_complete_or_fail(self) -> None:
        assert next_states(S.CLUSTERING_PROCESSING) == frozenset(
            {S.CLUSTERING_COMPLETED, S.CLUSTERING_FAILED, S.CANCELLED}
        )

    def test_failed_retries_into_processing(self) -> None:
        assert is_legal_transition(S.ARTICLE_FAILED, S.ARTICLE_PROCESSING)

    def test_failed_cannot_skip_to_completed(self) -> None:
        assert not is_legal_transition(S.ARTICLE_FAILED, S.ARTICLE_COMPLETED)

    def test_competitor_completion_opens_seed_review(self) -> None:
        assert is_legal_transition(S.COMPETITOR_COMPLETED, S.SEED_REVIEW_PENDING)

    def test_seed_review_is_a_human_gate(self) -> None:
        """Approval moves straight from pending to completed."""
        assert next_states(S.SEED_REVIEW_PENDING) == frozenset({S.SEED_REVIEW_COMPLETED, S.CANCELLED})
        assert is_legal_transition(S.SEED_REVIEW_COMPLETED, S.CLUSTERING_PENDING)

    def test_last_stage_completes_the_run(self) -> None:
        assert is_legal_transition(S.PUBLISH_COMPLETED, S.FULLY_COMPLETED)

    def test_no_stage_skipping(self) -> None:
        assert not is_legal_transition(S.ICP_COMPLETED, S.SEED_REVIEW_PENDING)
        assert not is_legal_transition(S.CREATED, S.PUBLISH_PENDING)

    def test_no_backwards_moves(self) -> None:
        assert not is_legal_transition(S.COMPETITOR_PENDING, S.ICP_PENDING)

    def test_no_self_transitions(self) -> None:
        for state, successors in DEFAULT_WORKFLOW.transitions.items():
            assert state not in successors

    @pytest.mark.parametrize("terminal", [S.CANCELLED, S.FULLY_COMPLETED])
    def test_terminal_states_have_no_successors(self, terminal: WorkflowState) -> None:
        assert next_states(terminal) == frozenset()
        assert is_terminal(terminal)

    def test_every_non_terminal_state_can_be_cancelled(self) -> None:
        for state in WorkflowState:
            if not is_terminal(state):
                assert is_legal_transition(state, S.CANCELLED), state

    def test_unknown_state_is_not_legal(self) -> None:
        assert not DEFAULT_WORKFLOW.is_legal_transition("bogus", S.CANCELLED)  # type: ignore[arg-type]

    def test_next_states_of_unknown_state_raises(self) -> None:
        with pytest.raises(UnmappedStateError):
            DEFAULT_WORKFLOW.next_states("bogus")  # type: ignore[arg-type]

    def test_matrix_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_WORKFLOW.transitions[S.CREATED] = frozenset()  # type: ignore[index]


class TestGraphAlgorithms:
    def test_to_networkx_contains_every_state(self) -> None:
        graph = DEFAULT_WORKFLOW.to_networkx()
        assert isinstance(graph, nx.DiGraph)
        assert set(graph.nodes) == set(WorkflowState)
        assert graph.has_edge(S.CREATED, S.ICP_PENDING)

    def test_happy_path_visits_every_stage_in_order(self) -> None:
        path = DEFAULT_WORKFLOW.path_between(S.CREATED, S.FULLY_COMPLETED)
        assert path is not None
        assert path[0] is S.CREATED
        assert path[-1] is S.FULLY_COMPLETED
        indices = [DEFAULT_WORKFLOW.stage_index_of(state) for state in path]
        assert indices == sorted(indices)
        assert set(indices) == set(range(1, len(WORKFLOW_STAGES) + 1))

    def test_no_path_out_of_terminal(self) -> None:
        assert DEFAULT_WORKFLOW.path_between(S.CANCELLED, S.ICP_PENDING) is None

    def test_every_step_of_a_path_is_legal(self) -> None:
        path = DEFAULT_WORKFLOW.path_between(S.CREATED, S.ARTICLE_FAILED)
        assert path is not None
        for source, target in zip(path, path[1:], strict=False):
            assert is_legal_transition(source, target)
