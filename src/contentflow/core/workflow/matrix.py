# src/contentflow/core/workflow/matrix.py
"""Legal transition matrix queries over the production workflow.

The canonical answer to "may state A move to state B". Thin wrappers
around DEFAULT_WORKFLOW so call sites never index the matrix directly.
"""

from contentflow.contracts.enums import WorkflowState
from contentflow.core.workflow.definition import DEFAULT_WORKFLOW


def is_legal_transition(source: WorkflowState, target: WorkflowState) -> bool:
    """Whether target is a permitted successor of source.

    Unknown states are never legal on either side.
    """
    return DEFAULT_WORKFLOW.is_legal_transition(source, target)


def next_states(state: WorkflowState) -> frozenset[WorkflowState]:
    return DEFAULT_WORKFLOW.next_states(state)


def is_terminal(state: WorkflowState) -> bool:
    """True iff next_states(state) is empty."""
    return DEFAULT_WORKFLOW.is_terminal(state)
