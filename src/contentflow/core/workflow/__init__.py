"""Workflow configuration: vocabulary table, transition matrix, derivation, validation.

Primary API:
    DEFAULT_WORKFLOW - The production WorkflowGraph (read-only, process-wide)
    validate_workflow_graph / assert_valid_workflow_graph - Startup checks

Read interfaces (pure, no side effects):
    stage_index_of, status_label_of, is_processing, is_failed, is_completed,
    can_access_stage, describe_state, ...
    is_legal_transition, next_states, is_terminal
"""

from contentflow.core.workflow.definition import (
    DEFAULT_WORKFLOW,
    WORKFLOW_STAGES,
    WORKFLOW_TERMINALS,
    build_default_workflow,
)
from contentflow.core.workflow.graph import WorkflowGraph, build_transition_matrix
from contentflow.core.workflow.matrix import is_legal_transition, is_terminal, next_states
from contentflow.core.workflow.models import StageDefinition, TerminalDefinition
from contentflow.core.workflow.progression import (
    can_access_stage,
    describe_state,
    is_completed,
    is_failed,
    is_processing,
    is_stage_completed,
    next_stage_index,
    previous_stage_index,
    stage_index_of,
    stage_title,
    states_for_stage,
    status_label_of,
    total_stages,
)
from contentflow.core.workflow.validator import assert_valid_workflow_graph, validate_workflow_graph

__all__ = [
    "DEFAULT_WORKFLOW",
    "WORKFLOW_STAGES",
    "WORKFLOW_TERMINALS",
    "StageDefinition",
    "TerminalDefinition",
    "WorkflowGraph",
    "assert_valid_workflow_graph",
    "build_default_workflow",
    "build_transition_matrix",
    "can_access_stage",
    "describe_state",
    "is_completed",
    "is_failed",
    "is_legal_transition",
    "is_processing",
    "is_stage_completed",
    "is_terminal",
    "next_stage_index",
    "next_states",
    "previous_stage_index",
    "stage_index_of",
    "stage_title",
    "states_for_stage",
    "status_label_of",
    "total_stages",
    "validate_workflow_graph",
]
