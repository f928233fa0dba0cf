# src/contentflow/core/workflow/progression.py
"""State-to-progress derivation for UI and API layers.

Every value here is computed from the run's single persisted state. There
is no stored "current step" anywhere - the stage index, status label and
flags are pure functions of the state, so two readers can never disagree.
"""

from contentflow.contracts.enums import WorkflowState
from contentflow.contracts.progress import StepView
from contentflow.core.workflow.definition import DEFAULT_WORKFLOW


def stage_index_of(state: WorkflowState) -> int:
    """1-based stage index; failure sub-states share their stage's index.

    Raises:
        UnmappedStateError: If the state is not in the configuration
    """
    return DEFAULT_WORKFLOW.stage_index_of(state)


def status_label_of(state: WorkflowState) -> str:
    """Status label for display and filtering, e.g. "step_2_competitors"."""
    return DEFAULT_WORKFLOW.status_label_of(state)


def is_processing(state: WorkflowState) -> bool:
    return DEFAULT_WORKFLOW.is_processing(state)


def is_failed(state: WorkflowState) -> bool:
    return DEFAULT_WORKFLOW.is_failed(state)


def is_completed(state: WorkflowState) -> bool:
    """True only for a fully completed run (not for a completed stage)."""
    return DEFAULT_WORKFLOW.is_completed(state)


def is_stage_completed(state: WorkflowState) -> bool:
    return DEFAULT_WORKFLOW.is_stage_completed(state)


def can_access_stage(current_state: WorkflowState, target_stage_index: int) -> bool:
    """True if target_stage_index <= stage_index_of(current_state); never when cancelled."""
    return DEFAULT_WORKFLOW.can_access_stage(current_state, target_stage_index)


def next_stage_index(state: WorkflowState) -> int | None:
    return DEFAULT_WORKFLOW.next_stage_index(state)


def previous_stage_index(state: WorkflowState) -> int | None:
    return DEFAULT_WORKFLOW.previous_stage_index(state)


def stage_title(stage_index: int) -> str:
    return DEFAULT_WORKFLOW.stage_title(stage_index)


def states_for_stage(stage_index: int) -> tuple[WorkflowState, ...]:
    return DEFAULT_WORKFLOW.states_for_stage(stage_index)


def total_stages() -> int:
    return DEFAULT_WORKFLOW.stage_count


def describe_state(state: WorkflowState) -> StepView:
    return DEFAULT_WORKFLOW.describe(state)
