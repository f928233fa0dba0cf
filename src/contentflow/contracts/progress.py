"""Read-only progress view handed to API and dashboard layers."""

from dataclasses import dataclass

from contentflow.contracts.enums import Phase, StageKey, WorkflowState


@dataclass(frozen=True, slots=True)
class StepView:
    """Everything a UI needs to render one run's progress.

    Derived entirely from the state - never stored. Two callers asking
    about the same state always get equal views.

    phase is None for terminal states, which belong to no stage.
    """

    state: WorkflowState
    stage_index: int
    stage_key: StageKey
    stage_title: str
    status_label: str
    phase: Phase | None
    total_stages: int
    is_processing: bool
    is_failed: bool
    is_completed: bool
    is_terminal: bool
