# src/contentflow/core/workflow/models.py
"""Types for workflow configuration.

Leaf module - no intra-package imports beyond contracts (prevents import cycles).
"""

from __future__ import annotations

from dataclasses import dataclass

from contentflow.contracts.enums import Phase, StageKey, TerminalAnchor, WorkflowState


@dataclass(frozen=True, slots=True)
class StageDefinition:
    """One logical phase of work and the states that belong to it.

    The stage index shown to users is the position of this definition in
    the workflow's stage tuple (1-based). It is never stored on the
    definition itself, so inserting or reordering stages cannot make the
    index and the semantic state drift apart.

    human_gate marks a stage that has no PROCESSING/FAILED sub-states: an
    external approval moves PENDING straight to COMPLETED.
    """

    key: StageKey
    title: str
    states: tuple[tuple[WorkflowState, Phase], ...]
    human_gate: bool = False

    @property
    def state_names(self) -> tuple[WorkflowState, ...]:
        return tuple(state for state, _ in self.states)

    def state_for(self, phase: Phase) -> WorkflowState | None:
        """Return the state carrying the given phase in this stage, if any."""
        for state, state_phase in self.states:
            if state_phase == phase:
                return state
        return None


@dataclass(frozen=True, slots=True)
class TerminalDefinition:
    """A state with no outgoing transitions.

    Terminal states belong to no stage; the anchor decides which stage
    index they report (cancelled resets navigation to the first stage,
    full completion reports the last one).
    """

    state: WorkflowState
    anchor: TerminalAnchor
    label: str
