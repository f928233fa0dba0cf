"""Audit trail contracts for the ledger tables.

These are strict contracts - all enum fields use proper enum types.
Repository layer handles string→enum conversion for DB reads.

The ledger is OUR data. If we read garbage from it, something
catastrophic happened - crash immediately.
"""

from dataclasses import dataclass
from datetime import datetime

from contentflow.contracts.enums import WorkflowState


def _validate_enum(value: object, enum_type: type, field_name: str) -> None:
    """Validate that value is an instance of the expected enum type.

    No coercion, no defaults - a plain string here means a caller skipped
    the repository layer.
    """
    if value is not None and not isinstance(value, enum_type):
        raise TypeError(f"{field_name} must be {enum_type.__name__}, got {type(value).__name__}: {value!r}")


@dataclass(frozen=True)
class Run:
    """One instance of the pipeline for one tenant.

    Strict contract - state must be WorkflowState enum. History is never
    stored here; it lives in workflow_transitions.
    """

    run_id: str
    tenant_id: str
    state: WorkflowState  # Strict: enum only
    version: int
    created_at: datetime
    updated_at: datetime

    def __post_init__(self) -> None:
        _validate_enum(self.state, WorkflowState, "state")
        if self.version < 1:
            raise ValueError(f"version must be >= 1, got {self.version}")


@dataclass(frozen=True)
class TransitionRecord:
    """A committed state transition. Immutable once written.

    sequence equals the run version produced by this transition, so
    ordering by sequence is ordering by commit.
    """

    transition_id: str
    run_id: str
    tenant_id: str
    sequence: int
    previous_state: WorkflowState  # Strict: enum only
    new_state: WorkflowState  # Strict: enum only
    reason: str
    actor: str
    transitioned_at: datetime

    def __post_init__(self) -> None:
        _validate_enum(self.previous_state, WorkflowState, "previous_state")
        _validate_enum(self.new_state, WorkflowState, "new_state")
