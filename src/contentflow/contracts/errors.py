"""Exception taxonomy for the workflow engine.

Callers must be able to tell these apart: API layers retry ConflictError,
but never retry IllegalTransitionError.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contentflow.contracts.enums import WorkflowState


class WorkflowEngineError(Exception):
    """Base class for all engine errors."""


class IllegalTransitionError(WorkflowEngineError):
    """Requested target is not in the current state's successor set.

    Always rejected, never retried automatically. Nothing was written.
    """

    def __init__(self, run_id: str, current_state: WorkflowState, target_state: str) -> None:
        self.run_id = run_id
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(f"Illegal transition for run {run_id}: {current_state!s} -> {target_state!s}")


class ConflictError(WorkflowEngineError):
    """Optimistic-concurrency version mismatch.

    Another caller mutated the run first. The caller must re-read the run
    and decide whether the transition still makes sense.

    Attributes:
        run_id: Run that was contended
        expected_version: Version the caller based its request on
        actual_version: Version found in the store, or None when the loss
            was only detected by the compare-and-set update
    """

    def __init__(self, run_id: str, expected_version: int, actual_version: int | None = None) -> None:
        self.run_id = run_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        detail = f", found {actual_version}" if actual_version is not None else ""
        super().__init__(f"Run {run_id} was modified concurrently (expected version {expected_version}{detail})")


class NotFoundError(WorkflowEngineError):
    """Unknown run id."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(f"Run not found: {run_id}")


class ConfigurationError(WorkflowEngineError):
    """The workflow configuration violates a structural invariant.

    Raised only at startup by the graph validator. Fatal: the service must
    not accept transitions with a broken graph.
    """

    def __init__(self, violations: Iterable[str]) -> None:
        self.violations = tuple(violations)
        bullet_list = "\n".join(f"  - {v}" for v in self.violations)
        super().__init__(f"Workflow configuration is invalid ({len(self.violations)} violation(s)):\n{bullet_list}")


class UnmappedStateError(WorkflowEngineError, ValueError):
    """Progress derivation was asked about a state the configuration does not map.

    Fail fast - there is no silent fallback to stage 1.
    """

    def __init__(self, state: object) -> None:
        self.state = state
        super().__init__(f"Unmapped workflow state: {state!r}")


class AuditIntegrityError(WorkflowEngineError):
    """A ledger write that must affect exactly one row did not."""
