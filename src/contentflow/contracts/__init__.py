"""Shared contracts for cross-boundary data types.

All dataclasses, enums, and exceptions that cross subsystem boundaries
are defined here.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes are NOT re-exported here - import them from
contentflow.core.config.
"""

from contentflow.contracts.audit import Run, TransitionRecord
from contentflow.contracts.enums import Phase, StageKey, TerminalAnchor, WorkflowState
from contentflow.contracts.errors import (
    AuditIntegrityError,
    ConfigurationError,
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    UnmappedStateError,
    WorkflowEngineError,
)
from contentflow.contracts.progress import StepView

__all__ = [
    "AuditIntegrityError",
    "ConfigurationError",
    "ConflictError",
    "IllegalTransitionError",
    "NotFoundError",
    "Phase",
    "Run",
    "StageKey",
    "StepView",
    "TerminalAnchor",
    "TransitionRecord",
    "UnmappedStateError",
    "WorkflowEngineError",
    "WorkflowState",
]
