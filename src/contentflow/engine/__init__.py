"""Workflow engine: transition execution and the service facade.

Primary API:
    WorkflowEngine - Validates the workflow at startup and exposes runs,
        transitions, history and progress
    TransitionExecutor - Sole writer of run state
"""

from contentflow.engine.executor import TransitionExecutor
from contentflow.engine.service import WorkflowEngine

__all__ = [
    "TransitionExecutor",
    "WorkflowEngine",
]
