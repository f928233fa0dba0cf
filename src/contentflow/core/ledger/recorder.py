# src/contentflow/core/ledger/recorder.py
"""LedgerRecorder: High-level API over the workflow ledger.

Creates runs and reads runs and their audit trail. It has no update or
delete API: run state changes go through the TransitionExecutor, which
writes the state update and the audit record in one transaction.
"""

from __future__ import annotations

from contentflow.contracts import WorkflowState
from contentflow.core.ledger._database_ops import DatabaseOps
from contentflow.core.ledger._run_recording import RunRecordingMixin
from contentflow.core.ledger._transition_queries import TransitionQueryMixin
from contentflow.core.ledger.database import LedgerDB
from contentflow.core.ledger.repositories import RunRepository, TransitionRepository


class LedgerRecorder(RunRecordingMixin, TransitionQueryMixin):
    """High-level API for the run and transition ledger.

    Example:
        db = LedgerDB.in_memory()
        recorder = LedgerRecorder(db)

        run = recorder.create_run("tenant-1")
        history = recorder.get_transitions(run.run_id)
    """

    def __init__(self, db: LedgerDB, *, initial_state: WorkflowState = WorkflowState.CREATED) -> None:
        """Initialize recorder with database connection.

        Args:
            db: LedgerDB instance
            initial_state: State new runs start in
        """
        self._db = db
        self._initial_state = initial_state

        # Database operations helper for reduced boilerplate
        self._ops = DatabaseOps(db)

        # Repository instances for row-to-object conversions
        self._run_repo = RunRepository()
        self._transition_repo = TransitionRepository()
