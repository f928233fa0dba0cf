# src/contentflow/core/ledger/_run_recording.py
"""Run creation and lookup methods for LedgerRecorder."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy import select

from contentflow.contracts import Run, WorkflowState
from contentflow.core.ledger._helpers import coerce_enum, generate_id, now
from contentflow.core.ledger.schema import workflow_runs_table

if TYPE_CHECKING:
    from contentflow.core.ledger._database_ops import DatabaseOps
    from contentflow.core.ledger.database import LedgerDB
    from contentflow.core.ledger.repositories import RunRepository


class RunRecordingMixin:
    """Run lifecycle methods. Mixed into LedgerRecorder."""

    # Shared state annotations (set by LedgerRecorder.__init__)
    _db: LedgerDB
    _ops: DatabaseOps
    _run_repo: RunRepository
    _initial_state: WorkflowState

    def create_run(self, tenant_id: str, *, run_id: str | None = None) -> Run:
        """Create a run in the initial state at version 1.

        No transition record is written; history starts with the first move.

        Args:
            tenant_id: Owning tenant
            run_id: Optional run ID (generated if not provided)

        Returns:
            The persisted Run
        """
        if not tenant_id:
            raise ValueError("tenant_id must not be empty")
        timestamp = now()
        run = Run(
            run_id=run_id or generate_id(),
            tenant_id=tenant_id,
            state=self._initial_state,
            version=1,
            created_at=timestamp,
            updated_at=timestamp,
        )

        self._ops.execute_insert(
            workflow_runs_table.insert().values(
                run_id=run.run_id,
                tenant_id=run.tenant_id,
                state=run.state.value,
                version=run.version,
                created_at=run.created_at,
                updated_at=run.updated_at,
            )
        )
        return run

    def get_run(self, run_id: str) -> Run | None:
        """Get a run by ID.

        Returns:
            Run, or None if not found
        """
        query = select(workflow_runs_table).where(workflow_runs_table.c.run_id == run_id)
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._run_repo.load(row)

    def list_runs(
        self,
        tenant_id: str,
        *,
        states: Iterable[WorkflowState | str] | None = None,
    ) -> list[Run]:
        """List a tenant's runs, oldest first.

        Args:
            tenant_id: Tenant to list
            states: Optional filter; only runs currently in one of these states

        Returns:
            List of Run models
        """
        query = select(workflow_runs_table).where(workflow_runs_table.c.tenant_id == tenant_id)
        if states is not None:
            state_values = [coerce_enum(s, WorkflowState).value for s in states]
            query = query.where(workflow_runs_table.c.state.in_(state_values))
        query = query.order_by(workflow_runs_table.c.created_at, workflow_runs_table.c.run_id)

        rows = self._ops.execute_fetchall(query)
        return [self._run_repo.load(row) for row in rows]
