# src/contentflow/engine/executor.py
"""TransitionExecutor: the only writer of run state.

Every transition is a single database transaction:

    read run -> check version -> check matrix -> compare-and-set update -> audit insert

Either both the state update and the audit record commit, or neither does.
Workers report outcomes by calling transition(); the executor never calls
workers back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from contentflow.contracts import (
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    Run,
    TransitionRecord,
    WorkflowState,
)
from contentflow.contracts.errors import AuditIntegrityError
from contentflow.core.ledger._helpers import generate_id, now
from contentflow.core.ledger.repositories import RunRepository
from contentflow.core.ledger.schema import workflow_runs_table, workflow_transitions_table
from contentflow.core.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

    from contentflow.core.ledger.database import LedgerDB
    from contentflow.core.workflow.graph import WorkflowGraph

logger = get_logger(__name__)


def _resolve_target(target_state: WorkflowState | str) -> WorkflowState | None:
    """Map a requested target onto the vocabulary, or None if it is not a member."""
    if isinstance(target_state, WorkflowState):
        return target_state
    try:
        return WorkflowState(target_state)
    except ValueError:
        return None


class TransitionExecutor:
    """Applies validated, versioned, audited state transitions.

    Example:
        executor = TransitionExecutor(db, DEFAULT_WORKFLOW)
        run = executor.transition(run_id, WorkflowState.ICP_PENDING, "pipeline started", "starter")
    """

    def __init__(self, db: LedgerDB, graph: WorkflowGraph) -> None:
        self._db = db
        self._graph = graph
        self._run_repo = RunRepository()

    def transition(
        self,
        run_id: str,
        target_state: WorkflowState | str,
        reason: str,
        actor: str,
        *,
        expected_version: int | None = None,
    ) -> Run:
        """Move a run to target_state.

        Args:
            run_id: Run to move
            target_state: Requested next state
            reason: Why the move happened (recorded in the audit trail)
            actor: Who or what requested it (worker name, user id, "system")
            expected_version: Version the caller based its request on. When
                given and stale, the call fails before anything is checked.

        Returns:
            The run as committed (new state, version incremented by one)

        Raises:
            NotFoundError: Unknown run_id
            ConflictError: Version mismatch (caller must re-read)
            IllegalTransitionError: Target not a permitted successor; nothing written
        """
        journal = self._db.journal

        with self._db.connection() as conn:
            current = self._load_run(conn, run_id)
            if current is None:
                raise NotFoundError(run_id)

            if expected_version is not None and current.version != expected_version:
                logger.warning(
                    "workflow_transition_conflict",
                    run_id=run_id,
                    expected_version=expected_version,
                    actual_version=current.version,
                    target_state=str(target_state),
                )
                raise ConflictError(run_id, expected_version, current.version)

            target = _resolve_target(target_state)
            if target is None or not self._graph.is_legal_transition(current.state, target):
                logger.warning(
                    "workflow_transition_rejected",
                    run_id=run_id,
                    current_state=current.state.value,
                    target_state=str(target_state),
                    actor=actor,
                )
                raise IllegalTransitionError(run_id, current.state, str(target_state))

            timestamp = now()
            new_version = current.version + 1
            result = conn.execute(
                workflow_runs_table.update()
                .where(workflow_runs_table.c.run_id == run_id)
                .where(workflow_runs_table.c.version == current.version)
                .values(state=target.value, version=new_version, updated_at=timestamp)
            )
            if result.rowcount != 1:
                logger.warning(
                    "workflow_transition_conflict",
                    run_id=run_id,
                    expected_version=current.version,
                    target_state=target.value,
                )
                raise ConflictError(run_id, current.version)

            record = TransitionRecord(
                transition_id=generate_id(),
                run_id=run_id,
                tenant_id=current.tenant_id,
                sequence=new_version,
                previous_state=current.state,
                new_state=target,
                reason=reason,
                actor=actor,
                transitioned_at=timestamp,
            )
            self._append_transition(conn, record)
            if journal is not None:
                journal.stage(conn, record)

            updated = self._load_run(conn, run_id)
            if updated is None:
                raise AuditIntegrityError(f"Run {run_id} disappeared inside its own transition")

        logger.info(
            "workflow_transition_committed",
            run_id=run_id,
            tenant_id=updated.tenant_id,
            previous_state=record.previous_state.value,
            new_state=record.new_state.value,
            version=updated.version,
            actor=actor,
        )
        return updated

    def cancel(self, run_id: str, reason: str, actor: str, *, expected_version: int | None = None) -> Run:
        """Move a run to the cancel state. Terminal runs refuse with IllegalTransitionError."""
        return self.transition(
            run_id,
            self._graph.cancel_state,
            reason,
            actor,
            expected_version=expected_version,
        )

    def _load_run(self, conn: Connection, run_id: str) -> Run | None:
        row = conn.execute(
            select(workflow_runs_table).where(workflow_runs_table.c.run_id == run_id)
        ).one_or_none()
        if row is None:
            return None
        return self._run_repo.load(row)

    def _append_transition(self, conn: Connection, record: TransitionRecord) -> None:
        """Insert the audit record on the caller's connection (same transaction)."""
        result = conn.execute(
            workflow_transitions_table.insert().values(
                transition_id=record.transition_id,
                run_id=record.run_id,
                tenant_id=record.tenant_id,
                sequence=record.sequence,
                previous_state=record.previous_state.value,
                new_state=record.new_state.value,
                reason=record.reason,
                actor=record.actor,
                transitioned_at=record.transitioned_at,
            )
        )
        if result.rowcount != 1:
            raise AuditIntegrityError(f"Transition record for run {record.run_id} was not written")
