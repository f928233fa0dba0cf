# src/contentflow/core/ledger/_transition_queries.py
"""Read-only queries over the transition audit trail for LedgerRecorder."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from contentflow.contracts import TransitionRecord
from contentflow.core.ledger.schema import workflow_transitions_table

if TYPE_CHECKING:
    from contentflow.core.ledger._database_ops import DatabaseOps
    from contentflow.core.ledger.repositories import TransitionRepository


class TransitionQueryMixin:
    """Audit trail queries. Mixed into LedgerRecorder."""

    _ops: DatabaseOps
    _transition_repo: TransitionRepository

    def get_transitions(self, run_id: str) -> list[TransitionRecord]:
        """Get all transitions for a run, in commit order (by sequence)."""
        query = (
            select(workflow_transitions_table)
            .where(workflow_transitions_table.c.run_id == run_id)
            .order_by(workflow_transitions_table.c.sequence)
        )
        rows = self._ops.execute_fetchall(query)
        return [self._transition_repo.load(row) for row in rows]

    def get_latest_transition(self, run_id: str) -> TransitionRecord | None:
        """Get the most recent transition for a run, or None if it never moved.

        Its new_state always equals the run's current state.
        """
        query = (
            select(workflow_transitions_table)
            .where(workflow_transitions_table.c.run_id == run_id)
            .order_by(workflow_transitions_table.c.sequence.desc())
            .limit(1)
        )
        row = self._ops.execute_fetchone(query)
        if row is None:
            return None
        return self._transition_repo.load(row)

    def get_tenant_activity(self, tenant_id: str, *, limit: int = 100) -> list[TransitionRecord]:
        """Get a tenant's most recent transitions across all runs, newest first.

        Args:
            tenant_id: Tenant to report on
            limit: Maximum number of records

        Raises:
            ValueError: If limit is not positive
        """
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        query = (
            select(workflow_transitions_table)
            .where(workflow_transitions_table.c.tenant_id == tenant_id)
            .order_by(
                workflow_transitions_table.c.transitioned_at.desc(),
                workflow_transitions_table.c.sequence.desc(),
            )
            .limit(limit)
        )
        rows = self._ops.execute_fetchall(query)
        return [self._transition_repo.load(row) for row in rows]
