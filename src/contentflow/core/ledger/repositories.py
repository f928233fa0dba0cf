"""Repository layer for ledger records.

Handles the seam between SQLAlchemy rows (strings) and domain objects
(strict enum types). This is NOT a trust boundary - if the database
has bad data, we crash.
"""

from typing import Any

from sqlalchemy.engine import Row as SARow

from contentflow.contracts.audit import Run, TransitionRecord
from contentflow.contracts.enums import WorkflowState


class RunRepository:
    """Repository for Run records."""

    def load(self, row: SARow[Any]) -> Run:
        """Load Run from database row.

        Converts the state string to WorkflowState. Crashes on invalid data.
        """
        return Run(
            run_id=row.run_id,
            tenant_id=row.tenant_id,
            state=WorkflowState(row.state),  # Convert HERE
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class TransitionRepository:
    """Repository for TransitionRecord rows."""

    def load(self, row: SARow[Any]) -> TransitionRecord:
        return TransitionRecord(
            transition_id=row.transition_id,
            run_id=row.run_id,
            tenant_id=row.tenant_id,
            sequence=row.sequence,
            previous_state=WorkflowState(row.previous_state),
            new_state=WorkflowState(row.new_state),
            reason=row.reason,
            actor=row.actor,
            transitioned_at=row.transitioned_at,
        )
