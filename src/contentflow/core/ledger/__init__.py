"""Workflow ledger: run state and the append-only transition audit trail.

This package provides the infrastructure for persisting workflow runs:
- LedgerDB: Database connection management
- LedgerRecorder: Run creation and audit trail queries
- TransitionJournal: Optional JSONL backup of committed transitions
- Table definitions for SQLAlchemy Core
"""

from contentflow.core.ledger.database import LedgerDB, SchemaCompatibilityError
from contentflow.core.ledger.journal import JournalRecord, TransitionJournal
from contentflow.core.ledger.recorder import LedgerRecorder
from contentflow.core.ledger.repositories import RunRepository, TransitionRepository
from contentflow.core.ledger.schema import (
    metadata,
    workflow_runs_table,
    workflow_transitions_table,
)

__all__ = [
    "JournalRecord",
    "LedgerDB",
    "LedgerRecorder",
    "RunRepository",
    "SchemaCompatibilityError",
    "TransitionJournal",
    "TransitionRepository",
    "metadata",
    "workflow_runs_table",
    "workflow_transitions_table",
]
