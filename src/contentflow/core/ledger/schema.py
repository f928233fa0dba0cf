# src/contentflow/core/ledger/schema.py
"""SQLAlchemy table definitions for the workflow ledger.

Uses SQLAlchemy Core (not ORM) for explicit control over queries
and compatibility with multiple database backends.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from contentflow.contracts.enums import WorkflowState

# Shared metadata for all tables
metadata = MetaData()

STATE_COLUMN_LENGTH = 64

# Persisted states must be vocabulary members even if a writer bypasses the executor
_STATE_VALUES = ", ".join(f"'{state.value}'" for state in WorkflowState)

# === Runs ===

workflow_runs_table = Table(
    "workflow_runs",
    metadata,
    Column("run_id", String(64), primary_key=True),
    Column("tenant_id", String(64), nullable=False, index=True),
    Column("state", String(STATE_COLUMN_LENGTH), nullable=False),
    # Optimistic concurrency: every committed transition increments this
    Column("version", Integer, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    CheckConstraint(f"state IN ({_STATE_VALUES})", name="ck_workflow_runs_state"),
    CheckConstraint("version >= 1", name="ck_workflow_runs_version"),
)

Index("ix_workflow_runs_tenant_state", workflow_runs_table.c.tenant_id, workflow_runs_table.c.state)

# === Transitions (append-only audit trail) ===

workflow_transitions_table = Table(
    "workflow_transitions",
    metadata,
    Column("transition_id", String(64), primary_key=True),
    Column("run_id", String(64), ForeignKey("workflow_runs.run_id"), nullable=False),
    Column("tenant_id", String(64), nullable=False),
    # Run version produced by this transition - total commit order per run
    Column("sequence", Integer, nullable=False),
    Column("previous_state", String(STATE_COLUMN_LENGTH), nullable=False),
    Column("new_state", String(STATE_COLUMN_LENGTH), nullable=False),
    Column("reason", Text, nullable=False),
    Column("actor", String(128), nullable=False),
    Column("transitioned_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("run_id", "sequence", name="uq_workflow_transitions_run_sequence"),
    CheckConstraint("previous_state <> new_state", name="ck_workflow_transitions_moves"),
)

Index("ix_workflow_transitions_run", workflow_transitions_table.c.run_id, workflow_transitions_table.c.sequence)
Index(
    "ix_workflow_transitions_tenant_time",
    workflow_transitions_table.c.tenant_id,
    workflow_transitions_table.c.transitioned_at,
)
