"""create_workflow_tables

Create workflow_runs (current state + optimistic-concurrency version) and
workflow_transitions (append-only audit trail).

Revision ID: 5b7e1c2d9a40
Revises:
Create Date: 2026-10-19 09:12:44.381022

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

from contentflow.contracts.enums import WorkflowState

# revision identifiers, used by Alembic.
revision: str = "5b7e1c2d9a40"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_STATE_VALUES = ", ".join(f"'{state.value}'" for state in WorkflowState)


def upgrade() -> None:
    op.create_table(
        "workflow_runs",
        sa.Column("run_id", sa.String(64), primary_key=True),
        sa.Column("tenant_id", sa.String(64), nullable=False, index=True),
        sa.Column("state", sa.String(64), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(f"state IN ({_STATE_VALUES})", name="ck_workflow_runs_state"),
        sa.CheckConstraint("version >= 1", name="ck_workflow_runs_version"),
    )
    op.create_index("ix_workflow_runs_tenant_state", "workflow_runs", ["tenant_id", "state"])

    op.create_table(
        "workflow_transitions",
        sa.Column("transition_id", sa.String(64), primary_key=True),
        sa.Column("run_id", sa.String(64), sa.ForeignKey("workflow_runs.run_id"), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("previous_state", sa.String(64), nullable=False),
        sa.Column("new_state", sa.String(64), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("actor", sa.String(128), nullable=False),
        sa.Column("transitioned_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("run_id", "sequence", name="uq_workflow_transitions_run_sequence"),
        sa.CheckConstraint("previous_state <> new_state", name="ck_workflow_transitions_moves"),
    )
    op.create_index("ix_workflow_transitions_run", "workflow_transitions", ["run_id", "sequence"])
    op.create_index(
        "ix_workflow_transitions_tenant_time",
        "workflow_transitions",
        ["tenant_id", "transitioned_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_workflow_transitions_tenant_time", table_name="workflow_transitions")
    op.drop_index("ix_workflow_transitions_run", table_name="workflow_transitions")
    op.drop_table("workflow_transitions")
    op.drop_index("ix_workflow_runs_tenant_state", table_name="workflow_runs")
    op.drop_table("workflow_runs")
