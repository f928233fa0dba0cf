"""Tests for ledger contracts."""

from datetime import UTC, datetime

import pytest

from contentflow.contracts import Run, TransitionRecord, WorkflowState


def _now() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


class TestRun:
    def test_run_with_enum_state(self) -> None:
        run = Run(
            run_id="run-1",
            tenant_id="tenant-1",
            state=WorkflowState.CREATED,
            version=1,
            created_at=_now(),
            updated_at=_now(),
        )
        assert run.state is WorkflowState.CREATED

    def test_run_rejects_string_state(self) -> None:
        """A raw string means the repository layer was bypassed."""
        with pytest.raises(TypeError, match="state must be WorkflowState"):
            Run(
                run_id="run-1",
                tenant_id="tenant-1",
                state="created",  # type: ignore[arg-type]
                version=1,
                created_at=_now(),
                updated_at=_now(),
            )

    def test_run_rejects_version_below_one(self) -> None:
        with pytest.raises(ValueError, match="version must be >= 1"):
            Run(
                run_id="run-1",
                tenant_id="tenant-1",
                state=WorkflowState.CREATED,
                version=0,
                created_at=_now(),
                updated_at=_now(),
            )

    def test_run_is_frozen(self) -> None:
        run = Run("run-1", "tenant-1", WorkflowState.CREATED, 1, _now(), _now())
        with pytest.raises(AttributeError):
            run.state = WorkflowState.ICP_PENDING  # type: ignore[misc]


class TestTransitionRecord:
    def test_rejects_string_states(self) -> None:
        with pytest.raises(TypeError, match="new_state must be WorkflowState"):
            TransitionRecord(
                transition_id="t-1",
                run_id="run-1",
                tenant_id="tenant-1",
                sequence=2,
                previous_state=WorkflowState.CREATED,
                new_state="icp_pending",  # type: ignore[arg-type]
                reason="start",
                actor="starter",
                transitioned_at=_now(),
            )
