# src/contentflow/engine/service.py
"""WorkflowEngine: the facade API layers and workers talk to."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Self

from contentflow.contracts import NotFoundError, Run, StepView, TransitionRecord, WorkflowState
from contentflow.core.ledger.database import LedgerDB
from contentflow.core.ledger.recorder import LedgerRecorder
from contentflow.core.logging import get_logger
from contentflow.core.workflow.definition import DEFAULT_WORKFLOW
from contentflow.core.workflow.validator import assert_valid_workflow_graph
from contentflow.engine.executor import TransitionExecutor

if TYPE_CHECKING:
    from contentflow.core.config import ContentflowSettings
    from contentflow.core.workflow.graph import WorkflowGraph

logger = get_logger(__name__)


class WorkflowEngine:
    """Validated workflow graph + ledger + executor.

    The graph is validated once, at construction. A broken configuration
    raises ConfigurationError and no engine exists to accept transitions.

    Example:
        engine = WorkflowEngine(LedgerDB.in_memory())
        run = engine.create_run("tenant-1")
        run = engine.transition(run.run_id, WorkflowState.ICP_PENDING, "start", "starter")
        engine.progress(run.run_id).status_label  # "step_1_icp"
    """

    def __init__(self, db: LedgerDB, graph: WorkflowGraph = DEFAULT_WORKFLOW, *, owns_db: bool = False) -> None:
        assert_valid_workflow_graph(graph)
        self._db = db
        self._graph = graph
        self._owns_db = owns_db
        self._recorder = LedgerRecorder(db, initial_state=graph.initial_state)
        self._executor = TransitionExecutor(db, graph)

    @classmethod
    def from_settings(cls, settings: ContentflowSettings, graph: WorkflowGraph = DEFAULT_WORKFLOW) -> Self:
        """Open the configured ledger database (and journal) and build an engine."""
        db = LedgerDB.from_url(
            settings.database.url,
            echo=settings.database.echo,
            create_tables=settings.database.create_tables,
            journal=settings.journal.enabled,
            journal_path=settings.journal.path,
            journal_fail_on_error=settings.journal.fail_on_error,
        )
        try:
            return cls(db, graph, owns_db=True)
        except Exception:
            db.close()
            raise

    @property
    def graph(self) -> WorkflowGraph:
        return self._graph

    @property
    def db(self) -> LedgerDB:
        return self._db

    def close(self) -> None:
        """Dispose of the database if this engine opened it."""
        if self._owns_db:
            self._db.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # === Runs ===

    def create_run(self, tenant_id: str, *, run_id: str | None = None) -> Run:
        run = self._recorder.create_run(tenant_id, run_id=run_id)
        logger.info("workflow_run_created", run_id=run.run_id, tenant_id=tenant_id, state=run.state.value)
        return run

    def get_run(self, run_id: str) -> Run:
        """Get a run by ID.

        Raises:
            NotFoundError: Unknown run_id
        """
        run = self._recorder.get_run(run_id)
        if run is None:
            raise NotFoundError(run_id)
        return run

    def list_runs(self, tenant_id: str, *, states: Iterable[WorkflowState | str] | None = None) -> list[Run]:
        return self._recorder.list_runs(tenant_id, states=states)

    # === Transitions ===

    def transition(
        self,
        run_id: str,
        target_state: WorkflowState | str,
        reason: str,
        actor: str,
        *,
        expected_version: int | None = None,
    ) -> Run:
        return self._executor.transition(run_id, target_state, reason, actor, expected_version=expected_version)

    def cancel(self, run_id: str, reason: str, actor: str, *, expected_version: int | None = None) -> Run:
        return self._executor.cancel(run_id, reason, actor, expected_version=expected_version)

    # === Audit trail ===

    def history(self, run_id: str) -> list[TransitionRecord]:
        """Transitions for a run in commit order.

        Raises:
            NotFoundError: Unknown run_id
        """
        self.get_run(run_id)
        return self._recorder.get_transitions(run_id)

    def latest_transition(self, run_id: str) -> TransitionRecord | None:
        self.get_run(run_id)
        return self._recorder.get_latest_transition(run_id)

    def tenant_activity(self, tenant_id: str, *, limit: int = 100) -> list[TransitionRecord]:
        return self._recorder.get_tenant_activity(tenant_id, limit=limit)

    # === Progress ===

    def progress(self, run_id: str) -> StepView:
        """Derived progress view for a run's current state."""
        return self._graph.describe(self.get_run(run_id).state)
