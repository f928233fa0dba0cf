"""Fixtures for executor and service tests."""

import pytest

from contentflow.core.ledger.database import LedgerDB
from contentflow.core.ledger.recorder import LedgerRecorder
from contentflow.core.workflow import DEFAULT_WORKFLOW
from contentflow.engine.executor import TransitionExecutor
from contentflow.engine.service import WorkflowEngine


@pytest.fixture
def ledger_db() -> LedgerDB:
    """Function-scoped: executor tests assert on exact run counts and versions."""
    return LedgerDB.in_memory()


@pytest.fixture
def recorder(ledger_db: LedgerDB) -> LedgerRecorder:
    return LedgerRecorder(ledger_db)


@pytest.fixture
def executor(ledger_db: LedgerDB) -> TransitionExecutor:
    return TransitionExecutor(ledger_db, DEFAULT_WORKFLOW)


@pytest.fixture
def engine(ledger_db: LedgerDB) -> WorkflowEngine:
    return WorkflowEngine(ledger_db)
