"""Shared fixtures for ledger tests.

Fixture Scoping Strategy
========================
- ledger_db: Module-scoped (schema creation per test adds up)
- recorder: Function-scoped (lightweight wrapper, uses shared db)

Tests share one database per module, so each test uses its own tenant_id
(or filters by its own run_id) to avoid seeing other tests' data.
"""

import pytest

from contentflow.core.ledger.database import LedgerDB
from contentflow.core.ledger.recorder import LedgerRecorder


@pytest.fixture(scope="module")
def ledger_db() -> LedgerDB:
    """Create a module-scoped in-memory ledger database."""
    return LedgerDB.in_memory()


@pytest.fixture
def recorder(ledger_db: LedgerDB) -> LedgerRecorder:
    return LedgerRecorder(ledger_db)
