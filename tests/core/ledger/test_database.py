# tests/core/ledger/test_database.py
"""Tests for ledger database connection management."""

from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.exc import IntegrityError

from contentflow.core.ledger.database import LedgerDB, SchemaCompatibilityError


class TestDatabaseConnection:
    """Database connection and initialization."""

    def test_connect_creates_tables(self, tmp_path: Path) -> None:
        db = LedgerDB(f"sqlite:///{tmp_path / 'workflow.db'}")

        tables = inspect(db.engine).get_table_names()

        assert "workflow_runs" in tables
        assert "workflow_transitions" in tables

    def test_sqlite_wal_mode(self, tmp_path: Path) -> None:
        db = LedgerDB(f"sqlite:///{tmp_path / 'workflow.db'}")

        with db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA journal_mode")).scalar() == "wal"

    def test_sqlite_foreign_keys_enabled(self, tmp_path: Path) -> None:
        db = LedgerDB(f"sqlite:///{tmp_path / 'workflow.db'}")

        with db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_sqlite_busy_timeout(self, tmp_path: Path) -> None:
        db = LedgerDB(f"sqlite:///{tmp_path / 'workflow.db'}")

        with db.engine.connect() as conn:
            assert conn.execute(text("PRAGMA busy_timeout")).scalar() == 5000

    def test_context_manager_closes_engine(self, tmp_path: Path) -> None:
        with LedgerDB(f"sqlite:///{tmp_path / 'workflow.db'}") as db:
            assert db.engine is not None

        with pytest.raises(RuntimeError, match="not initialized"):
            _ = db.engine

    def test_in_memory_factory(self) -> None:
        db = LedgerDB.in_memory()
        assert "workflow_runs" in inspect(db.engine).get_table_names()
        assert db.journal is None

    def test_create_tables_false_leaves_database_empty(self, tmp_path: Path) -> None:
        db = LedgerDB.from_url(f"sqlite:///{tmp_path / 'workflow.db'}", create_tables=False)
        assert inspect(db.engine).get_table_names() == []


class TestConnectionTransactions:
    def test_connection_commits_on_success(self) -> None:
        db = LedgerDB.in_memory()
        with db.connection() as conn:
            conn.execute(
                text(
                    "INSERT INTO workflow_runs (run_id, tenant_id, state, version, created_at, updated_at) "
                    "VALUES ('r1', 't1', 'created', 1, '2026-01-01', '2026-01-01')"
                )
            )
        with db.connection() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM workflow_runs")).scalar() == 1

    def test_connection_rolls_back_on_error(self) -> None:
        db = LedgerDB.in_memory()
        with pytest.raises(RuntimeError), db.connection() as conn:
            conn.execute(
                text(
                    "INSERT INTO workflow_runs (run_id, tenant_id, state, version, created_at, updated_at) "
                    "VALUES ('r1', 't1', 'created', 1, '2026-01-01', '2026-01-01')"
                )
            )
            raise RuntimeError("boom")
        with db.connection() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM workflow_runs")).scalar() == 0


class TestSchemaConstraints:
    def test_state_outside_vocabulary_is_rejected(self) -> None:
        db = LedgerDB.in_memory()
        with pytest.raises(IntegrityError), db.connection() as conn:
            conn.execute(
                text(
                    "INSERT INTO workflow_runs (run_id, tenant_id, state, version, created_at, updated_at) "
                    "VALUES ('r1', 't1', 'step_3', 1, '2026-01-01', '2026-01-01')"
                )
            )

    def test_transition_requires_existing_run(self) -> None:
        db = LedgerDB.in_memory()
        with pytest.raises(IntegrityError), db.connection() as conn:
            conn.execute(
                text(
                    "INSERT INTO workflow_transitions (transition_id, run_id, tenant_id, sequence, previous_state, "
                    "new_state, reason, actor, transitioned_at) "
                    "VALUES ('x1', 'missing', 't1', 2, 'created', 'icp_pending', 'r', 'a', '2026-01-01')"
                )
            )


class TestSchemaCompatibility:
    def test_outdated_sqlite_schema_is_rejected(self, tmp_path: Path) -> None:
        db_path = tmp_path / "old.db"
        engine = create_engine(f"sqlite:///{db_path}")
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE workflow_runs (run_id VARCHAR(64) PRIMARY KEY, state VARCHAR(64))"))
        engine.dispose()

        with pytest.raises(SchemaCompatibilityError) as exc_info:
            LedgerDB(f"sqlite:///{db_path}")

        message = str(exc_info.value)
        assert "workflow_runs.tenant_id" in message
        assert "Missing tables: workflow_transitions" in message


class TestJournalPath:
    def test_journal_path_derived_from_sqlite_file(self, tmp_path: Path) -> None:
        db = LedgerDB.from_url(f"sqlite:///{tmp_path / 'workflow.db'}", journal=True)
        assert db.journal is not None
        assert db.journal.path == tmp_path / "workflow.journal.jsonl"

    def test_journal_on_memory_database_needs_explicit_path(self) -> None:
        with pytest.raises(ValueError, match="file-backed"):
            LedgerDB.from_url("sqlite:///:memory:", journal=True)

    def test_explicit_journal_path(self, tmp_path: Path) -> None:
        path = tmp_path / "backup" / "transitions.jsonl"
        db = LedgerDB.from_url("sqlite:///:memory:", journal=True, journal_path=str(path))
        assert db.journal is not None
        assert db.journal.path == path
        assert path.parent.is_dir()
