"""JSONL journal of committed transitions for emergency backups."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import TYPE_CHECKING, TypedDict

from sqlalchemy import event
from sqlalchemy.engine import Connection, Engine

if TYPE_CHECKING:
    from contentflow.contracts.audit import TransitionRecord

logger = logging.getLogger(__name__)

_BUFFER_KEY = "contentflow_journal_buffer"


class JournalRecord(TypedDict):
    """One committed transition as written to the journal."""

    transition_id: str
    run_id: str
    tenant_id: str
    sequence: int
    previous_state: str
    new_state: str
    reason: str
    actor: str
    transitioned_at: str


class TransitionJournal:
    """Append-only JSONL journal of committed transitions.

    The executor stages a record on the connection inside its transaction;
    records are written only after the transaction commits and discarded on
    rollback. This is a backup stream, not the canonical audit record - the
    workflow_transitions table is.
    """

    # After this many consecutive failures, disable until a periodic retry succeeds
    _MAX_CONSECUTIVE_FAILURES = 5

    def __init__(self, path: str, *, fail_on_error: bool) -> None:
        self._path = Path(path)
        self._fail_on_error = fail_on_error
        self._lock = Lock()
        self._disabled = False
        self._consecutive_failures = 0
        self._total_dropped = 0

        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def attach(self, engine: Engine) -> None:
        """Attach commit/rollback listeners to a SQLAlchemy engine."""
        event.listen(engine, "commit", self._after_commit)
        event.listen(engine, "rollback", self._after_rollback)

    def stage(self, conn: Connection, record: TransitionRecord) -> None:
        """Buffer a transition on the connection until its transaction ends."""
        if self._disabled:
            return
        entry: JournalRecord = {
            "transition_id": record.transition_id,
            "run_id": record.run_id,
            "tenant_id": record.tenant_id,
            "sequence": record.sequence,
            "previous_state": record.previous_state.value,
            "new_state": record.new_state.value,
            "reason": record.reason,
            "actor": record.actor,
            "transitioned_at": record.transitioned_at.isoformat(),
        }
        conn.info.setdefault(_BUFFER_KEY, []).append(entry)

    def _after_commit(self, conn: Connection) -> None:
        buffer = conn.info.get(_BUFFER_KEY)
        if not buffer:
            return
        # Clear before writing: a failed write must not replay into the next transaction
        records = list(buffer)
        buffer.clear()
        self._append_records(records)

    def _after_rollback(self, conn: Connection) -> None:
        if _BUFFER_KEY in conn.info:
            conn.info[_BUFFER_KEY].clear()

    def _append_records(self, records: list[JournalRecord]) -> None:
        payload = "\n".join(json.dumps(record, sort_keys=True) for record in records) + "\n"
        with self._lock:
            if self._disabled:
                # Periodically attempt recovery instead of staying silent forever
                self._total_dropped += len(records)
                if self._total_dropped % 100 == 0:
                    logger.warning(
                        "Transition journal still disabled after %d consecutive failures, %d records dropped",
                        self._consecutive_failures,
                        self._total_dropped,
                    )
                    self._disabled = False
                else:
                    return

            try:
                with self._path.open("a", encoding="utf-8") as handle:
                    handle.write(payload)
                if self._consecutive_failures > 0:
                    logger.info(
                        "Transition journal recovered after %d consecutive failures (%d records were dropped)",
                        self._consecutive_failures,
                        self._total_dropped,
                    )
                self._consecutive_failures = 0
            except OSError as exc:
                self._consecutive_failures += 1
                self._total_dropped += len(records)
                logger.error(
                    "Transition journal write failed (attempt %d/%d): %s",
                    self._consecutive_failures,
                    self._MAX_CONSECUTIVE_FAILURES,
                    exc,
                )
                if self._fail_on_error:
                    raise
                if self._consecutive_failures >= self._MAX_CONSECUTIVE_FAILURES:
                    logger.error(
                        "Transition journal disabled after %d consecutive failures. "
                        "Will retry every 100 dropped records. %d records dropped so far.",
                        self._consecutive_failures,
                        self._total_dropped,
                    )
                    self._disabled = True

    def read_records(self) -> list[JournalRecord]:
        """Read back every journaled record (for recovery tooling and tests)."""
        if not self._path.exists():
            return []
        with self._path.open(encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
