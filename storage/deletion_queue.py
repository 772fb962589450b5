"""Deletion queue: append-only log of removed content awaiting reconciliation."""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from contextlib import closing
from datetime import datetime
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict

from content.errors import QueueWriteFailure
from core.clock import unix_timestamp

logger = structlog.get_logger(__name__)

BUSY_TIMEOUT_MS = 5000

_SCHEMA = """
CREATE TABLE IF NOT EXISTS deleted_content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    row_id INTEGER NOT NULL,
    course_id INTEGER NOT NULL,
    adapter_name TEXT NOT NULL,
    source_table TEXT NOT NULL,
    source_field TEXT NOT NULL,
    deleted_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_deleted_content_course
ON deleted_content(course_id, id);
"""


class DeletionRecord(BaseModel):
    """A deletion notice. Never mutated once created."""

    model_config = ConfigDict(frozen=True)

    row_id: int
    course_id: int
    adapter_name: str
    source_table: str
    source_field: str
    deleted_at: datetime


class QueuedDeletion(DeletionRecord):
    """A deletion notice as stored, with its queue row id."""

    id: int


class DeletionQueue(ABC):
    """Abstract base for deletion queue storage.

    Rows are only ever appended; this interface has no update or delete.
    """

    @abstractmethod
    def append(self, record: DeletionRecord) -> int:
        """Durably append a record and return its new queue row id.

        Raises:
            QueueWriteFailure: the record could not be stored.
        """

    @abstractmethod
    def list_entries(self, after_id: int = 0, limit: int = 100) -> list[QueuedDeletion]:
        """Stored records with ids greater than ``after_id``, oldest first."""


class SqliteDeletionQueue(DeletionQueue):
    """SQLite-backed deletion queue.

    Opens one connection per operation, so any number of threads or
    processes can append at once; SQLite serializes the writes.
    """

    def __init__(self, db_path: str | Path, timeout: float = 30.0) -> None:
        self.db_path = Path(db_path)
        self._timeout = timeout
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self._connect()) as connection, connection:
                connection.execute("PRAGMA journal_mode=WAL;")
                connection.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise QueueWriteFailure(f"Cannot initialize deletion queue at {self.db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(str(self.db_path), timeout=self._timeout)
        connection.row_factory = sqlite3.Row
        connection.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS};")
        return connection

    def append(self, record: DeletionRecord) -> int:
        try:
            with closing(self._connect()) as connection, connection:
                cursor = connection.execute(
                    """
                    INSERT INTO deleted_content (
                        row_id, course_id, adapter_name, source_table, source_field, deleted_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.row_id,
                        record.course_id,
                        record.adapter_name,
                        record.source_table,
                        record.source_field,
                        unix_timestamp(record.deleted_at),
                    ),
                )
                queue_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise QueueWriteFailure(f"Failed to queue deletion: {exc}") from exc

        if queue_id is None:
            raise QueueWriteFailure("Failed to queue deletion: no row id returned")
        logger.debug(
            "Deletion queued",
            queue_id=queue_id,
            adapter=record.adapter_name,
            row_id=record.row_id,
            course_id=record.course_id,
        )
        return int(queue_id)

    def list_entries(self, after_id: int = 0, limit: int = 100) -> list[QueuedDeletion]:
        if limit <= 0:
            raise ValueError("limit must be positive")

        with closing(self._connect()) as connection:
            rows = connection.execute(
                """
                SELECT id, row_id, course_id, adapter_name, source_table, source_field, deleted_at
                FROM deleted_content
                WHERE id > ?
                ORDER BY id ASC
                LIMIT ?
                """,
                (after_id, limit),
            ).fetchall()
        return [QueuedDeletion(**dict(row)) for row in rows]
