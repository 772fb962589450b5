from __future__ import annotations

import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path

import pytest

from adapters.registry import AdapterRegistry
from content.errors import QueueWriteFailure
from content.facade import ContentFacade
from storage.deletion_queue import DeletionQueue, DeletionRecord, QueuedDeletion, SqliteDeletionQueue

from fake_adapters import NOW


def test_queue_deletion_appends_a_row(facade: ContentFacade, deletion_queue: SqliteDeletionQueue) -> None:
    queue_id = facade.queue_deletion(7, 42, "forum", "forum_posts", "message")

    entries = deletion_queue.list_entries()

    assert entries == [
        QueuedDeletion(
            id=queue_id,
            row_id=42,
            course_id=7,
            adapter_name="forum",
            source_table="forum_posts",
            source_field="message",
            deleted_at=NOW,
        )
    ]


def test_repeated_deletions_are_not_deduplicated(
    facade: ContentFacade, deletion_queue: SqliteDeletionQueue
) -> None:
    first = facade.queue_deletion(7, 42, "forum", "forum_posts", "message")
    second = facade.queue_deletion(7, 42, "forum", "forum_posts", "message")

    entries = deletion_queue.list_entries()

    assert first != second
    assert [entry.id for entry in entries] == [first, second]
    assert all(entry.deleted_at == NOW for entry in entries)


def test_deleted_at_comes_from_the_clock(tmp_path: Path) -> None:
    ticks = iter(
        [
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 1, 2, tzinfo=timezone.utc),
        ]
    )
    queue = SqliteDeletionQueue(tmp_path / "queue.db")
    facade = ContentFacade(AdapterRegistry(), queue, clock=lambda: next(ticks))

    facade.queue_deletion(1, 2, "course", "course", "summary")
    facade.queue_deletion(1, 2, "course", "course", "summary")

    assert [entry.deleted_at.day for entry in queue.list_entries()] == [1, 2]


def test_list_entries_pages_by_id(deletion_queue: SqliteDeletionQueue) -> None:
    ids = [
        deletion_queue.append(
            DeletionRecord(
                row_id=row_id,
                course_id=3,
                adapter_name="page",
                source_table="page",
                source_field="content",
                deleted_at=NOW,
            )
        )
        for row_id in range(5)
    ]

    page = deletion_queue.list_entries(after_id=ids[1], limit=2)

    assert [entry.row_id for entry in page] == [2, 3]
    with pytest.raises(ValueError):
        deletion_queue.list_entries(limit=0)


def test_queue_survives_reopening(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "queue.db"
    record = DeletionRecord(
        row_id=1, course_id=1, adapter_name="course", source_table="course", source_field="summary", deleted_at=NOW
    )
    SqliteDeletionQueue(db_path).append(record)

    assert len(SqliteDeletionQueue(db_path).list_entries()) == 1


def test_concurrent_appends_each_get_a_row(deletion_queue: SqliteDeletionQueue) -> None:
    record = DeletionRecord(
        row_id=9, course_id=1, adapter_name="course", source_table="course", source_field="summary", deleted_at=NOW
    )
    ids: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(10):
            queue_id = deletion_queue.append(record)
            with lock:
                ids.append(queue_id)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(set(ids)) == 40
    assert len(deletion_queue.list_entries(limit=100)) == 40


def test_write_failures_raise_queue_write_failure(tmp_path: Path) -> None:
    db_path = tmp_path / "queue.db"
    queue = SqliteDeletionQueue(db_path)
    with sqlite3.connect(db_path) as connection:
        connection.execute("DROP TABLE deleted_content")
    connection.close()

    facade = ContentFacade(AdapterRegistry(), queue)

    with pytest.raises(QueueWriteFailure):
        facade.queue_deletion(1, 2, "course", "course", "summary")


def test_queue_deletion_without_a_queue_fails_loudly() -> None:
    facade = ContentFacade(AdapterRegistry())

    with pytest.raises(QueueWriteFailure):
        facade.queue_deletion(1, 2, "course", "course", "summary")


def test_deletion_queue_is_append_only() -> None:
    public = {name for name in vars(DeletionQueue) if not name.startswith("_")}

    assert public == {"append", "list_entries"}
