"""Storage layer: the deletion queue."""

from storage.deletion_queue import (
    DeletionQueue,
    DeletionRecord,
    QueuedDeletion,
    SqliteDeletionQueue,
)

__all__ = [
    "DeletionQueue",
    "DeletionRecord",
    "QueuedDeletion",
    "SqliteDeletionQueue",
]
