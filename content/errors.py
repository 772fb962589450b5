"""Exceptions raised by the content core.

Unresolved adapters and missing capabilities are not errors: the facade
reports them as None/False/"" so batch callers can skip them.
"""

from __future__ import annotations


class ContentSyncError(Exception):
    """Base class for content core failures."""


class MalformedAddress(ContentSyncError, ValueError):
    """An entity address string cannot be decoded."""

    def __init__(self, entity_id: str, reason: str = "not enough parts"):
        super().__init__(f"Entity id is malformed ({reason}) - {entity_id}")
        self.entity_id = entity_id
        self.reason = reason


class QueueWriteFailure(ContentSyncError):
    """A deletion notice could not be durably recorded."""


class InvalidAdapterOutput(ContentSyncError, TypeError):
    """An adapter returned something other than a content record."""

    def __init__(self, adapter_name: str, operation: str, value: object):
        super().__init__(
            f"Adapter {adapter_name} returned {type(value).__name__} from {operation}, "
            "expected ContentRecord"
        )
        self.adapter_name = adapter_name
        self.operation = operation
