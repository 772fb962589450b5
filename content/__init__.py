"""Content model: entity addresses, content records and outbound messages.

The facade lives in ``content.facade``; it is not re-exported here because
it depends on the adapters package, which itself depends on this one.
"""

from content.address import EntityAddress, decode, encode
from content.errors import (
    ContentSyncError,
    InvalidAdapterOutput,
    MalformedAddress,
    QueueWriteFailure,
)
from content.models import (
    ContentContext,
    ContentFormat,
    ContentRecord,
    ContextLevel,
    CourseModule,
    DiagnosticEvent,
    EmbeddedFile,
    SyncPayload,
)

__all__ = [
    "ContentContext",
    "ContentFormat",
    "ContentRecord",
    "ContentSyncError",
    "ContextLevel",
    "CourseModule",
    "DiagnosticEvent",
    "EmbeddedFile",
    "EntityAddress",
    "InvalidAdapterOutput",
    "MalformedAddress",
    "QueueWriteFailure",
    "SyncPayload",
    "decode",
    "encode",
]
