"""Content facade: the entry point callers use to read, write and track content.

Unresolvable adapters and missing capabilities come back as None/False/""
so batch callers can skip them. Malformed addresses, adapter failures in
single-item operations, and deletion-queue write failures raise.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any

import structlog

from adapters.base import Capability
from adapters.registry import AdapterRegistry
from content.address import EntityAddress, decode
from content.annotations import AnnotationMapsResult, collect_annotation_maps
from content.errors import InvalidAdapterOutput, QueueWriteFailure
from content.models import (
    ContentContext,
    ContentRecord,
    ContextLevel,
    CourseModule,
    DiagnosticEvent,
    SyncPayload,
)
from core.clock import Clock, utc_now
from storage.deletion_queue import DeletionQueue, DeletionRecord

logger = structlog.get_logger(__name__)

DiagnosticSink = Callable[[DiagnosticEvent], None]
CourseModuleResolver = Callable[[int], CourseModule]


def log_diagnostic(event: DiagnosticEvent) -> None:
    """Default diagnostic sink: one warning per event."""
    logger.warning(event.message, **event.log_fields())


def _check_record(adapter_name: str, operation: str, value: Any) -> ContentRecord | None:
    if value is None or isinstance(value, ContentRecord):
        return value
    raise InvalidAdapterOutput(adapter_name, operation, value)


class ContentFacade:
    """Resolve adapters by name and run content operations through them.

    Holds no per-call state. Everything it talks to is passed in: the
    registry, the deletion queue, the clock, the course-module resolver
    used for annotations, and the sink that receives diagnostic events.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        deletion_queue: DeletionQueue | None = None,
        *,
        clock: Clock = utc_now,
        module_resolver: CourseModuleResolver | None = None,
        on_diagnostic: DiagnosticSink = log_diagnostic,
        annotation_max_workers: int = 4,
    ) -> None:
        self.registry = registry
        self.deletion_queue = deletion_queue
        self._clock = clock
        self._module_resolver = module_resolver
        self._on_diagnostic = on_diagnostic
        self._annotation_max_workers = annotation_max_workers

    def _adapter_with(self, adapter_name: str, capability: Capability) -> Any:
        """Instance of the named adapter if it has the capability, else None."""
        if not self.registry.supports(adapter_name, capability):
            return None
        return self.registry.instantiate(adapter_name)

    def _emit(self, event: DiagnosticEvent) -> None:
        self._on_diagnostic(event)

    # --- Reads ---

    def get_course_html_content_items(
        self, adapter_name: str, course_id: int
    ) -> list[EntityAddress] | None:
        adapter = self._adapter_with(adapter_name, Capability.COURSE_ITEMS)
        if adapter is None:
            return None
        return list(adapter.get_course_html_content_items(course_id))

    def get_html_content(
        self,
        row_id: int,
        adapter_name: str,
        table: str,
        field: str,
        course_id: int | None = None,
        include_embedded_files: bool = False,
    ) -> ContentRecord | None:
        """Fetch one content item. None when no adapter can serve it."""
        adapter = self._adapter_with(adapter_name, Capability.HTML_CONTENT)
        if adapter is None:
            return None
        record = _check_record(
            adapter_name,
            "get_html_content",
            adapter.get_html_content(row_id, table, field, course_id),
        )
        if record is not None and include_embedded_files:
            record = self.apply_embedded_file_map(record)
        return record

    def get_html_content_deleted(
        self,
        row_id: int,
        adapter_name: str,
        table: str,
        field: str,
        course_id: int | None = None,
        modified_at: datetime | None = None,
    ) -> ContentRecord | None:
        """Historical copy of a deleted item, used to build its deletion notice."""
        adapter = self._adapter_with(adapter_name, Capability.DELETED_CONTENT)
        if adapter is None:
            return None
        return _check_record(
            adapter_name,
            "get_html_content_deleted",
            adapter.get_html_content_deleted(row_id, table, field, course_id, modified_at),
        )

    def get_all_html_content(
        self,
        row_id: int,
        adapter_name: str,
        include_embedded_files: bool = False,
    ) -> list[ContentRecord] | None:
        """Every item owned by a row. None (not []) when bulk reads are unsupported."""
        adapter = self._adapter_with(adapter_name, Capability.BULK_CONTENT)
        if adapter is None:
            return None
        records: list[ContentRecord] = []
        for value in adapter.get_all_html_content(row_id):
            record = _check_record(adapter_name, "get_all_html_content", value)
            if record is None:
                continue
            if include_embedded_files:
                record = self.apply_embedded_file_map(record)
            records.append(record)
        return records

    def resolve_address(
        self, entity_id: str, include_embedded_files: bool = False
    ) -> ContentRecord | None:
        """Fetch the item an entity id points at.

        Raises:
            MalformedAddress: the entity id cannot be decoded.
        """
        address = decode(entity_id)
        return self.get_html_content(
            address.row_id,
            address.adapter_name,
            address.source_table,
            address.source_field,
            address.course_id,
            include_embedded_files,
        )

    def resolve_deleted_address(self, address: EntityAddress) -> ContentRecord | None:
        """Deleted-item lookup for an address; its timestamp becomes ``modified_at``."""
        return self.get_html_content_deleted(
            address.row_id,
            address.adapter_name,
            address.source_table,
            address.source_field,
            address.course_id,
            address.timestamp,
        )

    def apply_embedded_file_map(self, record: ContentRecord) -> ContentRecord:
        """Let the record's adapter resolve its embedded files, if it can."""
        adapter = self._adapter_with(record.adapter_name, Capability.EMBEDDED_FILES)
        if adapter is None:
            return record
        resolved = _check_record(
            record.adapter_name, "apply_embedded_file_map", adapter.apply_embedded_file_map(record)
        )
        return resolved if resolved is not None else record

    # --- Writes ---

    def replace_html_content(
        self, row_id: int, adapter_name: str, table: str, field: str, new_content: str
    ) -> bool:
        """Write content back through the adapter. True when the source accepted it."""
        adapter = self._adapter_with(adapter_name, Capability.REPLACE_CONTENT)
        if adapter is None:
            return False
        return bool(adapter.replace_html_content(row_id, table, field, new_content))

    # --- Annotations ---

    def get_annotation(self, context: ContentContext) -> str:
        """Annotation for a module-level context; "" for anything else or on failure."""
        if context.level != ContextLevel.MODULE or self._module_resolver is None:
            return ""
        try:
            module = self._module_resolver(context.instance_id)
            adapter = self._adapter_with(module.module_name, Capability.ANNOTATION)
            if adapter is None:
                return ""
            annotation = adapter.get_annotation(module.instance)
            return "" if annotation is None else str(annotation)
        except Exception as exc:
            self._emit(
                DiagnosticEvent(
                    message=str(exc) or type(exc).__name__,
                    context_path=context.path,
                    instance_id=context.instance_id,
                )
            )
            return ""

    def collect_annotation_maps(self, course_id: int) -> AnnotationMapsResult:
        """Annotation maps plus diagnostics; each diagnostic is emitted once here."""
        result = collect_annotation_maps(
            self.registry, course_id, max_workers=self._annotation_max_workers
        )
        for event in result.diagnostics:
            self._emit(event)
        return result

    def get_annotation_maps(self, course_id: int) -> dict[str, Any]:
        return self.collect_annotation_maps(course_id).maps

    # --- Outbound messages ---

    def build_sync_payload(self, record: ContentRecord, event_name: str) -> SyncPayload:
        return SyncPayload.from_record(record, event_name)

    def queue_deletion(
        self, course_id: int, row_id: int, adapter_name: str, table: str, field: str
    ) -> int:
        """Append a deletion notice stamped with the current time.

        Every call adds a new row, repeated notices for one item included.

        Raises:
            QueueWriteFailure: the notice could not be stored.
        """
        if self.deletion_queue is None:
            raise QueueWriteFailure("No deletion queue configured")
        record = DeletionRecord(
            row_id=row_id,
            course_id=course_id,
            adapter_name=adapter_name,
            source_table=table,
            source_field=field,
            deleted_at=self._clock(),
        )
        return self.deletion_queue.append(record)


__all__ = [
    "ContentFacade",
    "CourseModuleResolver",
    "DiagnosticSink",
    "log_diagnostic",
]
