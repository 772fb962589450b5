"""Adapter contract and the optional capability interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from content.address import EntityAddress
from content.models import ContentRecord


class SupportType(StrEnum):
    """Where an adapter's subsystem comes from. Non-core names are prefixed."""

    CORE = "core"
    MOD = "mod"
    BLOCK = "block"
    FORMAT = "format"
    LOCAL = "local"


class Capability(StrEnum):
    """Named operations an adapter may support, keyed to the method providing them."""

    COURSE_ITEMS = "get_course_html_content_items"
    HTML_CONTENT = "get_html_content"
    DELETED_CONTENT = "get_html_content_deleted"
    BULK_CONTENT = "get_all_html_content"
    REPLACE_CONTENT = "replace_html_content"
    EMBEDDED_FILES = "apply_embedded_file_map"
    ANNOTATION = "get_annotation"
    ANNOTATION_MAPS = "get_annotation_maps"


class ContentAdapter(ABC):
    """Base class for a content source.

    Subclasses mix in whichever capability protocols below they implement.
    ``source`` is the storage/query collaborator the adapter reads from.
    """

    name: str = "base"
    support_type: str = SupportType.CORE

    def __init__(self, source: Any = None):
        self.source = source

    @abstractmethod
    def is_installed(self) -> bool:
        """Whether the backing subsystem is present and enabled."""


@runtime_checkable
class CourseItemsSource(Protocol):
    def get_course_html_content_items(self, course_id: int) -> list[EntityAddress]:
        """Addresses of every HTML content item in a course."""


@runtime_checkable
class HtmlContentSource(Protocol):
    def get_html_content(
        self, row_id: int, table: str, field: str, course_id: int | None = None
    ) -> ContentRecord:
        """Fetch one live content item."""


@runtime_checkable
class DeletedContentSource(Protocol):
    def get_html_content_deleted(
        self,
        row_id: int,
        table: str,
        field: str,
        course_id: int | None = None,
        modified_at: datetime | None = None,
    ) -> ContentRecord:
        """Rebuild a deleted item from what is left of it, for the deletion notice."""


@runtime_checkable
class BulkContentSource(Protocol):
    def get_all_html_content(self, row_id: int) -> list[ContentRecord]:
        """Every content item belonging to one owning row."""


@runtime_checkable
class ReplaceableContentSource(Protocol):
    def replace_html_content(self, row_id: int, table: str, field: str, content: str) -> bool:
        """Write new content back. Returns whether the source accepted it."""


@runtime_checkable
class EmbeddedFileResolver(Protocol):
    def apply_embedded_file_map(self, record: ContentRecord) -> ContentRecord:
        """Return the record with ``embedded_files`` resolved."""


@runtime_checkable
class AnnotationSource(Protocol):
    def get_annotation(self, instance_id: int) -> str:
        """Annotation string for one module instance."""


@runtime_checkable
class AnnotationMapSource(Protocol):
    def get_annotation_maps(self, course_id: int) -> dict[str, Any]:
        """Adapter-specific annotation maps for a course."""


CAPABILITY_PROTOCOLS: dict[Capability, type] = {
    Capability.COURSE_ITEMS: CourseItemsSource,
    Capability.HTML_CONTENT: HtmlContentSource,
    Capability.DELETED_CONTENT: DeletedContentSource,
    Capability.BULK_CONTENT: BulkContentSource,
    Capability.REPLACE_CONTENT: ReplaceableContentSource,
    Capability.EMBEDDED_FILES: EmbeddedFileResolver,
    Capability.ANNOTATION: AnnotationSource,
    Capability.ANNOTATION_MAPS: AnnotationMapSource,
}


def capabilities_of(adapter_cls: type) -> frozenset[Capability]:
    """Capabilities a class provides: one per protocol it structurally satisfies."""
    return frozenset(
        capability
        for capability, protocol in CAPABILITY_PROTOCOLS.items()
        if issubclass(adapter_cls, protocol)
    )
