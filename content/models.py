"""Pydantic models for content records and the messages built from them."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from content.address import EntityAddress, encode
from core.clock import iso_8601, utc_now
from core.ids import content_hash as hash_content


class ContentFormat(IntEnum):
    """Text format codes used by the host platform."""

    MOODLE = 0
    HTML = 1
    PLAIN = 2
    MARKDOWN = 4


class EmbeddedFile(BaseModel):
    """A stored file referenced from inside a content item."""

    model_config = ConfigDict(frozen=True)

    filename: str  # URL-encoded, as it appears in the content
    path_hash: str


class ContentRecord(BaseModel):
    """Canonical value object for one content item.

    Built fresh on every adapter read. ``content_hash`` is derived from
    ``content`` and therefore always current.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Identity
    row_id: int
    adapter_name: str
    source_table: str
    source_field: str
    course_id: int | None = None

    # Content
    modified_at: datetime
    format: ContentFormat = ContentFormat.HTML
    content: str = ""
    title: str = ""

    # Filled by the optional embedded-file pass
    embedded_files: list[EmbeddedFile] = Field(default_factory=list)

    # Link back to the source item; not part of equality
    content_url: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def content_hash(self) -> str:
        return hash_content(self.content)

    @property
    def address(self) -> EntityAddress:
        return EntityAddress(
            row_id=self.row_id,
            adapter_name=self.adapter_name,
            source_table=self.source_table,
            source_field=self.source_field,
            course_id=self.course_id,
        )

    @property
    def entity_id(self) -> str:
        return encode(self.address)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentRecord):
            return NotImplemented
        return self.model_dump(exclude={"content_url"}) == other.model_dump(
            exclude={"content_url"}
        )


class SyncPayload(BaseModel):
    """Message sent to the analysis service when content is created, updated, read.

    Field names and types are a wire contract; consumers key on them.
    """

    entity_id: str
    context_id: str
    event_name: str
    event_time: str
    content_hash: str

    @classmethod
    def from_record(cls, record: ContentRecord, event_name: str) -> SyncPayload:
        return cls(
            entity_id=record.entity_id,
            context_id="" if record.course_id is None else str(record.course_id),
            event_name=event_name,
            event_time=iso_8601(record.modified_at),
            content_hash=record.content_hash,
        )


class DiagnosticEvent(BaseModel):
    """A failure swallowed by a batch or lookup operation, reported for monitoring."""

    message: str
    adapter_name: str | None = None
    course_id: int | None = None
    context_path: str | None = None
    instance_id: int | None = None
    occurred_at: datetime = Field(default_factory=utc_now)

    def render(self) -> str:
        lines = [self.message]
        if self.adapter_name is not None:
            lines.append(f"Component: {self.adapter_name}")
        if self.course_id is not None:
            lines.append(f"Course ID: {self.course_id}")
        if self.context_path is not None:
            lines.append(f"Context: {self.context_path}")
        if self.instance_id is not None:
            lines.append(f"Instance ID: {self.instance_id}")
        return "\n".join(lines)

    def log_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"message", "occurred_at"}, exclude_none=True)


class ContextLevel(IntEnum):
    """Host platform context levels."""

    SYSTEM = 10
    USER = 30
    COURSECAT = 40
    COURSE = 50
    MODULE = 70
    BLOCK = 80


class ContentContext(BaseModel):
    """The host context a request is made in."""

    level: ContextLevel
    instance_id: int
    path: str = ""


class CourseModule(BaseModel):
    """A module placed in a course: what a module-level context points at."""

    id: int
    course_id: int
    module_name: str  # e.g. "forum", "page"
    instance: int  # row id in the module's own table
