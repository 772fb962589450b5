"""Entity addresses: the stable identity string of a content item.

Format: ``adapter_name:source_table:source_field:row_id[:course_id]``.
External systems store and replay these strings, so the format is fixed.
"""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content.errors import MalformedAddress

DELIMITER = ":"
MIN_PARTS = 4

# Names never contain the delimiter, so every address round-trips.
_NAME_PATTERN = r"^[^:]+$"
# Canonical decimal only, so decode() then encode() gives back the input.
_INT_RE = re.compile(r"0|-?[1-9][0-9]*")


class EntityAddress(BaseModel):
    """Composite identity of one content item."""

    model_config = ConfigDict(frozen=True)

    row_id: int
    adapter_name: str = Field(..., pattern=_NAME_PATTERN)
    source_table: str = Field(..., pattern=_NAME_PATTERN)
    source_field: str = Field(..., pattern=_NAME_PATTERN)
    course_id: int | None = None
    timestamp: datetime | None = None  # deleted-item lookups only, never encoded

    @property
    def identity(self) -> tuple[str, str, str, int]:
        """The part of the address that identifies the item; course_id is context."""
        return (self.adapter_name, self.source_table, self.source_field, self.row_id)

    def encode(self) -> str:
        return encode(self)

    def __str__(self) -> str:
        return encode(self)


def encode(address: EntityAddress) -> str:
    """Join the address fields in their fixed order."""
    parts = [
        address.adapter_name,
        address.source_table,
        address.source_field,
        str(address.row_id),
    ]
    if address.course_id is not None:
        parts.append(str(address.course_id))
    return DELIMITER.join(parts)


def _parse_int(entity_id: str, value: str, label: str) -> int:
    if not _INT_RE.fullmatch(value):
        raise MalformedAddress(entity_id, f"{label} is not an integer")
    return int(value)


def decode(entity_id: str) -> EntityAddress:
    """Split an entity id back into an address.

    Raises:
        MalformedAddress: fewer than four parts, or non-integer ids.
    """
    parts = entity_id.split(DELIMITER)
    if len(parts) < MIN_PARTS:
        raise MalformedAddress(entity_id)

    adapter_name, source_table, source_field, raw_row_id = parts[:MIN_PARTS]
    if not (adapter_name and source_table and source_field):
        raise MalformedAddress(entity_id, "empty name part")

    course_id = None
    if len(parts) > MIN_PARTS and parts[MIN_PARTS] != "":
        course_id = _parse_int(entity_id, parts[MIN_PARTS], "course id")

    return EntityAddress(
        row_id=_parse_int(entity_id, raw_row_id, "row id"),
        adapter_name=adapter_name,
        source_table=source_table,
        source_field=source_field,
        course_id=course_id,
    )
