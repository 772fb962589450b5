"""Embedded file resolution helpers for adapters.

Content references stored files through ``@@PLUGINFILE@@/<name>`` markers.
Adapters that want ``embedded_files`` filled in implement
``apply_embedded_file_map`` with ``resolve_embedded_files`` and their own
``FileStore``.
"""

from __future__ import annotations

import re
from typing import Protocol
from urllib.parse import quote, unquote

import structlog
from pydantic import BaseModel

from content.models import ContentRecord, EmbeddedFile
from core.ids import pathname_hash

logger = structlog.get_logger(__name__)

PLUGINFILE_MARKER = "@@PLUGINFILE@@/"

_PLUGINFILE_RE = re.compile(re.escape(PLUGINFILE_MARKER) + r"([^\"'\s<>?#]+)")


class StoredFile(BaseModel):
    """A file as the host file store knows it."""

    filename: str
    pathname: str  # full store path, e.g. /ctxid/component/area/itemid/name

    @property
    def path_hash(self) -> str:
        return pathname_hash(self.pathname)


class FileStore(Protocol):
    def find(self, record: ContentRecord, filename: str) -> StoredFile | None:
        """Look up a file in the area that belongs to the record."""


def find_embedded_filenames(content: str) -> list[str]:
    """Marker file names in order of first appearance, still URL-encoded."""
    seen: dict[str, None] = {}
    for match in _PLUGINFILE_RE.finditer(content):
        seen.setdefault(match.group(1), None)
    return list(seen)


def resolve_embedded_files(record: ContentRecord, file_store: FileStore) -> ContentRecord:
    """Return a copy of the record with ``embedded_files`` replaced.

    The list is rebuilt from the content each time, so applying this twice
    gives the same result as applying it once.
    """
    files: list[EmbeddedFile] = []
    for encoded_name in find_embedded_filenames(record.content):
        stored = file_store.find(record, unquote(encoded_name))
        if stored is None:
            logger.debug(
                "Embedded file not found",
                entity_id=record.entity_id,
                filename=encoded_name,
            )
            continue
        files.append(
            EmbeddedFile(filename=quote(stored.filename, safe=""), path_hash=stored.path_hash)
        )
    return record.model_copy(update={"embedded_files": files})
