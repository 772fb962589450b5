from __future__ import annotations

from pathlib import Path

import pytest

from adapters.registry import AdapterRegistry
from content.facade import ContentFacade
from content.models import DiagnosticEvent
from fake_adapters import NOW, CourseAdapter, ForumAdapter, MemorySource, make_record
from storage.deletion_queue import SqliteDeletionQueue


@pytest.fixture
def source() -> MemorySource:
    source = MemorySource()
    source.add(make_record(7, content="<p>Course summary</p>", course_id=7, title="Course 7"))
    source.add(
        make_record(
            42,
            adapter_name="forum",
            table="forum_posts",
            field="message",
            content='<p>Post <img src="@@PLUGINFILE@@/test%20image.png" alt="x"/></p>',
            title="My post title",
        )
    )
    source.add_file("test image.png", "/12/mod_forum/post/42/test image.png")
    return source


@pytest.fixture
def registry(source: MemorySource) -> AdapterRegistry:
    registry = AdapterRegistry(source=source)
    registry.register("course", CourseAdapter)
    registry.register("forum", ForumAdapter)
    return registry


@pytest.fixture
def diagnostics() -> list[DiagnosticEvent]:
    return []


@pytest.fixture
def deletion_queue(tmp_path: Path) -> SqliteDeletionQueue:
    return SqliteDeletionQueue(tmp_path / "content_sync.db")


@pytest.fixture
def facade(
    registry: AdapterRegistry,
    deletion_queue: SqliteDeletionQueue,
    diagnostics: list[DiagnosticEvent],
) -> ContentFacade:
    return ContentFacade(
        registry,
        deletion_queue,
        clock=lambda: NOW,
        on_diagnostic=diagnostics.append,
    )
