from __future__ import annotations

import json
from pathlib import Path

import pytest

from adapters.registry import AdapterRegistry
from content.facade import ContentFacade
from core.context import RunContext, RunStatus
from fake_adapters import FailingFetchAdapter, ForumAdapter, MemorySource
from orchestration.runner import main, run_course_sync


def test_run_builds_a_payload_per_item(facade: ContentFacade) -> None:
    result = run_course_sync(facade, [7], event_name="updated")

    assert [payload.entity_id for payload in result.payloads] == [
        "course:course:summary:7:7",
        "forum:forum_posts:message:42:7",
    ]
    assert {payload.event_name for payload in result.payloads} == {"updated"}
    assert {payload.context_id for payload in result.payloads} == {"7"}
    assert result.context.status == RunStatus.COMPLETED
    assert result.context.metrics.num_adapters == 2
    assert result.context.metrics.num_payloads == 2
    assert [log.stage for log in result.context.stage_logs] == ["discover", "sync"]


def test_courses_without_content_produce_nothing(facade: ContentFacade) -> None:
    result = run_course_sync(facade, [99])

    assert result.payloads == []
    assert result.context.metrics.num_items == 0
    assert result.context.metrics.num_courses == 1


def test_failing_fetch_is_recorded_and_skipped(source: MemorySource) -> None:
    registry = AdapterRegistry(source=source)
    registry.register("forum", ForumAdapter)
    registry.register("glossary", FailingFetchAdapter)
    facade = ContentFacade(registry)

    result = run_course_sync(facade, [7])

    assert [payload.entity_id for payload in result.payloads] == ["forum:forum_posts:message:42:7"]
    assert result.context.metrics.num_failed == 1
    assert result.context.status == RunStatus.COMPLETED
    sync_log = result.context.stage_logs[-1]
    assert any("database went away" in error for error in sync_log.errors)


def test_unexpected_failure_marks_the_run_failed(facade: ContentFacade, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_discovery() -> list[str]:
        raise RuntimeError("registry unavailable")

    monkeypatch.setattr(facade.registry, "discover_html_capable_adapters", broken_discovery)
    ctx = RunContext.boot()

    with pytest.raises(RuntimeError):
        run_course_sync(facade, [7], ctx=ctx)

    assert ctx.status == RunStatus.FAILED
    discover = ctx.stage_logs[0]
    assert discover.status == "failed"
    assert discover.errors == ["registry unavailable"]
    assert discover.duration_seconds is not None


@pytest.fixture
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONTENT_SYNC_DATABASE_URL", f"sqlite:///{tmp_path}/queue.db")
    return tmp_path


def test_main_with_empty_manifest_succeeds(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = main(["7", "--manifest", str(cli_env / "absent.yaml")])

    assert exit_code == 0
    assert capsys.readouterr().out == ""
    assert (cli_env / "queue.db").exists()


def test_main_reports_item_failures(cli_env: Path, capsys: pytest.CaptureFixture[str]) -> None:
    manifest = cli_env / "adapters.yaml"
    manifest.write_text(
        "adapters:\n"
        "  - name: glossary\n"
        "    support_type: mod\n"
        "    factory: fake_adapters:FailingFetchAdapter\n",
        encoding="utf-8",
    )

    exit_code = main(["3", "--manifest", str(manifest)])

    assert exit_code == 2
    assert capsys.readouterr().out == ""


def test_main_rejects_invalid_manifest(cli_env: Path) -> None:
    manifest = cli_env / "adapters.yaml"
    manifest.write_text("adapters:\n  - name: Nope!\n    factory: x:Y\n", encoding="utf-8")

    assert main(["3", "--manifest", str(manifest)]) == 1


def test_payloads_are_printed_as_json_lines(facade: ContentFacade) -> None:
    result = run_course_sync(facade, [7])

    lines = [payload.model_dump_json() for payload in result.payloads]

    assert json.loads(lines[0]) == {
        "entity_id": "course:course:summary:7:7",
        "context_id": "7",
        "event_name": "read",
        "event_time": "2018-05-01T10:00:00+00:00",
        "content_hash": result.payloads[0].content_hash,
    }

