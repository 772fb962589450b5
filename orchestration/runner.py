"""Course sync runner: discover adapters, walk course content, build sync payloads."""

from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Sequence
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from adapters.registry import AdapterRegistry
from content.facade import ContentFacade
from content.models import SyncPayload
from core import verbose
from core.config import ConfigValidationError, load_config
from core.context import RunContext, RunStatus
from core.log import configure_logging
from storage.deletion_queue import SqliteDeletionQueue

logger = structlog.get_logger(__name__)


class SyncRunResult(BaseModel):
    """Payloads built by a run and the context that tracked it."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    context: RunContext
    payloads: list[SyncPayload] = Field(default_factory=list)


def _end_stage(ctx: RunContext, stage: str, items_out: int, errors: list[str]) -> None:
    log = ctx.complete_stage(stage, items_out=items_out, errors=errors)
    verbose.stage_end(
        stage,
        items_out=items_out,
        errors=len(errors),
        duration=log.duration_seconds if log and log.duration_seconds else 0.0,
    )


def _sync_course(
    facade: ContentFacade,
    ctx: RunContext,
    course_id: int,
    adapters: list[str],
    event_name: str,
    errors: list[str],
) -> list[SyncPayload]:
    """Build payloads for one course. Failing items are recorded and skipped."""
    payloads: list[SyncPayload] = []
    for adapter_name in adapters:
        try:
            addresses = facade.get_course_html_content_items(adapter_name, course_id) or []
        except Exception as e:
            ctx.metrics.num_failed += 1
            errors.append(f"{adapter_name} (course {course_id}): {e}")
            logger.warning(
                "Course content listing failed",
                adapter=adapter_name,
                course_id=course_id,
                error=str(e),
            )
            continue

        verbose.step(f"{adapter_name}: {len(addresses)} items in course {course_id}")
        for address in addresses:
            ctx.metrics.num_items += 1
            try:
                record = facade.get_html_content(
                    address.row_id,
                    address.adapter_name,
                    address.source_table,
                    address.source_field,
                    address.course_id if address.course_id is not None else course_id,
                )
            except Exception as e:
                ctx.metrics.num_failed += 1
                errors.append(f"{address}: {e}")
                logger.warning("Content fetch failed", entity_id=str(address), error=str(e))
                continue

            if record is None:
                ctx.metrics.num_missing += 1
                verbose.detail(f"- {address} (no content)")
                continue

            payloads.append(facade.build_sync_payload(record, event_name))
            verbose.detail(f"+ {record.entity_id} {record.content_hash}")
    return payloads


def run_course_sync(
    facade: ContentFacade,
    course_ids: Sequence[int],
    event_name: str = "read",
    ctx: RunContext | None = None,
) -> SyncRunResult:
    """Build a sync payload for every HTML content item in the given courses.

    Stages:
    1. Discover adapters that provide HTML content
    2. For each course and adapter, list items, fetch each, build payloads
    """
    run_start = time.monotonic()
    ctx = ctx or RunContext.boot()
    ctx.metrics.num_courses = len(course_ids)
    verbose.header(f"Content Sync {ctx.run_id}")

    payloads: list[SyncPayload] = []
    try:
        # Stage 1: Discover
        ctx.start_stage("discover")
        verbose.stage("Discover", "find adapters that provide HTML content")
        adapters = facade.registry.discover_html_capable_adapters()
        for name in adapters:
            verbose.step(f"+ {name}")
        ctx.metrics.num_adapters = len(adapters)
        _end_stage(ctx, "discover", len(adapters), [])

        # Stage 2: Sync
        ctx.start_stage("sync", items_in=len(course_ids))
        verbose.stage("Sync", "fetch content items and build payloads")
        errors: list[str] = []
        for course_id in course_ids:
            payloads.extend(_sync_course(facade, ctx, course_id, adapters, event_name, errors))
        ctx.metrics.num_payloads = len(payloads)
        _end_stage(ctx, "sync", len(payloads), errors)

        ctx.complete_run(RunStatus.COMPLETED)

    except Exception as e:
        for log in ctx.stage_logs:
            if log.completed_at is None:
                ctx.complete_stage(log.stage, errors=[str(e)], status="failed")
        ctx.complete_run(RunStatus.FAILED)
        logger.error("Content sync failed", run_id=ctx.run_id, error=str(e))
        raise

    total = time.monotonic() - run_start
    verbose.header(
        f"Done: {ctx.metrics.num_payloads} payloads, "
        f"{ctx.metrics.num_failed} failures ({total:.2f}s)"
    )
    logger.info("Content sync complete", **ctx.summary()["metrics"], run_id=ctx.run_id)

    return SyncRunResult(context=ctx, payloads=payloads)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: print sync payloads for the given courses as JSON lines."""
    parser = argparse.ArgumentParser(description="Build content sync payloads for courses.")
    parser.add_argument("course_ids", nargs="+", type=int, help="Course ids to sync")
    parser.add_argument("--event-name", default="read", help="Event name for the payloads")
    parser.add_argument("--manifest", type=Path, default=None, help="Adapter manifest YAML")
    args = parser.parse_args(argv)

    try:
        settings, manifest = load_config(manifest_path=args.manifest)
    except ConfigValidationError as e:
        configure_logging()
        logger.error("Configuration error", error=str(e), errors=e.errors)
        return 1

    configure_logging(settings.log_level, settings.log_json)
    verbose.configure(settings.verbose)

    registry = AdapterRegistry.from_manifest(manifest)
    facade = ContentFacade(
        registry,
        SqliteDeletionQueue(settings.deletion_queue_path),
        annotation_max_workers=settings.annotation_max_workers,
    )
    ctx = RunContext.boot(settings, manifest)
    result = run_course_sync(facade, args.course_ids, event_name=args.event_name, ctx=ctx)

    for payload in result.payloads:
        print(payload.model_dump_json())
    return 0 if result.context.metrics.num_failed == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
