"""Annotation-map aggregation across adapters with per-adapter isolation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any

import structlog
from pydantic import BaseModel, Field

from adapters.base import AnnotationMapSource, Capability
from adapters.registry import AdapterRegistry
from content.models import DiagnosticEvent

logger = structlog.get_logger(__name__)


class AdapterOutcome(BaseModel):
    """Result of calling one adapter: a value or the error it raised."""

    adapter_name: str
    value: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AnnotationMapsResult(BaseModel):
    """Successful maps keyed by adapter name, plus one diagnostic per failure."""

    maps: dict[str, Any] = Field(default_factory=dict)
    diagnostics: list[DiagnosticEvent] = Field(default_factory=list)


def _fetch_annotation_map(registry: AdapterRegistry, name: str, course_id: int) -> AdapterOutcome:
    try:
        adapter = registry.instantiate(name)
        if not isinstance(adapter, AnnotationMapSource):
            return AdapterOutcome(adapter_name=name, error="adapter has no annotation maps")
        return AdapterOutcome(adapter_name=name, value=adapter.get_annotation_maps(course_id))
    except Exception as exc:
        return AdapterOutcome(adapter_name=name, error=str(exc) or type(exc).__name__)


def fold_outcomes(outcomes: list[AdapterOutcome], course_id: int) -> AnnotationMapsResult:
    """Successes go into the map, failures into diagnostics. Order is kept."""
    result = AnnotationMapsResult()
    for outcome in outcomes:
        if outcome.ok:
            result.maps[outcome.adapter_name] = outcome.value
        else:
            result.diagnostics.append(
                DiagnosticEvent(
                    message=outcome.error or "",
                    adapter_name=outcome.adapter_name,
                    course_id=course_id,
                )
            )
    return result


def collect_annotation_maps(
    registry: AdapterRegistry,
    course_id: int,
    max_workers: int = 4,
) -> AnnotationMapsResult:
    """Call ``get_annotation_maps`` on every HTML-capable adapter that has it.

    Each adapter runs in its own worker, so a slow or failing adapter only
    delays or drops its own entry.
    """
    names = [
        name
        for name in registry.discover_html_capable_adapters()
        if registry.supports(name, Capability.ANNOTATION_MAPS)
    ]
    if not names:
        return AnnotationMapsResult()

    workers = max(1, min(max_workers, len(names)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="annotation-maps") as executor:
        futures = [
            executor.submit(_fetch_annotation_map, registry, name, course_id) for name in names
        ]
        outcomes = [future.result() for future in futures]

    result = fold_outcomes(outcomes, course_id)
    logger.debug(
        "Annotation maps collected",
        course_id=course_id,
        adapters=len(names),
        failed=len(result.diagnostics),
    )
    return result
