"""Run context for course sync runs."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from core.clock import Clock, utc_now
from core.config import AdapterManifest, Settings, snapshot_config
from core.ids import generate_run_id


class RunStatus(str, Enum):
    """Status of a sync run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunMetrics(BaseModel):
    """Counters collected during a run."""

    num_courses: int = 0
    num_adapters: int = 0
    num_items: int = 0
    num_payloads: int = 0
    num_missing: int = 0
    num_failed: int = 0


class StageLog(BaseModel):
    """Timing and outcome of one run stage."""

    stage: str
    started_at: datetime
    completed_at: datetime | None = None
    status: str = "running"
    items_in: int = 0
    items_out: int = 0
    errors: list[str] = Field(default_factory=list)

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()


class RunContext(BaseModel):
    """Context for a sync run - travels through all stages."""

    run_id: str
    started_at: datetime
    status: RunStatus = RunStatus.PENDING
    completed_at: datetime | None = None

    # Configuration snapshot, for reproducing the run
    config: dict[str, Any] = Field(default_factory=dict)

    metrics: RunMetrics = Field(default_factory=RunMetrics)
    stage_logs: list[StageLog] = Field(default_factory=list)

    @classmethod
    def boot(
        cls,
        settings: Settings | None = None,
        manifest: AdapterManifest | None = None,
        run_id: str | None = None,
        clock: Clock = utc_now,
    ) -> RunContext:
        """Boot a new run context in the RUNNING state."""
        config: dict[str, Any] = {}
        if settings is not None:
            config = snapshot_config(settings, manifest or AdapterManifest())
        return cls(
            run_id=run_id or generate_run_id(),
            started_at=clock(),
            status=RunStatus.RUNNING,
            config=config,
        )

    def open_stage(self, stage: str) -> StageLog | None:
        for log in reversed(self.stage_logs):
            if log.stage == stage and log.completed_at is None:
                return log
        return None

    def start_stage(self, stage: str, items_in: int = 0, clock: Clock = utc_now) -> StageLog:
        log = StageLog(stage=stage, started_at=clock(), items_in=items_in)
        self.stage_logs.append(log)
        return log

    def complete_stage(
        self,
        stage: str,
        items_out: int = 0,
        errors: list[str] | None = None,
        status: str = "completed",
        clock: Clock = utc_now,
    ) -> StageLog | None:
        """Close the open stage with this name. None if no such stage is open."""
        log = self.open_stage(stage)
        if log is None:
            return None
        log.completed_at = clock()
        log.items_out = items_out
        log.status = status
        log.errors.extend(errors or [])
        return log

    def complete_run(self, status: RunStatus = RunStatus.COMPLETED, clock: Clock = utc_now) -> None:
        self.status = status
        self.completed_at = clock()

    def summary(self) -> dict[str, Any]:
        """Plain-data view of the run for logs and CLI output."""
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "metrics": self.metrics.model_dump(),
            "stages": {
                log.stage: {
                    "status": log.status,
                    "items": f"{log.items_in} -> {log.items_out}",
                    "errors": len(log.errors),
                    "duration": log.duration_seconds,
                }
                for log in self.stage_logs
            },
        }
