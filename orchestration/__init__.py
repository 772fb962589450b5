"""Run orchestration: course sync."""

from orchestration.runner import SyncRunResult, main, run_course_sync

__all__ = ["SyncRunResult", "main", "run_course_sync"]
