"""Core infrastructure: config, run context, logging, clock and hashing."""

from core import verbose
from core.clock import Clock, iso_8601, utc_now
from core.config import (
    AdapterEntry,
    AdapterManifest,
    ConfigValidationError,
    Settings,
    load_config,
)
from core.context import RunContext, RunStatus
from core.ids import content_hash, generate_run_id, pathname_hash
from core.log import configure_logging

__all__ = [
    "AdapterEntry",
    "AdapterManifest",
    "Clock",
    "ConfigValidationError",
    "Settings",
    "load_config",
    "RunContext",
    "RunStatus",
    "configure_logging",
    "content_hash",
    "generate_run_id",
    "iso_8601",
    "pathname_hash",
    "utc_now",
    "verbose",
]
