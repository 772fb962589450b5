"""Human-readable progress output for sync runs.

Module-level singleton. Call configure() once at boot, then use
header/stage/step/detail from anywhere. Output goes to stderr so stdout
stays free for payloads.

Levels:
    0 (OFF)   - silent (default)
    1 (INFO)  - header, stage, stage_end
    2 (DEBUG) - adds step
    3 (TRACE) - adds detail
"""

from __future__ import annotations

import sys
from enum import IntEnum

_level: int = 0


class Level(IntEnum):
    """Verbosity levels."""

    OFF = 0
    INFO = 1
    DEBUG = 2
    TRACE = 3


def configure(level: int) -> None:
    """Set verbosity level."""
    global _level
    _level = level


def get_level() -> int:
    return _level


def _emit(text: str, minimum: Level) -> None:
    if _level >= minimum:
        print(text, file=sys.stderr)


def header(text: str) -> None:
    """Run-level header."""
    _emit(f"\n═══ {text} ═══\n", Level.INFO)


def stage(name: str, description: str) -> None:
    _emit(f"── {name}: {description} ──", Level.INFO)


def stage_end(name: str, items_out: int, errors: int, duration: float) -> None:
    _emit(f"── {name} done ({items_out} out, {errors} errors, {duration:.2f}s) ──\n", Level.INFO)


def step(text: str) -> None:
    """Indented line within a stage."""
    _emit(f"  {text}", Level.DEBUG)


def detail(text: str) -> None:
    _emit(f"    {text}", Level.TRACE)
