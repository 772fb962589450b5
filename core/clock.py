"""Clock abstraction and timestamp formatting."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Normalize a datetime to UTC. Naive values are taken to be UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def iso_8601(moment: datetime) -> str:
    """Render a moment as an ISO-8601 UTC string, e.g. 2018-05-01T10:00:00+00:00."""
    return as_utc(moment).replace(microsecond=0).isoformat()


def unix_timestamp(moment: datetime) -> int:
    """Whole seconds since the epoch."""
    return int(as_utc(moment).timestamp())
