"""ID generation and hashing utilities."""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
import uuid


def generate_run_id() -> str:
    """Generate a unique run ID.

    Format: YYYYMMDD_HHMMSS_<short_uuid>
    """
    now = datetime.now(timezone.utc)
    short_uuid = uuid.uuid4().hex[:8]
    return f"{now.strftime('%Y%m%d_%H%M%S')}_{short_uuid}"


def content_hash(content: str | bytes) -> str:
    """Generate the SHA-1 hex digest of content.

    The external analysis service keys change detection on this exact
    digest, so the algorithm and encoding must not change.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    return hashlib.sha1(content).hexdigest()


def pathname_hash(pathname: str) -> str:
    """Hash a stored file's full path name the way the host file store does."""
    return hashlib.sha1(pathname.encode("utf-8")).hexdigest()
