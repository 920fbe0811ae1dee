"""Horodatage / Timestamps."""

import time
from datetime import datetime, timezone
from pathlib import Path


def now_iso() -> str:
    """Horodatage ISO 8601 UTC a la milliseconde / ISO 8601 UTC timestamp, millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


def epoch_ms() -> int:
    return time.time_ns() // 1_000_000


def unique_timestamped_path(directory: Path, prefix: str, suffix: str) -> Path:
    """Chemin <prefix><ms><suffix> libre dans directory / Free <prefix><ms><suffix> path in directory.

    En cas de collision le timestamp est incremente / On collision the timestamp is bumped.
    """
    stamp = epoch_ms()
    path = directory / f"{prefix}{stamp}{suffix}"
    while path.exists():
        stamp += 1
        path = directory / f"{prefix}{stamp}{suffix}"
    return path
