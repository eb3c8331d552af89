"""Hour-bucket arithmetic shared by ingestion, aggregation and reads."""

import time

HOUR_SECONDS = 3600
WINDOW_HOURS = 48


def hour_bucket(timestamp: int) -> int:
    """floor(unix_seconds / 3600)."""
    return timestamp // HOUR_SECONDS


def current_hour(now: float | None = None) -> int:
    if now is None:
        now = time.time()
    return int(now) // HOUR_SECONDS
