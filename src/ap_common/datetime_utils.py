"""UTC datetime utilities."""

import math
from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def hours_from(start: datetime, hours: int) -> datetime:
    return start + timedelta(hours=hours)


def seconds_until(deadline: datetime, now: datetime) -> int:
    """Whole seconds left before ``deadline`` (rounded up, never negative)."""
    remaining = (deadline - now).total_seconds()
    if remaining <= 0:
        return 0
    return math.ceil(remaining)
