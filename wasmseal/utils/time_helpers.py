"""
Time helpers for claim temporal bounds.

Claim timestamps are integer seconds since the Unix epoch.
"""

import time
from typing import Optional

from ..constants import TimeConstants


def since_the_epoch() -> int:
    """Current wall-clock time in whole seconds since the Unix epoch."""
    return int(time.time())


def days_from_now_to_jwt_time(days: Optional[int], now: Optional[int] = None) -> Optional[int]:
    """
    Convert a relative number of days into an absolute claim timestamp.

    ``None`` means "no bound" and is returned unchanged.
    """
    if days is None:
        return None
    if now is None:
        now = since_the_epoch()
    return now + days * TimeConstants.SECS_PER_DAY


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def humanize_duration(seconds: int) -> str:
    """Render a positive duration using its largest whole unit."""
    if seconds >= TimeConstants.SECS_PER_DAY:
        return _plural(seconds // TimeConstants.SECS_PER_DAY, "day")
    if seconds >= TimeConstants.SECS_PER_HOUR:
        return _plural(seconds // TimeConstants.SECS_PER_HOUR, "hour")
    if seconds >= TimeConstants.SECS_PER_MINUTE:
        return _plural(seconds // TimeConstants.SECS_PER_MINUTE, "minute")
    return _plural(seconds, "second")


def stamp_to_human(stamp: Optional[int], now: Optional[int] = None, unset: str = "never") -> str:
    """
    Describe a timestamp relative to now: "in 3 days", "2 hours ago".

    ``unset`` is returned when there is no timestamp.
    """
    if stamp is None:
        return unset
    if now is None:
        now = since_the_epoch()

    delta = stamp - now
    if delta == 0:
        return "now"
    if delta > 0:
        return f"in {humanize_duration(delta)}"
    return f"{humanize_duration(-delta)} ago"
