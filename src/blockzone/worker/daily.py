"""Day-bucket arithmetic for the daily reset.

The reset happens at ``reset_hour`` in a fixed-offset local time (UTC-5 by
default). Timestamps at or after the reset hour belong to the next day's
bucket, so a bucket labelled ``D`` spans ``D-1 23:00`` to ``D 23:00`` local.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def local_time(now: datetime, utc_offset_hours: int = -5) -> datetime:
    return now.astimezone(timezone(timedelta(hours=utc_offset_hours)))


def day_bucket(now: datetime, utc_offset_hours: int = -5, reset_hour: int = 23) -> str:
    local = local_time(now, utc_offset_hours)
    if local.hour >= reset_hour:
        local = local + timedelta(days=1)
    return local.date().isoformat()


def next_reset(now: datetime, utc_offset_hours: int = -5, reset_hour: int = 23) -> datetime:
    local = local_time(now, utc_offset_hours)
    reset = local.replace(hour=reset_hour, minute=0, second=0, microsecond=0)
    if local.hour >= reset_hour:
        reset = reset + timedelta(days=1)
    return reset.astimezone(timezone.utc)
