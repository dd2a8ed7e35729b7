"""Time-of-day queries: work hours and time-block preemption.

Pure functions — no state, no I/O.  Times of day are compared as
zero-padded ``HH:MM`` strings, so lexicographic order is chronological.

One-off (non-recurring) blocks carry no date, so they match on every day
until deleted.  Recurring blocks additionally require today's weekday to
be listed in ``recurring_days``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from flowfit.core.models.settings import WEEKDAYS, TimeBlock, UserSettings


def time_of_day(now: datetime) -> str:
    """Return ``HH:MM`` for *now*."""
    return f"{now.hour:02d}:{now.minute:02d}"


def weekday_name(now: datetime) -> str:
    """Return the English weekday name for *now* (e.g. ``"Monday"``)."""
    return WEEKDAYS[now.weekday()]


def is_within_work_hours(settings: UserSettings, now: datetime) -> bool:
    """``True`` iff *now* falls in ``[work_start, work_end)``."""
    current = time_of_day(now)
    return settings.work_start <= current < settings.work_end


def block_matches(block: TimeBlock, now: datetime) -> bool:
    """``True`` if *block* covers *now*; the end minute is inclusive."""
    if block.is_recurring and weekday_name(now) not in block.recurring_days:
        return False
    current = time_of_day(now)
    return block.start_time <= current <= block.end_time


def find_active_time_block(blocks: Iterable[TimeBlock], now: datetime) -> TimeBlock | None:
    """Return the first block in *blocks* covering *now*, or ``None``."""
    for block in blocks:
        if block_matches(block, now):
            return block
    return None
