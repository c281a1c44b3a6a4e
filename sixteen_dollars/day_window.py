from __future__ import annotations

from datetime import datetime, timedelta

from .clock import minutes_since_midnight, to_instant
from .models import DayWindow, UserSettings

ONE_DAY = timedelta(days=1)


def is_asleep(now: datetime, settings: UserSettings) -> bool:
    bed_mins = minutes_since_midnight(settings.bedtime)
    wake_mins = minutes_since_midnight(settings.wake_time)
    now_mins = minutes_since_midnight(now)

    if bed_mins < wake_mins:
        # Sleep window does not cross midnight, e.g. 01:00-09:00.
        return bed_mins <= now_mins < wake_mins
    return now_mins >= bed_mins or now_mins < wake_mins


def most_recent_bedtime(now: datetime, settings: UserSettings) -> datetime:
    today_bed = to_instant(now, settings.bedtime)
    if now >= today_bed:
        return today_bed
    return to_instant(now - ONE_DAY, settings.bedtime)


def next_bedtime(now: datetime, settings: UserSettings) -> datetime:
    today_bed = to_instant(now, settings.bedtime)
    if today_bed > now:
        return today_bed
    return to_instant(now + ONE_DAY, settings.bedtime)


def most_recent_wake(now: datetime, settings: UserSettings) -> datetime:
    """Wake instant of the current day window.

    That is the first wake time at or after the window's opening bedtime, so
    it lies in the future while ``now`` is still inside the sleep period.
    """
    went_to_bed = most_recent_bedtime(now, settings)
    wake = to_instant(went_to_bed, settings.wake_time)
    if wake < went_to_bed:
        wake = to_instant(went_to_bed + ONE_DAY, settings.wake_time)
    return wake


def day_window(now: datetime, settings: UserSettings) -> DayWindow:
    return DayWindow(
        start=most_recent_bedtime(now, settings),
        end=next_bedtime(now, settings),
    )
