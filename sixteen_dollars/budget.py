from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from .activities import activities_for_window, category_totals
from .clock import hours_between, round2
from .day_window import day_window, is_asleep, most_recent_wake, next_bedtime
from .models import CATEGORY_TYPES, Activity, BudgetSnapshot, CategoryGoals, UserSettings


def remaining(now: datetime, settings: UserSettings) -> float:
    """Hours left before the next bedtime."""
    return round2(max(0.0, hours_between(now, next_bedtime(now, settings))))


def spent(now: datetime, settings: UserSettings) -> float:
    """Hours elapsed since waking in the current day window."""
    return round2(max(0.0, hours_between(most_recent_wake(now, settings), now)))


def balance(now: datetime, settings: UserSettings) -> float:
    return round2(max(0.0, settings.daily_allowance - spent(now, settings)))


def goal_progress(totals: Mapping[str, float], goals: CategoryGoals) -> dict[str, float]:
    progress: dict[str, float] = {}
    for category_type in CATEGORY_TYPES:
        target = goals.target(category_type)
        if target <= 0:
            progress[category_type] = 0.0
            continue
        progress[category_type] = round2(totals.get(category_type, 0.0) / target)
    return progress


def snapshot(
    now: datetime,
    settings: UserSettings,
    activities: Iterable[Activity] = (),
) -> BudgetSnapshot:
    window = day_window(now, settings)
    visible = activities_for_window(activities, window)
    return BudgetSnapshot(
        now=now,
        window=window,
        asleep=is_asleep(now, settings),
        remaining=remaining(now, settings),
        spent=spent(now, settings),
        balance=balance(now, settings),
        activities=tuple(visible),
        totals=category_totals(visible),
    )
