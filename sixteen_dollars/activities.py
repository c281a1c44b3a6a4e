from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Sequence

from .clock import hours_between, round2
from .models import CATEGORY_TYPES, Activity, DayWindow

CATEGORY_LABELS = {
    "good": "Good Time",
    "bad": "Bad Time",
    "selfcare": "Self Care",
}


def corrected_end(start: datetime, end: datetime) -> datetime:
    # An end before its start means the activity ran past midnight.
    if end < start:
        return end + timedelta(hours=24)
    return end


def duration_hours(start: datetime, end: datetime) -> float:
    return hours_between(start, corrected_end(start, end))


def overlaps_window(
    start: datetime,
    end: datetime,
    window_start: datetime,
    window_end: datetime,
) -> bool:
    return start < window_end and corrected_end(start, end) > window_start


def activities_for_window(activities: Iterable[Activity], window: DayWindow) -> list[Activity]:
    visible = [
        activity
        for activity in activities
        if overlaps_window(activity.start_time, activity.end_time, window.start, window.end)
    ]
    return sorted(visible, key=lambda activity: activity.start_time)


def category_totals(activities: Sequence[Activity]) -> dict[str, float]:
    totals = {category_type: 0.0 for category_type in CATEGORY_TYPES}
    for activity in activities:
        totals[activity.category_type] = totals.get(activity.category_type, 0.0) + activity.cost
    return {category_type: round2(total) for category_type, total in totals.items()}


def build_activity(
    name: str,
    category_type: str,
    start: datetime,
    end: datetime,
    activity_id: str | None = None,
) -> Activity:
    """Create an activity with its end wrapped past midnight and cost derived.

    A blank name falls back to the category's display label.
    """
    end = corrected_end(start, end)
    label = (name or "").strip() or CATEGORY_LABELS.get(category_type, "Activity")
    return Activity(
        id=activity_id or uuid.uuid4().hex,
        name=label,
        category_type=category_type,
        start_time=start,
        end_time=end,
        cost=round2(duration_hours(start, end)),
    )


def slug_id(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower())


def format_duration(hours: float) -> str:
    total_minutes = max(0, int(round(hours * 60)))
    whole_hours, minutes = divmod(total_minutes, 60)
    if whole_hours:
        return f"{whole_hours}h {minutes:02d}m"
    return f"{minutes}m"
