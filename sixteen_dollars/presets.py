from __future__ import annotations

from datetime import date, datetime, timedelta

from .activities import build_activity, corrected_end
from .clock import format_12h, to_instant
from .day_window import ONE_DAY, day_window
from .models import BEDTIME, OFFSET, WAKE_TIME, Activity, ActivityTemplate, QuickAction, TimeReference, UserSettings

# Any date works for labels; only the time of day is shown.
_LABEL_ANCHOR = date(2000, 1, 1)


def resolve_reference(ref: TimeReference, settings: UserSettings, anchor: date) -> datetime:
    if ref.kind == BEDTIME:
        return to_instant(anchor, settings.bedtime)
    if ref.kind == WAKE_TIME:
        return to_instant(anchor, settings.wake_time)
    if ref.kind == OFFSET:
        return to_instant(anchor, settings.wake_time) + timedelta(minutes=ref.minutes)
    raise ValueError(f"Unknown time reference kind: {ref.kind!r}")


def format_reference(ref: TimeReference, settings: UserSettings) -> str:
    return format_12h(resolve_reference(ref, settings, _LABEL_ANCHOR))


def describe_reference(ref: TimeReference) -> str:
    if ref.kind == BEDTIME:
        return "bedtime"
    if ref.kind == WAKE_TIME:
        return "wake"
    return f"{ref.minutes:+d}"


def parse_reference(raw: str) -> TimeReference:
    """Parse ``bedtime``, ``wake`` or a signed minute offset from wake time."""
    value = raw.strip().lower()
    if value in ("bedtime", "bed"):
        return TimeReference.bedtime()
    if value in ("wake", "waketime", "wake_time"):
        return TimeReference.wake_time()
    try:
        return TimeReference.offset(int(value))
    except ValueError:
        raise ValueError(f"Time reference must be 'bedtime', 'wake' or minutes, got {raw!r}") from None


def quick_action_bounds(
    action: QuickAction,
    settings: UserSettings,
    anchor: date,
) -> tuple[datetime, datetime]:
    start = resolve_reference(action.start, settings, anchor)
    end = resolve_reference(action.end, settings, anchor)
    return start, corrected_end(start, end)


def activate_quick_action(
    action: QuickAction,
    template: ActivityTemplate,
    settings: UserSettings,
    now: datetime,
) -> Activity:
    """Turn a preset into a concrete activity inside the current day window.

    References resolve on the calendar date of the window start; a start that
    lands before the window opens belongs to the next calendar day.
    """
    window = day_window(now, settings)
    start, end = quick_action_bounds(action, settings, window.start)
    if start < window.start:
        start += ONE_DAY
        end += ONE_DAY
    return build_activity(template.name, template.category_type, start, end)
