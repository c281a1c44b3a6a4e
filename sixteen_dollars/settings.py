"""The single place where stored settings are defaulted and validated.

Engine functions take a complete ``UserSettings``; everything optional or
malformed is resolved here first.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from .clock import normalize_time
from .models import BEDTIME, CATEGORY_TYPES, OFFSET, WAKE_TIME, CategoryGoals, QuickAction, TimeReference, UserSettings

logger = logging.getLogger(__name__)

DEFAULT_BEDTIME = "23:00"
DEFAULT_WAKE_TIME = "07:00"
DEFAULT_DAILY_ALLOWANCE = 16.0


def default_settings() -> UserSettings:
    return UserSettings(
        bedtime=DEFAULT_BEDTIME,
        wake_time=DEFAULT_WAKE_TIME,
        daily_allowance=DEFAULT_DAILY_ALLOWANCE,
    )


def validate_settings(
    raw: Mapping[str, Any],
    quick_actions: Iterable[QuickAction] = (),
) -> UserSettings:
    bedtime = raw.get("bedtime")
    wake_time = raw.get("wake_time")
    return UserSettings(
        bedtime=DEFAULT_BEDTIME if bedtime in (None, "") else normalize_time(bedtime),
        wake_time=DEFAULT_WAKE_TIME if wake_time in (None, "") else normalize_time(wake_time),
        daily_allowance=_parse_allowance(raw.get("daily_allowance")),
        goals=_parse_goals(raw.get("goals")),
        quick_actions=tuple(quick_actions),
    )


def settings_to_dict(settings: UserSettings) -> dict[str, Any]:
    return {
        "bedtime": settings.bedtime,
        "wake_time": settings.wake_time,
        "daily_allowance": settings.daily_allowance,
        "goals": {category_type: settings.goals.target(category_type) for category_type in CATEGORY_TYPES},
    }


def _parse_allowance(value: Any) -> float:
    if value in (None, ""):
        return DEFAULT_DAILY_ALLOWANCE
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid daily allowance %r, using %s", value, DEFAULT_DAILY_ALLOWANCE)
        return DEFAULT_DAILY_ALLOWANCE
    if not math.isfinite(parsed) or parsed <= 0:
        logger.warning("Daily allowance must be a positive number, got %r", value)
        return DEFAULT_DAILY_ALLOWANCE
    return parsed


def _parse_goals(value: Any) -> CategoryGoals:
    if not isinstance(value, Mapping):
        return CategoryGoals()
    targets: dict[str, float] = {}
    for category_type in CATEGORY_TYPES:
        try:
            targets[category_type] = max(0.0, float(value.get(category_type, 0.0) or 0.0))
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid %s goal %r", category_type, value.get(category_type))
            targets[category_type] = 0.0
    return CategoryGoals(**targets)


def reference_from_dict(raw: Mapping[str, Any]) -> TimeReference:
    kind = str(raw.get("type", ""))
    if kind == OFFSET:
        return TimeReference.offset(int(raw.get("minutes", 0)))
    if kind not in (BEDTIME, WAKE_TIME):
        raise ValueError(f"Unknown time reference type: {kind!r}")
    return TimeReference(kind)


def reference_to_dict(ref: TimeReference) -> dict[str, Any]:
    if ref.kind == OFFSET:
        return {"type": OFFSET, "minutes": ref.minutes}
    return {"type": ref.kind}
