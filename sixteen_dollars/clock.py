"""Wall-clock helpers shared by the budget engine.

All instants are naive local ``datetime`` values.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)

DEFAULT_TIME = "00:00"

_HHMM = re.compile(r"([0-9]{1,2}):([0-9]{2})")


def parse_time(value: str | None) -> str:
    """Strictly parse ``H:MM`` or ``HH:MM`` into zero-padded ``HH:MM``.

    Raises ValueError on anything else.
    """
    match = _HHMM.fullmatch(str(value or "").strip())
    if match is None:
        raise ValueError(f"expected HH:MM, got {value!r}")

    hours = int(match.group(1))
    minutes = int(match.group(2))
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"time {value!r} out of range")
    return f"{hours:02d}:{minutes:02d}"


def normalize_time(value: str | None) -> str:
    """Return ``value`` as zero-padded ``HH:MM``.

    Anything unparseable or out of range becomes ``"00:00"`` and a warning is
    logged; callers never see an exception.
    """
    try:
        return parse_time(value)
    except ValueError as exc:
        logger.warning("Invalid wall-clock time: %s, using %s", exc, DEFAULT_TIME)
        return DEFAULT_TIME


def _split(time_str: str) -> tuple[int, int]:
    hours, minutes = normalize_time(time_str).split(":")
    return int(hours), int(minutes)


def to_instant(anchor: date, time_str: str) -> datetime:
    """Combine the calendar date of ``anchor`` with ``time_str``.

    Only year/month/day are taken from ``anchor``; its time of day is ignored.
    """
    hours, minutes = _split(time_str)
    return datetime(anchor.year, anchor.month, anchor.day, hours, minutes)


def minutes_since_midnight(value: str | datetime) -> int:
    if isinstance(value, datetime):
        return value.hour * 60 + value.minute
    hours, minutes = _split(value)
    return hours * 60 + minutes


def format_12h(instant: datetime) -> str:
    hours = instant.hour % 12 or 12
    suffix = "pm" if instant.hour >= 12 else "am"
    return f"{hours}:{instant.minute:02d}{suffix}"


def format_hhmm(instant: datetime) -> str:
    return f"{instant.hour:02d}:{instant.minute:02d}"


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600


def round2(value: float) -> float:
    if not math.isfinite(value):
        return value
    # Half away from zero at the hundredths place; builtin round() is banker's.
    quantized = Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(quantized)
