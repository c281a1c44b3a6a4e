from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

CATEGORY_TYPES = ("good", "bad", "selfcare")

BEDTIME = "bedtime"
WAKE_TIME = "wakeTime"
OFFSET = "offset"


@dataclass(frozen=True)
class Category:
    name: str
    color: str


@dataclass(frozen=True)
class CategoryGoals:
    good: float = 0.0
    bad: float = 0.0
    selfcare: float = 0.0

    def target(self, category_type: str) -> float:
        return float(getattr(self, category_type, 0.0) or 0.0)


@dataclass(frozen=True)
class ActivityTemplate:
    id: str
    name: str
    category_type: str


@dataclass(frozen=True)
class Activity:
    id: str
    name: str
    category_type: str
    start_time: datetime
    end_time: datetime
    cost: float


@dataclass(frozen=True)
class TimeReference:
    """Symbolic anchor used by quick actions.

    ``minutes`` is only meaningful for offsets and is measured from wake time.
    """

    kind: str
    minutes: int = 0

    @classmethod
    def bedtime(cls) -> TimeReference:
        return cls(BEDTIME)

    @classmethod
    def wake_time(cls) -> TimeReference:
        return cls(WAKE_TIME)

    @classmethod
    def offset(cls, minutes: int) -> TimeReference:
        return cls(OFFSET, int(minutes))


@dataclass(frozen=True)
class QuickAction:
    id: str
    template_id: str
    start: TimeReference
    end: TimeReference
    enabled: bool = True


@dataclass(frozen=True)
class UserSettings:
    bedtime: str
    wake_time: str
    daily_allowance: float = 16.0
    goals: CategoryGoals = field(default_factory=CategoryGoals)
    quick_actions: tuple[QuickAction, ...] = ()


@dataclass(frozen=True)
class DayWindow:
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


@dataclass(frozen=True)
class BudgetSnapshot:
    now: datetime
    window: DayWindow
    asleep: bool
    remaining: float
    spent: float
    balance: float
    activities: tuple[Activity, ...]
    totals: dict[str, float]
