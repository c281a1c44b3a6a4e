from __future__ import annotations

import argparse
import dataclasses
import logging
import math
import re
import sys
import uuid
from datetime import date, datetime

from . import __version__
from .activities import CATEGORY_LABELS, build_activity, format_duration
from .budget import goal_progress, snapshot
from .clock import format_12h, parse_time, to_instant
from .database import BudgetDatabase
from .day_window import is_asleep
from .icon import budget_fraction, render_budget_icon, save_icon
from .models import CATEGORY_TYPES, Activity, CategoryGoals, QuickAction
from .paths import database_path
from .presets import activate_quick_action, describe_reference, format_reference, parse_reference

MIN_ICON_SIZE = 16


def _wall_clock(value: str) -> str:
    try:
        return parse_time(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _allowance(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number of dollars, got {value!r}") from None
    if not math.isfinite(parsed) or parsed <= 0:
        raise argparse.ArgumentTypeError(f"allowance must be a positive number, got {value!r}")
    return parsed


def _icon_size(value: str) -> int:
    try:
        size = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a pixel size, got {value!r}") from None
    if size < MIN_ICON_SIZE:
        raise argparse.ArgumentTypeError(f"icon size must be at least {MIN_ICON_SIZE}, got {size}")
    return size


def _instant(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected ISO date-time, got {value!r}") from None


def _calendar_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from None


def _reference(value: str):
    try:
        return parse_reference(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _goal(value: str) -> tuple[str, float]:
    category_type, sep, amount = value.partition("=")
    if not sep or category_type not in CATEGORY_TYPES:
        raise argparse.ArgumentTypeError(f"expected CATEGORY=DOLLARS, got {value!r}")
    try:
        dollars = float(amount)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number of dollars, got {amount!r}") from None
    if not math.isfinite(dollars):
        raise argparse.ArgumentTypeError(f"expected a number of dollars, got {amount!r}")
    return category_type, max(0.0, dollars)


def _activity_line(activity: Activity) -> str:
    return (
        f"{activity.id}  {format_12h(activity.start_time)} - {format_12h(activity.end_time)}  "
        f"${activity.cost:.2f}  [{activity.category_type}] {activity.name}"
    )


def _cmd_status(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    settings = db.load_settings()
    snap = snapshot(now, settings, db.list_activities())
    print(f"now={now.isoformat(timespec='minutes')} asleep={'yes' if snap.asleep else 'no'}")
    print(f"window={snap.window.start.isoformat(timespec='minutes')} -> {snap.window.end.isoformat(timespec='minutes')}")
    if snap.asleep:
        print("Time to invest in sleep!")
    print(f"left today: ${snap.balance:.2f} of ${settings.daily_allowance:.2f}")
    print(f"spent={snap.spent:.2f}h remaining={snap.remaining:.2f}h")
    return 0


def _cmd_today(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    settings = db.load_settings()
    categories = db.load_categories()
    snap = snapshot(now, settings, db.list_activities())
    if not snap.activities:
        print("No activities logged in this day window.")
    for activity in snap.activities:
        print(_activity_line(activity))

    progress = goal_progress(snap.totals, settings.goals)
    for category_type in CATEGORY_TYPES:
        label = categories[category_type].name
        line = f"{label}: ${snap.totals[category_type]:.2f} ({format_duration(snap.totals[category_type])})"
        if settings.goals.target(category_type) > 0:
            line += f" goal ${settings.goals.target(category_type):.2f} ({progress[category_type]:.0%})"
        print(line)
    return 0


def _cmd_add(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    day = args.date or now.date()
    activity = build_activity(
        args.name,
        args.category,
        to_instant(day, args.start),
        to_instant(day, args.end),
    )
    db.add_activity(activity)
    print(f"added {_activity_line(activity)}")
    return 0


def _cmd_edit(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    current = db.get_activity(args.id)
    if current is None:
        print(f"No activity with id {args.id}", file=sys.stderr)
        return 1
    start = to_instant(current.start_time, args.start) if args.start else current.start_time
    end = current.end_time
    if args.end:
        end = to_instant(start, args.end)
    activity = build_activity(
        args.name if args.name is not None else current.name,
        args.category or current.category_type,
        start,
        end,
        activity_id=current.id,
    )
    db.update_activity(activity)
    print(f"updated {_activity_line(activity)}")
    return 0


def _cmd_delete(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    if not db.delete_activity(args.id):
        print(f"No activity with id {args.id}", file=sys.stderr)
        return 1
    print(f"deleted {args.id}")
    return 0


def _cmd_templates(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    for template in db.list_templates():
        print(f"{template.id}  {template.name} [{template.category_type}]")
    return 0


def _cmd_presets(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    settings = db.load_settings()

    if args.preset_command == "add":
        if db.get_template(args.template) is None:
            print(f"No template with id {args.template}", file=sys.stderr)
            return 1
        action = QuickAction(
            id=uuid.uuid4().hex[:8],
            template_id=args.template,
            start=args.start,
            end=args.end,
        )
        db.save_quick_actions(list(settings.quick_actions) + [action])
        print(f"added preset {action.id}")
        return 0

    if args.preset_command == "run":
        action = next((a for a in settings.quick_actions if a.id == args.id), None)
        if action is None or not action.enabled:
            print(f"No enabled preset with id {args.id}", file=sys.stderr)
            return 1
        template = db.get_template(action.template_id)
        if template is None:
            print(f"Preset {action.id} refers to missing template {action.template_id}", file=sys.stderr)
            return 1
        activity = activate_quick_action(action, template, settings, now)
        db.add_activity(activity)
        print(f"added {_activity_line(activity)}")
        return 0

    templates = {template.id: template for template in db.list_templates()}
    if not settings.quick_actions:
        print("No presets configured.")
    for action in settings.quick_actions:
        template = templates.get(action.template_id)
        name = template.name if template else f"<missing {action.template_id}>"
        state = "" if action.enabled else " (disabled)"
        print(
            f"{action.id}  {name}  {format_reference(action.start, settings)} - "
            f"{format_reference(action.end, settings)}  "
            f"[{describe_reference(action.start)} .. {describe_reference(action.end)}]{state}"
        )
    return 0


def _cmd_settings(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    settings = db.load_settings()

    if args.settings_command == "set":
        changes: dict[str, object] = {}
        if args.bedtime:
            changes["bedtime"] = args.bedtime
        if args.wake_time:
            changes["wake_time"] = args.wake_time
        if args.allowance is not None:
            changes["daily_allowance"] = args.allowance
        if args.goal:
            goals = dataclasses.asdict(settings.goals)
            goals.update(dict(args.goal))
            changes["goals"] = CategoryGoals(**goals)
        settings = dataclasses.replace(settings, **changes)
        db.save_settings(settings)

    print(f"bedtime={settings.bedtime} wake_time={settings.wake_time} allowance={settings.daily_allowance:.2f}")
    for category_type in CATEGORY_TYPES:
        print(f"goal {CATEGORY_LABELS[category_type]}: ${settings.goals.target(category_type):.2f}")
    return 0


def _cmd_icon(db: BudgetDatabase, now: datetime, args: argparse.Namespace) -> int:
    settings = db.load_settings()
    color = db.load_categories()["good"].color
    image = render_budget_icon(
        budget_fraction(now, settings),
        asleep=is_asleep(now, settings),
        size=args.size,
        color=_hex_to_rgba(color),
    )
    path = save_icon(image, args.output)
    print(f"icon={path}")
    return 0


def _hex_to_rgba(value: str) -> tuple[int, int, int, int]:
    value = value.lstrip("#")
    if not re.fullmatch(r"[0-9a-fA-F]{6}", value):
        return (76, 175, 80, 255)
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), 255)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sixteen_dollars", description="Daily time budget tracker")
    parser.add_argument("--data", help="Path to the SQLite database")
    parser.add_argument("--now", type=_instant, help="Evaluate as of this local time (ISO 8601)")
    parser.add_argument("--verbose", action="store_true", help="Show debug logging")
    parser.add_argument("--version", action="store_true", help="Print app version and exit")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show today's remaining budget")
    sub.add_parser("today", help="List activities in the current day window")
    sub.add_parser("templates", help="List activity templates")

    add = sub.add_parser("add", help="Log an activity")
    add.add_argument("name")
    add.add_argument("--category", choices=CATEGORY_TYPES, required=True)
    add.add_argument("--start", type=_wall_clock, required=True)
    add.add_argument("--end", type=_wall_clock, required=True)
    add.add_argument("--date", type=_calendar_date, help="Calendar date of the start (default: today)")

    edit = sub.add_parser("edit", help="Change a logged activity")
    edit.add_argument("id")
    edit.add_argument("--name")
    edit.add_argument("--category", choices=CATEGORY_TYPES)
    edit.add_argument("--start", type=_wall_clock)
    edit.add_argument("--end", type=_wall_clock)

    delete = sub.add_parser("delete", help="Remove a logged activity")
    delete.add_argument("id")

    presets = sub.add_parser("presets", help="Quick-action presets")
    preset_sub = presets.add_subparsers(dest="preset_command")
    preset_sub.add_parser("list", help="List presets")
    preset_add = preset_sub.add_parser("add", help="Create a preset from a template")
    preset_add.add_argument("template")
    preset_add.add_argument("--start", type=_reference, required=True, help="bedtime, wake or minutes from wake")
    preset_add.add_argument("--end", type=_reference, required=True, help="bedtime, wake or minutes from wake")
    preset_run = preset_sub.add_parser("run", help="Log the activity a preset describes")
    preset_run.add_argument("id")

    settings = sub.add_parser("settings", help="Show or change settings")
    settings_sub = settings.add_subparsers(dest="settings_command")
    settings_sub.add_parser("show", help="Show settings")
    settings_set = settings_sub.add_parser("set", help="Change settings")
    settings_set.add_argument("--bedtime", type=_wall_clock)
    settings_set.add_argument("--wake-time", type=_wall_clock)
    settings_set.add_argument("--allowance", type=_allowance)
    settings_set.add_argument("--goal", type=_goal, action="append", help="CATEGORY=DOLLARS")

    icon = sub.add_parser("icon", help="Render the budget status icon")
    icon.add_argument("--output", required=True)
    icon.add_argument("--size", type=_icon_size, default=64)
    return parser


_COMMANDS = {
    "status": _cmd_status,
    "today": _cmd_today,
    "add": _cmd_add,
    "edit": _cmd_edit,
    "delete": _cmd_delete,
    "templates": _cmd_templates,
    "presets": _cmd_presets,
    "settings": _cmd_settings,
    "icon": _cmd_icon,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    db = BudgetDatabase(database_path(args.data))
    db.ensure_defaults()
    now = args.now or datetime.now()
    handler = _COMMANDS.get(args.command or "status")
    return handler(db, now, args)


if __name__ == "__main__":
    raise SystemExit(main())
