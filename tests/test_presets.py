from __future__ import annotations

import unittest
from datetime import date, datetime

from sixteen_dollars.activities import activities_for_window, build_activity
from sixteen_dollars.day_window import day_window
from sixteen_dollars.models import ActivityTemplate, QuickAction, TimeReference, UserSettings
from sixteen_dollars.presets import (
    activate_quick_action,
    format_reference,
    parse_reference,
    resolve_reference,
)

SETTINGS = UserSettings(bedtime="23:00", wake_time="07:00")
ANCHOR = date(2024, 1, 2)


class ResolveTests(unittest.TestCase):
    def test_resolves_symbolic_anchors(self) -> None:
        self.assertEqual(resolve_reference(TimeReference.bedtime(), SETTINGS, ANCHOR), datetime(2024, 1, 2, 23, 0))
        self.assertEqual(resolve_reference(TimeReference.wake_time(), SETTINGS, ANCHOR), datetime(2024, 1, 2, 7, 0))

    def test_offsets_from_wake(self) -> None:
        self.assertEqual(resolve_reference(TimeReference.offset(90), SETTINGS, ANCHOR), datetime(2024, 1, 2, 8, 30))
        self.assertEqual(resolve_reference(TimeReference.offset(-30), SETTINGS, ANCHOR), datetime(2024, 1, 2, 6, 30))
        self.assertEqual(resolve_reference(TimeReference.offset(-480), SETTINGS, ANCHOR), datetime(2024, 1, 1, 23, 0))

    def test_format_reference(self) -> None:
        self.assertEqual(format_reference(TimeReference.bedtime(), SETTINGS), "11:00pm")
        self.assertEqual(format_reference(TimeReference.offset(5), UserSettings("23:00", "00:00")), "12:05am")

    def test_parse_reference(self) -> None:
        self.assertEqual(parse_reference("bedtime"), TimeReference.bedtime())
        self.assertEqual(parse_reference("Wake"), TimeReference.wake_time())
        self.assertEqual(parse_reference("-15"), TimeReference.offset(-15))
        with self.assertRaises(ValueError):
            parse_reference("lunch")


class QuickActionTests(unittest.TestCase):
    def test_sleep_preset_wraps_into_next_morning(self) -> None:
        action = QuickAction(id="p1", template_id="sleep", start=TimeReference.bedtime(), end=TimeReference.wake_time())
        template = ActivityTemplate(id="sleep", name="Sleep", category_type="selfcare")
        activity = activate_quick_action(action, template, SETTINGS, datetime(2024, 1, 2, 9, 30))
        self.assertEqual(activity.start_time, datetime(2024, 1, 1, 23, 0))
        self.assertEqual(activity.end_time, datetime(2024, 1, 2, 7, 0))
        self.assertEqual(activity.cost, 8.0)
        self.assertEqual(activity.name, "Sleep")
        self.assertEqual(activity.category_type, "selfcare")

    def test_offsets_after_bedtime_land_in_the_new_window(self) -> None:
        action = QuickAction(
            id="p2",
            template_id="exercise",
            start=TimeReference.offset(60),
            end=TimeReference.offset(105),
        )
        template = ActivityTemplate(id="exercise", name="Exercise", category_type="good")
        now = datetime(2024, 1, 2, 23, 30)
        activity = activate_quick_action(action, template, SETTINGS, now)
        self.assertEqual(activity.start_time, datetime(2024, 1, 3, 8, 0))
        self.assertEqual(activity.end_time, datetime(2024, 1, 3, 8, 45))
        self.assertEqual(activity.cost, 0.75)
        self.assertEqual(activities_for_window([activity], day_window(now, SETTINGS)), [activity])

    def test_wake_preset_mid_morning_lands_today(self) -> None:
        action = QuickAction(id="p3", template_id="exercise", start=TimeReference.wake_time(), end=TimeReference.offset(60))
        template = ActivityTemplate(id="exercise", name="Exercise", category_type="good")
        now = datetime(2024, 1, 2, 9, 30)
        activity = activate_quick_action(action, template, SETTINGS, now)
        self.assertEqual(activity.start_time, datetime(2024, 1, 2, 7, 0))
        self.assertEqual(activity.end_time, datetime(2024, 1, 2, 8, 0))
        self.assertEqual(activity.cost, 1.0)
        self.assertEqual(activities_for_window([activity], day_window(now, SETTINGS)), [activity])

    def test_preset_matches_manual_entry(self) -> None:
        action = QuickAction(id="p4", template_id="bath", start=TimeReference.offset(-30), end=TimeReference.offset(15))
        template = ActivityTemplate(id="bath", name="Bath", category_type="selfcare")
        now = datetime(2024, 1, 2, 12, 0)
        preset = activate_quick_action(action, template, SETTINGS, now)
        manual = build_activity("Bath", "selfcare", datetime(2024, 1, 2, 6, 30), datetime(2024, 1, 2, 7, 15), preset.id)
        self.assertEqual(preset, manual)


if __name__ == "__main__":
    unittest.main()
