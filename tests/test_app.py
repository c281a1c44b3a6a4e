from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from datetime import datetime
from pathlib import Path

from PIL import Image

from sixteen_dollars import __version__
from sixteen_dollars.app import main
from sixteen_dollars.database import BudgetDatabase
from sixteen_dollars.icon import TRACK


class AppTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.db_file = Path(self._tmp.name) / "budget.sqlite3"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str, now: str = "2024-01-02T09:30") -> tuple[int, str]:
        out = io.StringIO()
        with redirect_stdout(out), redirect_stderr(io.StringIO()):
            code = main(["--data", str(self.db_file), "--now", now, *argv])
        return code, out.getvalue()

    def test_version(self) -> None:
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(["--version"]), 0)
        self.assertEqual(out.getvalue().strip(), __version__)

    def test_status(self) -> None:
        code, output = self._run("status")
        self.assertEqual(code, 0)
        self.assertIn("asleep=no", output)
        self.assertIn("left today: $13.50 of $16.00", output)
        self.assertIn("spent=2.50h remaining=13.50h", output)

    def test_status_while_asleep(self) -> None:
        code, output = self._run("status", now="2024-01-02T02:00")
        self.assertEqual(code, 0)
        self.assertIn("asleep=yes", output)
        self.assertIn("window=2024-01-01T23:00 -> 2024-01-02T23:00", output)

    def test_add_wraps_midnight_and_lists_today(self) -> None:
        code, _ = self._run(
            "add", "Reading", "--category", "good", "--start", "22:30", "--end", "00:15", "--date", "2024-01-02"
        )
        self.assertEqual(code, 0)
        activities = BudgetDatabase(self.db_file).list_activities()
        self.assertEqual(len(activities), 1)
        self.assertEqual(activities[0].end_time, datetime(2024, 1, 3, 0, 15))
        self.assertEqual(activities[0].cost, 1.75)

        code, output = self._run("today")
        self.assertEqual(code, 0)
        self.assertIn("10:30pm - 12:15am  $1.75  [good] Reading", output)
        self.assertIn("Good Time: $1.75 (1h 45m)", output)

    def test_rejects_bad_wall_clock(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("add", "Reading", "--category", "good", "--start", "25:00", "--end", "10:00")
        self.assertEqual(ctx.exception.code, 2)

    def test_edit_and_delete(self) -> None:
        self._run("add", "Work", "--category", "good", "--start", "09:00", "--end", "10:00")
        activity_id = BudgetDatabase(self.db_file).list_activities()[0].id

        code, _ = self._run("edit", activity_id, "--end", "11:30", "--category", "bad")
        self.assertEqual(code, 0)
        edited = BudgetDatabase(self.db_file).get_activity(activity_id)
        self.assertEqual(edited.cost, 2.5)
        self.assertEqual(edited.category_type, "bad")

        self.assertEqual(self._run("delete", activity_id)[0], 0)
        self.assertEqual(self._run("delete", activity_id)[0], 1)

    def test_presets_add_list_and_run(self) -> None:
        code, output = self._run("presets", "add", "sleep", "--start", "bedtime", "--end", "wake")
        self.assertEqual(code, 0)
        preset_id = output.split()[-1]

        code, output = self._run("presets", "list")
        self.assertIn("Sleep  11:00pm - 7:00am  [bedtime .. wake]", output)

        code, _ = self._run("presets", "run", preset_id)
        self.assertEqual(code, 0)
        activity = BudgetDatabase(self.db_file).list_activities()[0]
        self.assertEqual(activity.start_time, datetime(2024, 1, 1, 23, 0))
        self.assertEqual(activity.end_time, datetime(2024, 1, 2, 7, 0))
        self.assertEqual(activity.cost, 8.0)
        self.assertEqual(activity.category_type, "selfcare")

    def test_presets_unknown_template(self) -> None:
        code, _ = self._run("presets", "add", "juggling", "--start", "wake", "--end", "30")
        self.assertEqual(code, 1)

    def test_settings_set(self) -> None:
        code, output = self._run("settings", "set", "--bedtime", "22:00", "--goal", "good=4", "--allowance", "15")
        self.assertEqual(code, 0)
        self.assertIn("bedtime=22:00 wake_time=07:00 allowance=15.00", output)
        settings = BudgetDatabase(self.db_file).load_settings()
        self.assertEqual(settings.bedtime, "22:00")
        self.assertEqual(settings.goals.good, 4.0)
        self.assertEqual(settings.daily_allowance, 15.0)

    def test_icon(self) -> None:
        target = Path(self._tmp.name) / "icon.png"
        code, _ = self._run("icon", "--output", str(target), "--size", "32")
        self.assertEqual(code, 0)
        self.assertTrue(target.exists())

    def test_rejects_non_finite_allowance(self) -> None:
        for value in ("inf", "nan", "0"):
            with self.assertRaises(SystemExit) as ctx:
                self._run("settings", "set", "--allowance", value)
            self.assertEqual(ctx.exception.code, 2)
        self.assertEqual(BudgetDatabase(self.db_file).load_settings().daily_allowance, 16.0)

    def test_status_survives_stored_non_finite_allowance(self) -> None:
        db = BudgetDatabase(self.db_file)
        db.ensure_defaults()
        for value in ("inf", "nan"):
            db.set_setting("daily_allowance", value)
            code, output = self._run("status")
            self.assertEqual(code, 0)
            self.assertIn("left today: $13.50 of $16.00", output)

    def test_rejects_tiny_icon_size(self) -> None:
        target = Path(self._tmp.name) / "tiny.png"
        for size in ("1", "0", "-8"):
            with self.assertRaises(SystemExit) as ctx:
                self._run("icon", "--output", str(target), "--size", size)
            self.assertEqual(ctx.exception.code, 2)
        self.assertFalse(target.exists())

    def test_icon_while_asleep_is_grey(self) -> None:
        target = Path(self._tmp.name) / "asleep.png"
        code, _ = self._run("icon", "--output", str(target), now="2024-01-02T02:00")
        self.assertEqual(code, 0)
        with Image.open(target) as image:
            self.assertEqual(image.convert("RGBA").getpixel((48, 32)), TRACK)

    def test_cli_rejects_non_ascii_digits(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self._run("settings", "set", "--bedtime", "٢٣:٠٠")
        self.assertEqual(ctx.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
