from __future__ import annotations

import tempfile
import unittest
from datetime import datetime
from pathlib import Path

from PIL import Image

from sixteen_dollars.icon import ACCENT, TRACK, TRANSPARENT, budget_fraction, render_budget_icon, save_icon
from sixteen_dollars.models import UserSettings


class IconTests(unittest.TestCase):
    def test_half_budget_fills_right_half(self) -> None:
        image = render_budget_icon(0.5, size=64)
        self.assertEqual(image.size, (64, 64))
        self.assertEqual(image.getpixel((48, 32)), ACCENT)
        self.assertEqual(image.getpixel((16, 32)), TRACK)
        self.assertEqual(image.getpixel((0, 0)), TRANSPARENT)

    def test_asleep_shows_only_track(self) -> None:
        image = render_budget_icon(0.9, asleep=True)
        self.assertEqual(image.getpixel((48, 32)), TRACK)
        self.assertEqual(image.getpixel((16, 32)), TRACK)

    def test_full_budget(self) -> None:
        image = render_budget_icon(1.5, color=(1, 2, 3, 255))
        self.assertEqual(image.getpixel((16, 32)), (1, 2, 3, 255))

    def test_rejects_degenerate_size(self) -> None:
        for size in (1, 0, -4):
            with self.assertRaises(ValueError):
                render_budget_icon(0.5, size=size)

    def test_budget_fraction(self) -> None:
        settings = UserSettings(bedtime="23:00", wake_time="07:00")
        self.assertEqual(budget_fraction(datetime(2024, 1, 2, 9, 30), settings), 13.5 / 16)
        self.assertEqual(budget_fraction(datetime(2024, 1, 2, 2, 0), settings), 1.0)

    def test_save_icon_writes_png(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = save_icon(render_budget_icon(0.25, size=32), Path(tmp_dir) / "icons" / "budget.png")
            with Image.open(path) as saved:
                self.assertEqual(saved.format, "PNG")
                self.assertEqual(saved.size, (32, 32))


if __name__ == "__main__":
    unittest.main()
