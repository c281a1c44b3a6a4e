"""Status icon showing how much of today's allowance is left."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from PIL import Image, ImageDraw

from .budget import balance
from .models import UserSettings

ACCENT = (76, 175, 80, 255)
TRACK = (128, 128, 128, 255)
TRANSPARENT = (0, 0, 0, 0)


def budget_fraction(now: datetime, settings: UserSettings) -> float:
    if settings.daily_allowance <= 0:
        return 0.0
    return min(1.0, max(0.0, balance(now, settings) / settings.daily_allowance))


def render_budget_icon(
    fraction: float,
    asleep: bool = False,
    size: int = 64,
    color: tuple[int, int, int, int] = ACCENT,
) -> Image.Image:
    if size < 2:
        raise ValueError(f"icon size must be at least 2 pixels, got {size}")
    fraction = min(1.0, max(0.0, fraction))
    image = Image.new("RGBA", (size, size), TRANSPARENT)
    draw = ImageDraw.Draw(image)
    inset = max(1, size // 16)
    box = [inset, inset, size - inset, size - inset]

    draw.ellipse(box, fill=TRACK)
    if asleep or fraction <= 0:
        return image
    if fraction >= 1:
        draw.ellipse(box, fill=color)
        return image

    # Pie grows clockwise from 12 o'clock.
    draw.pieslice(box, start=-90, end=-90 + 360 * fraction, fill=color)
    return image


def save_icon(image: Image.Image, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, format="PNG")
    return path
