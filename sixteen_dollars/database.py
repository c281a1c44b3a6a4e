from __future__ import annotations

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from .activities import activities_for_window, slug_id
from .models import Activity, ActivityTemplate, Category, DayWindow, QuickAction, UserSettings
from .settings import reference_from_dict, reference_to_dict, settings_to_dict, validate_settings

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = {
    "good": Category(name="Good Time", color="#4CAF50"),
    "bad": Category(name="Bad Time", color="#F44336"),
    "selfcare": Category(name="Self Care", color="#FFC107"),
}

DEFAULT_TEMPLATES = (
    ("Reading", "good"),
    ("Exercise", "good"),
    ("Work", "good"),
    ("Social Media", "bad"),
    ("Sleep", "selfcare"),
    ("Bath", "selfcare"),
    ("Tidying", "selfcare"),
)


class BudgetDatabase:
    def __init__(self, db_file: Path):
        self._db_file = Path(db_file)
        self._db_file.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_file, timeout=30)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        return conn

    @contextmanager
    def _connection(self):
        conn = self._connect()
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._lock, self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS app_settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS activities (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category_type TEXT NOT NULL,
                    start_time TEXT NOT NULL,
                    end_time TEXT NOT NULL,
                    cost REAL NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_activities_start_time
                ON activities(start_time);

                CREATE TABLE IF NOT EXISTS activity_templates (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category_type TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS categories (
                    category_type TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    color TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS quick_actions (
                    id TEXT PRIMARY KEY,
                    position INTEGER NOT NULL,
                    template_id TEXT NOT NULL,
                    start_ref TEXT NOT NULL,
                    end_ref TEXT NOT NULL,
                    enabled INTEGER NOT NULL DEFAULT 1
                );
                """
            )
            conn.commit()

    # -- settings -------------------------------------------------------

    def get_setting(self, key: str, default: str | None = None) -> str | None:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM app_settings WHERE key = ?",
                (key,),
            ).fetchone()
        if row is None:
            return default
        return str(row["value"])

    def set_setting(self, key: str, value: str) -> None:
        with self._lock, self._connection() as conn:
            conn.execute(
                """
                INSERT INTO app_settings(key, value)
                VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            conn.commit()

    def has_settings(self) -> bool:
        return self.get_setting("bedtime") is not None

    def load_settings(self) -> UserSettings:
        with self._lock, self._connection() as conn:
            rows = conn.execute("SELECT key, value FROM app_settings").fetchall()
        raw: dict[str, object] = {str(row["key"]): str(row["value"]) for row in rows}
        if "goals" in raw:
            try:
                raw["goals"] = json.loads(str(raw["goals"]))
            except json.JSONDecodeError:
                logger.warning("Stored goals are not valid JSON, ignoring them")
                raw.pop("goals")
        return validate_settings(raw, self.list_quick_actions())

    def save_settings(self, settings: UserSettings) -> None:
        values = settings_to_dict(settings)
        values["goals"] = json.dumps(values["goals"], sort_keys=True)
        for key, value in values.items():
            self.set_setting(key, str(value))
        self.save_quick_actions(settings.quick_actions)

    # -- activities -----------------------------------------------------

    def add_activity(self, activity: Activity) -> None:
        with self._lock, self._connection() as conn:
            conn.execute(
                """
                INSERT INTO activities(id, name, category_type, start_time, end_time, cost)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                self._activity_params(activity),
            )
            conn.commit()

    def update_activity(self, activity: Activity) -> bool:
        with self._lock, self._connection() as conn:
            cursor = conn.execute(
                """
                UPDATE activities
                SET name = ?, category_type = ?, start_time = ?, end_time = ?, cost = ?
                WHERE id = ?
                """,
                self._activity_params(activity)[1:] + (activity.id,),
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete_activity(self, activity_id: str) -> bool:
        with self._lock, self._connection() as conn:
            cursor = conn.execute("DELETE FROM activities WHERE id = ?", (activity_id,))
            conn.commit()
            return cursor.rowcount > 0

    def get_activity(self, activity_id: str) -> Activity | None:
        with self._lock, self._connection() as conn:
            row = conn.execute(
                """
                SELECT id, name, category_type, start_time, end_time, cost
                FROM activities
                WHERE id = ?
                """,
                (activity_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_activity(row)

    def list_activities(self) -> list[Activity]:
        with self._lock, self._connection() as conn:
            rows = conn.execute(
                """
                SELECT id, name, category_type, start_time, end_time, cost
                FROM activities
                ORDER BY start_time ASC, id ASC
                """
            ).fetchall()
        activities = []
        for row in rows:
            activity = self._row_to_activity(row)
            if activity is not None:
                activities.append(activity)
        return activities

    def list_activities_for_window(self, window: DayWindow) -> list[Activity]:
        return activities_for_window(self.list_activities(), window)

    # -- templates and categories -----------------------------------------

    def list_templates(self) -> list[ActivityTemplate]:
        with self._lock, self._connection() as conn:
            rows = conn.execute(
                "SELECT id, name, category_type FROM activity_templates ORDER BY rowid ASC"
            ).fetchall()
        return [
            ActivityTemplate(
                id=str(row["id"]),
                name=str(row["name"]),
                category_type=str(row["category_type"]),
            )
            for row in rows
        ]

    def get_template(self, template_id: str) -> ActivityTemplate | None:
        for template in self.list_templates():
            if template.id == template_id:
                return template
        return None

    def save_templates(self, templates: list[ActivityTemplate]) -> None:
        with self._lock, self._connection() as conn:
            conn.execute("DELETE FROM activity_templates")
            conn.executemany(
                "INSERT INTO activity_templates(id, name, category_type) VALUES (?, ?, ?)",
                [(t.id, t.name, t.category_type) for t in templates],
            )
            conn.commit()

    def load_categories(self) -> dict[str, Category]:
        with self._lock, self._connection() as conn:
            rows = conn.execute("SELECT category_type, name, color FROM categories").fetchall()
        if not rows:
            return dict(DEFAULT_CATEGORIES)
        categories = dict(DEFAULT_CATEGORIES)
        for row in rows:
            categories[str(row["category_type"])] = Category(name=str(row["name"]), color=str(row["color"]))
        return categories

    def save_categories(self, categories: dict[str, Category]) -> None:
        with self._lock, self._connection() as conn:
            conn.execute("DELETE FROM categories")
            conn.executemany(
                "INSERT INTO categories(category_type, name, color) VALUES (?, ?, ?)",
                [(key, c.name, c.color) for key, c in categories.items()],
            )
            conn.commit()

    # -- quick actions ----------------------------------------------------

    def list_quick_actions(self) -> list[QuickAction]:
        with self._lock, self._connection() as conn:
            rows = conn.execute(
                """
                SELECT id, template_id, start_ref, end_ref, enabled
                FROM quick_actions
                ORDER BY position ASC
                """
            ).fetchall()
        actions = []
        for row in rows:
            try:
                actions.append(
                    QuickAction(
                        id=str(row["id"]),
                        template_id=str(row["template_id"]),
                        start=reference_from_dict(json.loads(str(row["start_ref"]))),
                        end=reference_from_dict(json.loads(str(row["end_ref"]))),
                        enabled=bool(row["enabled"]),
                    )
                )
            except (ValueError, TypeError, AttributeError) as exc:
                logger.warning("Skipping quick action %s: %s", row["id"], exc)
        return actions

    def save_quick_actions(self, actions) -> None:
        with self._lock, self._connection() as conn:
            conn.execute("DELETE FROM quick_actions")
            conn.executemany(
                """
                INSERT INTO quick_actions(id, position, template_id, start_ref, end_ref, enabled)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        action.id,
                        position,
                        action.template_id,
                        json.dumps(reference_to_dict(action.start)),
                        json.dumps(reference_to_dict(action.end)),
                        int(action.enabled),
                    )
                    for position, action in enumerate(actions)
                ],
            )
            conn.commit()

    def ensure_defaults(self) -> None:
        if not self.has_settings():
            self.save_settings(validate_settings({}))

        with self._lock, self._connection() as conn:
            has_categories = conn.execute("SELECT 1 FROM categories LIMIT 1").fetchone() is not None
        if not has_categories:
            self.save_categories(dict(DEFAULT_CATEGORIES))

        if not self.list_templates():
            self.save_templates(
                [
                    ActivityTemplate(id=slug_id(name), name=name, category_type=category_type)
                    for name, category_type in DEFAULT_TEMPLATES
                ]
            )

    @staticmethod
    def _activity_params(activity: Activity) -> tuple:
        return (
            activity.id,
            activity.name,
            activity.category_type,
            activity.start_time.isoformat(),
            activity.end_time.isoformat(),
            float(activity.cost),
        )

    @staticmethod
    def _row_to_activity(row: sqlite3.Row) -> Activity | None:
        try:
            start_time = datetime.fromisoformat(str(row["start_time"]))
            end_time = datetime.fromisoformat(str(row["end_time"]))
        except ValueError:
            logger.warning("Skipping activity %s with unreadable timestamps", row["id"])
            return None

        return Activity(
            id=str(row["id"]),
            name=str(row["name"]),
            category_type=str(row["category_type"]),
            start_time=start_time,
            end_time=end_time,
            cost=float(row["cost"]),
        )
