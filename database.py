"""
Database management module for Veckomeny.

This module handles all SQLite interactions: meal plans and their recipe
entries, shopping lists, the product catalog, user settings, monthly usage
counters and generator metering.
"""

import contextlib
import functools
import json
import sqlite3
import threading
from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

from loguru import logger

from config import CATALOG_LIMIT, DB_NAME
from errors import PersistenceFailure
from models import (
    MealPlanRecord,
    Preferences,
    Product,
    RecipeData,
    RecipeEntry,
    ShoppingList,
)

USAGE_COLUMNS = ("meal_plans_generated", "recipes_regenerated")


def week_start(day: date) -> date:
    """Monday of the week containing the given day."""
    return day - timedelta(days=day.weekday())


def _persistence(method):
    """Run under the connection lock; sqlite errors become PersistenceFailure."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self.lock:
            try:
                return method(self, *args, **kwargs)
            except sqlite3.Error as e:
                with contextlib.suppress(sqlite3.Error):
                    self.conn.rollback()
                raise PersistenceFailure(f"{method.__name__} failed: {e}") from e

    return wrapper


class DBManager:
    """
    Manages the SQLite database for the meal planner.

    Attributes:
        conn (sqlite3.Connection): The database connection object.
        lock (threading.RLock): Serializes connection use across threads.
    """

    def __init__(self, db_name=DB_NAME):
        """
        Initialize the DBManager.

        Args:
            db_name (str): The name of the database file. Defaults to config.DB_NAME.
        """
        self.conn = sqlite3.connect(db_name, check_same_thread=False)
        self.lock = threading.RLock()
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA foreign_keys = ON")
        self.create_tables()

    def close(self):
        self.conn.close()

    def create_tables(self):
        """Create the necessary tables if they do not exist."""
        c = self.conn.cursor()
        c.execute(
            """CREATE TABLE IF NOT EXISTS settings
                     (key TEXT PRIMARY KEY, value TEXT)"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS meal_plans
                     (id INTEGER PRIMARY KEY AUTOINCREMENT,
                      name TEXT,
                      created_at TEXT NOT NULL,
                      week_start_date TEXT NOT NULL,
                      servings INTEGER NOT NULL,
                      total_cost REAL DEFAULT 0,
                      preferences TEXT NOT NULL,
                      user_id TEXT)"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS meal_plan_recipes
                     (id INTEGER PRIMARY KEY AUTOINCREMENT,
                      meal_plan_id INTEGER NOT NULL
                          REFERENCES meal_plans(id) ON DELETE CASCADE,
                      day_number INTEGER NOT NULL,
                      recipe_data TEXT NOT NULL,
                      updated_at TEXT NOT NULL,
                      UNIQUE (meal_plan_id, day_number))"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS shopping_lists
                     (id INTEGER PRIMARY KEY AUTOINCREMENT,
                      meal_plan_id INTEGER NOT NULL UNIQUE
                          REFERENCES meal_plans(id) ON DELETE CASCADE,
                      items TEXT NOT NULL,
                      total_cost REAL DEFAULT 0,
                      updated_at TEXT NOT NULL)"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS weeks
                     (id INTEGER PRIMARY KEY AUTOINCREMENT,
                      start_date TEXT NOT NULL,
                      end_date TEXT NOT NULL)"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS products
                     (id INTEGER PRIMARY KEY AUTOINCREMENT,
                      week_id INTEGER REFERENCES weeks(id) ON DELETE SET NULL,
                      store TEXT,
                      name TEXT NOT NULL,
                      price REAL DEFAULT 0,
                      unit TEXT DEFAULT 'st',
                      category TEXT)"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS user_subscriptions
                     (user_id TEXT PRIMARY KEY,
                      plan TEXT NOT NULL DEFAULT 'free',
                      status TEXT NOT NULL DEFAULT 'active',
                      current_period_end TEXT)"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS usage_tracking
                     (user_id TEXT NOT NULL,
                      period_start TEXT NOT NULL,
                      meal_plans_generated INTEGER DEFAULT 0,
                      recipes_regenerated INTEGER DEFAULT 0,
                      PRIMARY KEY (user_id, period_start))"""
        )
        c.execute(
            """CREATE TABLE IF NOT EXISTS api_usage
                     (id INTEGER PRIMARY KEY AUTOINCREMENT,
                      created_at TEXT NOT NULL,
                      endpoint TEXT,
                      model TEXT,
                      response_time_ms INTEGER,
                      status TEXT,
                      prompt_chars INTEGER,
                      response_chars INTEGER)"""
        )
        self.conn.commit()

    # --- SETTINGS ---

    def save_setting(self, key, value):
        """
        Save a user setting to the database.

        Args:
            key (str): The setting key.
            value (str): The setting value.
        """
        c = self.conn.cursor()
        c.execute("REPLACE INTO settings (key, value) VALUES (?, ?)", (key, value))
        self.conn.commit()

    def get_setting(self, key, default=""):
        """
        Retrieve a user setting from the database.

        Args:
            key (str): The setting key.
            default (str): The default value if the key is not found.

        Returns:
            str: The setting value or the default.
        """
        c = self.conn.cursor()
        c.execute("SELECT value FROM settings WHERE key=?", (key,))
        result = c.fetchone()
        return result[0] if result else default

    # --- MEAL PLANS ---

    @_persistence
    def create_plan(self, preferences: Preferences, now: Optional[datetime] = None) -> int:
        """
        Create an empty meal plan before any recipe exists.

        Args:
            preferences (Preferences): Stored verbatim for later regeneration.
            now (Optional[datetime]): Creation time, defaults to now.

        Returns:
            int: The new plan id.
        """
        now = now or datetime.now()
        c = self.conn.cursor()
        c.execute(
            """INSERT INTO meal_plans
               (name, created_at, week_start_date, servings, total_cost, preferences, user_id)
               VALUES (?, ?, ?, ?, 0, ?, ?)""",
            (
                f"Veckoplan {now.date().isoformat()}",
                now.isoformat(timespec="seconds"),
                week_start(now.date()).isoformat(),
                preferences.servings,
                preferences.to_json(),
                preferences.user_id,
            ),
        )
        self.conn.commit()
        return c.lastrowid

    @_persistence
    def get_plan(self, plan_id: int) -> Optional[MealPlanRecord]:
        c = self.conn.cursor()
        c.execute("SELECT * FROM meal_plans WHERE id=?", (plan_id,))
        r = c.fetchone()
        if r is None:
            return None
        return MealPlanRecord(
            id=r["id"],
            name=r["name"],
            created_at=r["created_at"],
            week_start_date=r["week_start_date"],
            servings=r["servings"],
            total_cost=r["total_cost"] or 0.0,
            preferences=Preferences.model_validate_json(r["preferences"]),
            user_id=r["user_id"],
        )

    @_persistence
    def update_plan_total_cost(self, plan_id: int, total_cost: float):
        c = self.conn.cursor()
        c.execute(
            "UPDATE meal_plans SET total_cost=? WHERE id=?", (round(total_cost, 2), plan_id)
        )
        self.conn.commit()

    def get_recent_plans(self, limit=5, user_id=None):
        """
        Retrieve the most recent meal plans.

        Args:
            limit (int): The maximum number of plans to retrieve. Defaults to 5.
            user_id (Optional[str]): Only this user's plans when given.

        Returns:
            list: A list of dictionaries with id, name, date, total cost and day count.
        """
        c = self.conn.cursor()
        query = """SELECT p.id, p.name, p.created_at, p.total_cost,
                          (SELECT COUNT(*) FROM meal_plan_recipes r WHERE r.meal_plan_id = p.id)
                   FROM meal_plans p"""
        params = []
        if user_id is not None:
            query += " WHERE p.user_id = ?"
            params.append(user_id)
        query += " ORDER BY p.id DESC LIMIT ?"
        params.append(limit)
        c.execute(query, params)
        return [
            {
                "id": r[0],
                "name": r[1],
                "date": r[2],
                "total_cost": r[3] or 0.0,
                "days": r[4],
            }
            for r in c.fetchall()
        ]

    @_persistence
    def delete_plan(self, plan_id: int):
        """Delete a plan; its recipe entries and shopping list cascade."""
        c = self.conn.cursor()
        c.execute("DELETE FROM meal_plans WHERE id=?", (plan_id,))
        self.conn.commit()

    @_persistence
    def delete_all_plans(self):
        """Delete all saved meal plans from the database."""
        c = self.conn.cursor()
        c.execute("DELETE FROM meal_plans")
        self.conn.commit()

    # --- RECIPE ENTRIES ---

    @_persistence
    def upsert_recipe_entry(self, plan_id: int, day_number: int, recipe: RecipeData) -> RecipeEntry:
        """
        Insert or overwrite the recipe for one plan day.

        Args:
            plan_id (int): Owning plan.
            day_number (int): Day in the plan, unique per plan.
            recipe (RecipeData): The recipe payload.

        Returns:
            RecipeEntry: The stored entry.
        """
        c = self.conn.cursor()
        c.execute(
            """INSERT INTO meal_plan_recipes (meal_plan_id, day_number, recipe_data, updated_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT (meal_plan_id, day_number)
               DO UPDATE SET recipe_data = excluded.recipe_data,
                             updated_at = excluded.updated_at""",
            (
                plan_id,
                day_number,
                json.dumps(recipe.to_payload(), ensure_ascii=False),
                datetime.now().isoformat(timespec="seconds"),
            ),
        )
        self.conn.commit()
        c.execute(
            "SELECT id FROM meal_plan_recipes WHERE meal_plan_id=? AND day_number=?",
            (plan_id, day_number),
        )
        return RecipeEntry(
            id=c.fetchone()[0], meal_plan_id=plan_id, day_number=day_number, recipe=recipe
        )

    @_persistence
    def get_recipe_entries(self, plan_id: int) -> List[RecipeEntry]:
        """All recipe entries of a plan, ordered by day."""
        c = self.conn.cursor()
        c.execute(
            """SELECT id, day_number, recipe_data FROM meal_plan_recipes
               WHERE meal_plan_id=? ORDER BY day_number""",
            (plan_id,),
        )
        return [
            RecipeEntry(
                id=r[0],
                meal_plan_id=plan_id,
                day_number=r[1],
                recipe=RecipeData.model_validate_json(r[2]),
            )
            for r in c.fetchall()
        ]

    # --- SHOPPING LISTS ---

    @_persistence
    def replace_shopping_list(self, plan_id: int, shopping_list: ShoppingList):
        """Store the plan's shopping list, replacing any previous one."""
        c = self.conn.cursor()
        c.execute(
            """INSERT INTO shopping_lists (meal_plan_id, items, total_cost, updated_at)
               VALUES (?, ?, ?, ?)
               ON CONFLICT (meal_plan_id)
               DO UPDATE SET items = excluded.items,
                             total_cost = excluded.total_cost,
                             updated_at = excluded.updated_at""",
            (
                plan_id,
                json.dumps(shopping_list.items_payload(), ensure_ascii=False),
                shopping_list.total_cost,
                datetime.now().isoformat(timespec="seconds"),
            ),
        )
        self.conn.commit()

    @_persistence
    def get_shopping_list(self, plan_id: int) -> Optional[ShoppingList]:
        c = self.conn.cursor()
        c.execute(
            "SELECT items, total_cost FROM shopping_lists WHERE meal_plan_id=?", (plan_id,)
        )
        r = c.fetchone()
        if r is None:
            return None
        return ShoppingList(meal_plan_id=plan_id, items=json.loads(r[0]), total_cost=r[1] or 0.0)

    # --- PRODUCT CATALOG ---

    @_persistence
    def create_week(self, start_date: date, end_date: date) -> int:
        c = self.conn.cursor()
        c.execute(
            "INSERT INTO weeks (start_date, end_date) VALUES (?, ?)",
            (start_date.isoformat(), end_date.isoformat()),
        )
        self.conn.commit()
        return c.lastrowid

    @_persistence
    def save_products(self, week_id: Optional[int], products: Sequence[Product]) -> int:
        c = self.conn.cursor()
        c.executemany(
            """INSERT INTO products (week_id, store, name, price, unit, category)
               VALUES (?, ?, ?, ?, ?, ?)""",
            [
                (week_id, p.store, p.name, p.price or 0, p.unit or "st", p.category or "övrigt")
                for p in products
            ],
        )
        self.conn.commit()
        return len(products)

    def get_latest_week_id(self) -> Optional[int]:
        c = self.conn.cursor()
        c.execute("SELECT id FROM weeks ORDER BY start_date DESC, id DESC LIMIT 1")
        r = c.fetchone()
        return r[0] if r else None

    @_persistence
    def get_products(self, stores: Sequence[str], week_id=None, limit=CATALOG_LIMIT) -> List[Product]:
        """
        Catalog products from the given stores.

        Uses the given week (or the newest week) and falls back to products
        from any week when that week has none.
        """
        stores = list(stores)
        if not stores:
            return []
        placeholders = ", ".join("?" for _ in stores)
        base = f"SELECT name, price, unit, store, category FROM products WHERE store IN ({placeholders})"
        c = self.conn.cursor()

        rows = []
        week_id = week_id if week_id is not None else self.get_latest_week_id()
        if week_id is not None:
            c.execute(base + " AND week_id = ? ORDER BY id LIMIT ?", (*stores, week_id, limit))
            rows = c.fetchall()
        if not rows:
            logger.info("No products for current week, using products from any week")
            c.execute(base + " ORDER BY id LIMIT ?", (*stores, limit))
            rows = c.fetchall()

        return [
            Product(name=r[0], price=r[1] or 0, unit=r[2] or "st", store=r[3], category=r[4])
            for r in rows
        ]

    # --- SUBSCRIPTIONS & USAGE ---

    @_persistence
    def save_subscription(self, user_id: str, plan: str, status: str = "active", current_period_end=None):
        c = self.conn.cursor()
        c.execute(
            "REPLACE INTO user_subscriptions (user_id, plan, status, current_period_end) VALUES (?, ?, ?, ?)",
            (
                user_id,
                plan,
                status,
                current_period_end.isoformat() if current_period_end else None,
            ),
        )
        self.conn.commit()

    def get_subscription(self, user_id: str) -> Optional[dict]:
        c = self.conn.cursor()
        c.execute(
            "SELECT plan, status, current_period_end FROM user_subscriptions WHERE user_id=?",
            (user_id,),
        )
        r = c.fetchone()
        if r is None:
            return None
        return {
            "plan": r[0],
            "status": r[1],
            "current_period_end": datetime.fromisoformat(r[2]) if r[2] else None,
        }

    def get_usage(self, user_id: str, period_start: date) -> dict:
        c = self.conn.cursor()
        c.execute(
            f"SELECT {', '.join(USAGE_COLUMNS)} FROM usage_tracking WHERE user_id=? AND period_start=?",
            (user_id, period_start.isoformat()),
        )
        r = c.fetchone()
        if r is None:
            return {column: 0 for column in USAGE_COLUMNS}
        return {column: r[i] or 0 for i, column in enumerate(USAGE_COLUMNS)}

    @_persistence
    def increment_usage(self, user_id: str, period_start: date, column: str):
        if column not in USAGE_COLUMNS:
            raise ValueError(f"Unknown usage column: {column}")
        c = self.conn.cursor()
        c.execute(
            f"""INSERT INTO usage_tracking (user_id, period_start, {column})
                VALUES (?, ?, 1)
                ON CONFLICT (user_id, period_start)
                DO UPDATE SET {column} = {column} + 1""",
            (user_id, period_start.isoformat()),
        )
        self.conn.commit()

    # --- GENERATOR METERING ---

    @_persistence
    def record_api_usage(self, endpoint, model, response_time_ms, status, prompt_chars, response_chars):
        c = self.conn.cursor()
        c.execute(
            """INSERT INTO api_usage
               (created_at, endpoint, model, response_time_ms, status, prompt_chars, response_chars)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                datetime.now().isoformat(timespec="seconds"),
                endpoint,
                model,
                response_time_ms,
                status,
                prompt_chars,
                response_chars,
            ),
        )
        self.conn.commit()

    def get_api_usage(self, limit=50):
        c = self.conn.cursor()
        c.execute(
            """SELECT endpoint, model, response_time_ms, status, prompt_chars, response_chars
               FROM api_usage ORDER BY id DESC LIMIT ?""",
            (limit,),
        )
        return [dict(r) for r in c.fetchall()]
