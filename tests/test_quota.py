"""
Unit tests for quota.py
"""

import os
import tempfile
import unittest
from datetime import date, datetime

from config import UPGRADE_PATH
from database import DBManager
from quota import CREATE_MEAL_PLAN, REGENERATE_RECIPE, UsageLimiter, month_start

NOW = datetime(2026, 10, 19, 12, 0)


class TestUsageLimiter(unittest.TestCase):
    """Test cases for UsageLimiter."""

    def setUp(self):
        self.temp_db = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
        self.temp_db.close()
        self.db = DBManager(self.temp_db.name)
        self.limiter = UsageLimiter(self.db, clock=lambda: NOW)

    def tearDown(self):
        self.db.conn.close()
        os.unlink(self.temp_db.name)

    def test_anonymous_is_always_allowed(self):
        for _ in range(10):
            self.limiter.increment_usage(None, CREATE_MEAL_PLAN)
        self.assertTrue(self.limiter.can_perform_action(None, CREATE_MEAL_PLAN).allowed)

    def test_unknown_action_is_allowed(self):
        self.assertTrue(self.limiter.can_perform_action("u1", "export_pdf").allowed)

    def test_free_plan_limit(self):
        for _ in range(3):
            decision = self.limiter.can_perform_action("u1", CREATE_MEAL_PLAN)
            self.assertTrue(decision.allowed)
            self.limiter.increment_usage("u1", CREATE_MEAL_PLAN)

        decision = self.limiter.can_perform_action("u1", CREATE_MEAL_PLAN)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.limit, 3)
        self.assertEqual(decision.used, 3)
        self.assertEqual(decision.upgrade_path, UPGRADE_PATH)
        self.assertIn("veckomenyer", decision.reason)

        # Regenerations are counted separately
        self.assertTrue(self.limiter.can_perform_action("u1", REGENERATE_RECIPE).allowed)

    def test_regeneration_limit(self):
        for _ in range(5):
            self.limiter.increment_usage("u1", REGENERATE_RECIPE)
        decision = self.limiter.can_perform_action("u1", REGENERATE_RECIPE)
        self.assertFalse(decision.allowed)
        self.assertIn("receptbyten", decision.reason)

    def test_counters_reset_each_month(self):
        for _ in range(3):
            self.limiter.increment_usage("u1", CREATE_MEAL_PLAN)
        next_month = UsageLimiter(self.db, clock=lambda: datetime(2026, 11, 2))
        self.assertTrue(next_month.can_perform_action("u1", CREATE_MEAL_PLAN).allowed)

    def test_premium_is_unlimited(self):
        self.db.save_subscription("u1", "premium", current_period_end=datetime(2026, 11, 19))
        for _ in range(10):
            self.limiter.increment_usage("u1", CREATE_MEAL_PLAN)
        self.assertEqual(self.limiter.get_plan("u1"), "premium")
        self.assertTrue(self.limiter.can_perform_action("u1", CREATE_MEAL_PLAN).allowed)

    def test_expired_or_inactive_premium_is_free(self):
        self.db.save_subscription("u1", "premium", current_period_end=datetime(2026, 10, 1))
        self.db.save_subscription("u2", "premium", status="canceled")
        self.assertEqual(self.limiter.get_plan("u1"), "free")
        self.assertEqual(self.limiter.get_plan("u2"), "free")
        self.assertEqual(self.limiter.get_plan("nobody"), "free")


class TestMonthStart(unittest.TestCase):

    def test_month_start(self):
        self.assertEqual(month_start(date(2026, 10, 19)), date(2026, 10, 1))


if __name__ == "__main__":
    unittest.main()
