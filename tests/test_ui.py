"""
Unit tests for the table helpers in ui.py and the settings helpers in utils.py
"""

import unittest

from aggregator import build_shopping_list
from database import DBManager
from models import Preferences, RecipeData, RecipeEntry
from ui import nutrition_frame, shopping_list_frame
from utils import load_default_preferences, save_default_preferences


class TestFrames(unittest.TestCase):

    def setUp(self):
        recipe = RecipeData.model_validate(
            {
                "name": "Tacos",
                "nutrition": {"calories": 620, "protein": 32},
                "ingredients": [
                    {"name": "Nötfärs", "amount": "500", "unit": "g"},
                    {"name": "Tomat", "amount": "2", "unit": "st"},
                ],
                "instructions": ["Stek färsen."],
            }
        )
        self.entries = [
            RecipeEntry(meal_plan_id=1, day_number=1, recipe=recipe),
            RecipeEntry(meal_plan_id=1, day_number=2, recipe=RecipeData.placeholder(2)),
        ]

    def test_nutrition_frame_skips_days_without_data(self):
        df = nutrition_frame(self.entries)
        self.assertEqual(list(df["Dag"]), ["Dag 1"])
        self.assertEqual(df.iloc[0]["Kalorier"], 620)
        self.assertEqual(df.iloc[0]["Fett"], 0)

    def test_shopping_list_frame(self):
        df = shopping_list_frame(build_shopping_list(self.entries))
        self.assertEqual(list(df["Vara"]), ["Tomat", "Nötfärs"])
        self.assertEqual(list(df["Mängd"]), ["2 st", "500 g"])
        self.assertEqual(list(df["Dagar"]), ["1", "1"])


class TestDefaultPreferences(unittest.TestCase):

    def setUp(self):
        self.db = DBManager(":memory:")

    def tearDown(self):
        self.db.close()

    def test_defaults_when_nothing_saved(self):
        self.assertEqual(load_default_preferences(self.db), Preferences())

    def test_saved_preferences(self):
        prefs = Preferences(servings=2, diet="vegan", product_mode="free-generate")
        save_default_preferences(self.db, prefs)
        self.assertEqual(load_default_preferences(self.db), prefs)

    def test_corrupt_setting_is_ignored(self):
        self.db.save_setting("default_preferences", '{"days": 99}')
        self.assertEqual(load_default_preferences(self.db), Preferences())


if __name__ == "__main__":
    unittest.main()
