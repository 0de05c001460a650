"""
Unit tests for extractor.py
"""

import json
import unittest

from errors import ExtractionFailure
from extractor import extract_recipe

RECIPE = {
    "name": "Kycklinggryta",
    "description": "Krämig gryta",
    "servings": 4,
    "estimatedCost": "120",
    "ingredients": [{"name": "Kycklingfilé", "amount": "500", "unit": "g"}],
    "instructions": ["Stek kycklingen.", "Tillsätt grädde."],
}


class TestExtractRecipe(unittest.TestCase):
    """Test cases for extract_recipe."""

    def test_bare_json(self):
        recipe = extract_recipe(json.dumps(RECIPE))
        self.assertEqual(recipe.name, "Kycklinggryta")
        self.assertEqual(recipe.cost, 120.0)
        self.assertEqual(recipe.main_ingredient, "kycklingfilé")

    def test_code_fence(self):
        text = "Här är receptet:\n```json\n" + json.dumps(RECIPE) + "\n```\nSmaklig måltid!"
        self.assertEqual(extract_recipe(text).name, "Kycklinggryta")

    def test_surrounding_prose(self):
        text = "Självklart! " + json.dumps(RECIPE, ensure_ascii=False) + " Hoppas det smakar."
        recipe = extract_recipe(text)
        self.assertEqual(len(recipe.ingredients), 1)
        self.assertEqual(recipe.instructions[1], "Tillsätt grädde.")

    def test_unknown_keys_survive(self):
        data = dict(RECIPE, wine="Rioja")
        recipe = extract_recipe(json.dumps(data))
        self.assertEqual(recipe.to_payload()["wine"], "Rioja")

    def test_placeholder_flag_is_ignored(self):
        data = dict(RECIPE, isPlaceholder=True)
        self.assertFalse(extract_recipe(json.dumps(data)).is_placeholder)

    def test_loosely_typed_optional_fields(self):
        """Units in nutrition values and text servings do not reject the recipe."""
        data = dict(
            RECIPE,
            servings="4 portioner",
            nutrition={"calories": "450 kcal", "protein": "25g", "carbs": "okänt", "fat": 12},
        )
        recipe = extract_recipe(json.dumps(data))
        self.assertEqual(recipe.servings, 4)
        self.assertEqual(recipe.nutrition.calories, 450.0)
        self.assertEqual(recipe.nutrition.protein, 25.0)
        self.assertIsNone(recipe.nutrition.carbs)
        self.assertEqual(recipe.nutrition.fat, 12.0)

    def test_unusable_optional_fields_are_dropped(self):
        data = dict(
            RECIPE,
            servings="några",
            nutrition="mycket protein",
            estimatedCost={"min": 80},
            ingredients=[{"name": "Ris", "amount": [1, 2], "unit": None}],
        )
        recipe = extract_recipe(json.dumps(data))
        self.assertIsNone(recipe.servings)
        self.assertIsNone(recipe.nutrition)
        self.assertEqual(recipe.cost, 0.0)
        self.assertIsNone(recipe.ingredients[0].amount)
        self.assertEqual(recipe.ingredients[0].unit, "")

    def test_required_fields_stay_strict(self):
        with self.assertRaises(ExtractionFailure):
            extract_recipe(json.dumps(dict(RECIPE, ingredients=[{"name": ""}])))
        with self.assertRaises(ExtractionFailure):
            extract_recipe(json.dumps(dict(RECIPE, name="")))

    def test_invalid_json_keeps_short_excerpt(self):
        text = "Tyvärr kan jag inte hjälpa till med det. " * 20
        with self.assertRaises(ExtractionFailure) as ctx:
            extract_recipe(text)
        self.assertLessEqual(len(ctx.exception.excerpt), 200)
        self.assertTrue(ctx.exception.excerpt.startswith("Tyvärr"))

    def test_missing_required_fields(self):
        with self.assertRaises(ExtractionFailure) as ctx:
            extract_recipe(json.dumps({"name": "Bara namn"}))
        self.assertIn("ingredients", ctx.exception.message)

    def test_not_an_object(self):
        with self.assertRaises(ExtractionFailure):
            extract_recipe("[1, 2, 3]")

    def test_empty_answer(self):
        with self.assertRaises(ExtractionFailure):
            extract_recipe("")
        with self.assertRaises(ExtractionFailure):
            extract_recipe(None)


if __name__ == "__main__":
    unittest.main()
