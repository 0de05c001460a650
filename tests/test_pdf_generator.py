"""
Unit tests for pdf_generator.py
"""

import unittest

from aggregator import build_shopping_list
from models import RecipeData, RecipeEntry, ShoppingList
from pdf_generator import MealPlanPDF, generate_pdf


class TestMealPlanPDF(unittest.TestCase):
    """Test cases for MealPlanPDF class."""

    def test_clean_text(self):
        """Test text cleaning functionality."""
        pdf = MealPlanPDF()

        # Test normal text
        self.assertEqual(pdf.clean_text("Hello World"), "Hello World")

        # Test empty string
        self.assertEqual(pdf.clean_text(""), "")

        # Test None
        self.assertEqual(pdf.clean_text(None), "")

        # Swedish letters are latin-1 and survive
        self.assertEqual(pdf.clean_text("Köttbullar på svenska"), "Köttbullar på svenska")

        # Emoji do not
        self.assertEqual(pdf.clean_text("Gryta 🍲"), "Gryta ?")


class TestGeneratePDF(unittest.TestCase):
    """Test cases for generate_pdf function."""

    def setUp(self):
        recipe = RecipeData.model_validate(
            {
                "name": "Ärtsoppa",
                "description": "Klassisk torsdagsmat",
                "servings": 4,
                "prepTime": "15 min",
                "cookTime": "60 min",
                "estimatedCost": "45",
                "ingredients": [
                    {"name": "Gula ärtor", "amount": "500", "unit": "g"},
                    {"name": "Salt", "amount": None, "unit": ""},
                ],
                "instructions": ["Blötlägg ärtorna.", "Koka i en timme."],
                "tips": "Servera med senap.",
            }
        )
        self.entries = [
            RecipeEntry(meal_plan_id=1, day_number=1, recipe=recipe),
            RecipeEntry(meal_plan_id=1, day_number=2, recipe=RecipeData.placeholder(2)),
        ]

    def test_generate_pdf_basic(self):
        """Test basic PDF generation."""
        result = generate_pdf("Veckoplan 2026-10-19", self.entries, build_shopping_list(self.entries))
        self.assertIsInstance(result, bytes)
        self.assertTrue(result.startswith(b"%PDF"))

    def test_generate_pdf_empty_plan(self):
        """Test PDF generation with no recipes."""
        result = generate_pdf("Tom plan", [], ShoppingList())
        self.assertTrue(result.startswith(b"%PDF"))


if __name__ == "__main__":
    unittest.main()
