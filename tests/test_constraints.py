"""
Unit tests for constraints.py
"""

import unittest

from constraints import FAMILY_FRIENDLY, compile_constraints, render_constraints
from models import Preferences


class TestCompileConstraints(unittest.TestCase):
    """Test cases for compile_constraints."""

    def test_defaults_produce_no_constraints(self):
        """Sentinel values add nothing."""
        self.assertEqual(compile_constraints(Preferences()), [])

    def test_individual_diet(self):
        """Keto diet maps to its Swedish label."""
        prefs = Preferences(diet="keto")
        result = compile_constraints(prefs)
        self.assertEqual(len(result), 1)
        self.assertTrue(result[0].startswith("Kosthållning: Keto"))

    def test_household_replaces_individual_diet(self):
        """Household restrictions win over the individual diet and protein."""
        prefs = Preferences(
            diet="keto",
            protein_type="meat",
            use_household=True,
            household_members=[{"name": "Anna"}, {"name": "Bo"}, {"name": "Cia"}],
            household_restrictions={
                "diet_type": "vegan",
                "allergies": ["jordnötter"],
                "intolerances": ["laktos"],
                "dislikes": ["koriander"],
            },
        )
        result = compile_constraints(prefs)

        self.assertEqual(result[0], "Hushållet består av 3 personer")
        self.assertIn("Veganskt", result[1])
        self.assertIn("jordnötter", result[2])
        self.assertTrue(result[2].startswith("ALLERGIER"))
        self.assertTrue(result[3].startswith("INTOLERANSER"))
        self.assertIn("koriander", result[4])
        self.assertFalse(any("Keto" in c for c in result))
        self.assertFalse(any("kött" in c and "ENDAST" in c for c in result))

    def test_household_size_falls_back_to_servings(self):
        prefs = Preferences(
            servings=2,
            use_household=True,
            household_restrictions={"diet_type": "none"},
        )
        self.assertEqual(compile_constraints(prefs), ["Hushållet består av 2 personer"])

    def test_household_flag_without_restrictions_uses_individual(self):
        prefs = Preferences(diet="vegetarian", use_household=True)
        result = compile_constraints(prefs)
        self.assertEqual(len(result), 1)
        self.assertIn("Vegetariskt", result[0])

    def test_order_of_style_and_free_text(self):
        """Cuisine, time and skill come before family and ingredient wishes."""
        prefs = Preferences(
            cuisine_style="italian",
            cooking_time="quick",
            skill_level="easy",
            family_friendly=True,
            excluded_ingredients="svamp",
            preferred_ingredients="spenat",
        )
        result = compile_constraints(prefs)
        self.assertEqual(len(result), 6)
        self.assertIn("Italienskt", result[0])
        self.assertIn("under 30 minuter", result[1])
        self.assertIn("Enkelt", result[2])
        self.assertEqual(result[3], FAMILY_FRIENDLY)
        self.assertEqual(result[4], "Undvik dessa ingredienser: svamp")
        self.assertIn("spenat", result[5])

    def test_unknown_value_is_passed_through(self):
        prefs = Preferences(diet="paleo", cuisine_style="thai")
        result = compile_constraints(prefs)
        self.assertEqual(result, ["Kosthållning: paleo", "Matstil: thai"])


class TestRenderConstraints(unittest.TestCase):

    def test_render_empty(self):
        self.assertEqual(render_constraints([]), "")

    def test_render_bullets(self):
        text = render_constraints(["A", "B"])
        self.assertEqual(text, "PREFERENSER:\n- A\n- B")


if __name__ == "__main__":
    unittest.main()
