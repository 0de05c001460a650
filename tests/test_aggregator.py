"""
Unit tests for aggregator.py
"""

import unittest

from aggregator import (
    aggregate_ingredients,
    build_shopping_list,
    categorize_ingredient,
    format_quantity,
    plan_total_cost,
    swedish_sort_key,
)
from models import RecipeData, RecipeEntry


def _recipe(name, ingredients, cost="0"):
    return RecipeData(
        name=name,
        estimated_cost=cost,
        ingredients=[{"name": n, "amount": a, "unit": u} for n, a, u in ingredients],
        instructions=["Laga maten."],
    )


def _entry(day, recipe):
    return RecipeEntry(meal_plan_id=1, day_number=day, recipe=recipe)


class TestCategorizeIngredient(unittest.TestCase):

    def test_known_categories(self):
        self.assertEqual(categorize_ingredient("Kycklingfilé"), "Kött")
        self.assertEqual(categorize_ingredient("Laxfilé"), "Fisk")
        self.assertEqual(categorize_ingredient("Körsbärstomater"), "Grönsaker")
        self.assertEqual(categorize_ingredient("Mjölk"), "Mejeri")
        self.assertEqual(categorize_ingredient("Pasta"), "Spannmål")

    def test_unknown_goes_to_other(self):
        self.assertEqual(categorize_ingredient("Xyzzy"), "Övrigt")
        self.assertEqual(categorize_ingredient(""), "Övrigt")

    def test_first_match_wins(self):
        # "fläsk" (Kött) is checked before "ost" (Mejeri)
        self.assertEqual(categorize_ingredient("Fläskkotlett med ost"), "Kött")


class TestSwedishSortKey(unittest.TestCase):

    def test_swedish_letters_after_z(self):
        words = ["Ärtor", "Zucchini", "Övrigt", "Ägg", "Åkerbär", "apelsin"]
        self.assertEqual(
            sorted(words, key=swedish_sort_key),
            ["apelsin", "Zucchini", "Åkerbär", "Ägg", "Ärtor", "Övrigt"],
        )

    def test_accents_fold(self):
        self.assertLess(swedish_sort_key("crème"), swedish_sort_key("cs"))


class TestAggregateIngredients(unittest.TestCase):
    """Test cases for aggregate_ingredients."""

    def test_sums_same_ingredient_across_days(self):
        entries = [
            _entry(1, _recipe("Sallad", [("Tomat", "2", "st")])),
            _entry(2, _recipe("Soppa", [("tomat ", 2, "st")])),
        ]
        items = aggregate_ingredients(entries)
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].name, "Tomat")
        self.assertEqual(items[0].total_amount, 4.0)
        self.assertEqual(items[0].unit, "st")
        self.assertEqual(items[0].category, "Grönsaker")
        self.assertEqual(items[0].source_days, [1, 2])

    def test_first_unit_wins(self):
        entries = [
            _recipe("A", [("Mjölk", "2", "dl")]),
            _recipe("B", [("Mjölk", "1", "l")]),
        ]
        items = aggregate_ingredients(entries)
        self.assertEqual(items[0].unit, "dl")
        self.assertEqual(items[0].total_amount, 3.0)

    def test_unparseable_amounts_count_as_zero(self):
        entries = [_recipe("A", [("Salt", "en nypa", ""), ("Salt", None, ""), ("Salt", "1,5", "")])]
        self.assertEqual(aggregate_ingredients(entries)[0].total_amount, 1.5)

    def test_source_days_are_unique(self):
        entries = [_entry(3, _recipe("A", [("Lök", "1", "st"), ("lök", "1", "st")]))]
        item = aggregate_ingredients(entries)[0]
        self.assertEqual(item.source_days, [3])
        self.assertEqual(item.total_amount, 2.0)

    def test_sorted_by_category_then_name(self):
        entries = [
            _recipe("A", [("Xyzzy", "1", ""), ("Laxfilé", "1", ""), ("Kycklingfilé", "1", "")]),
            _recipe("B", [("Broccoli", "1", ""), ("Bacon", "1", ""), ("Ägg", "2", "st")]),
        ]
        names = [(i.category, i.name) for i in aggregate_ingredients(entries)]
        self.assertEqual(
            names,
            [
                ("Fisk", "Laxfilé"),
                ("Grönsaker", "Broccoli"),
                ("Kött", "Bacon"),
                ("Kött", "Kycklingfilé"),
                ("Mejeri", "Ägg"),
                ("Övrigt", "Xyzzy"),
            ],
        )

    def test_placeholder_days_contribute_nothing(self):
        entries = [
            _entry(1, RecipeData.placeholder(1)),
            _entry(2, _recipe("Soppa", [("Morot", "3", "st")], cost="80")),
        ]
        shopping_list = build_shopping_list(entries, meal_plan_id=9)
        self.assertEqual([i.name for i in shopping_list.items], ["Morot"])
        self.assertEqual(shopping_list.total_cost, 80.0)
        self.assertEqual(shopping_list.meal_plan_id, 9)

    def test_idempotent_and_stable(self):
        entries = [
            _entry(2, _recipe("B", [("Ris", "2", "dl"), ("Tomat", "1", "st")], cost="40")),
            _entry(1, _recipe("A", [("Tomat", "2", "st")], cost="60")),
        ]
        first = build_shopping_list(entries)
        second = build_shopping_list(list(reversed(entries)))
        self.assertEqual(first.model_dump(), second.model_dump())
        self.assertEqual(first.items[0].name, "Tomat")
        self.assertEqual(first.items[0].source_days, [1, 2])


class TestCosts(unittest.TestCase):

    def test_plan_total_cost(self):
        entries = [
            _recipe("A", [("Ris", "1", "dl")], cost="120,50"),
            _recipe("B", [("Ris", "1", "dl")], cost="ca 90"),
            _recipe("C", [("Ris", "1", "dl")], cost=75),
        ]
        self.assertEqual(plan_total_cost(entries), 195.5)


class TestFormatQuantity(unittest.TestCase):

    def test_format(self):
        self.assertEqual(format_quantity(4.0, "st"), "4 st")
        self.assertEqual(format_quantity(1.25, "dl"), "1.25 dl")
        self.assertEqual(format_quantity(0, "efter smak"), "efter smak")
        self.assertEqual(format_quantity(2.5, ""), "2.5")


if __name__ == "__main__":
    unittest.main()
