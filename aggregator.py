"""
Shopping list aggregator.

Merges the ingredients of every recipe in a plan into one categorized list.
The same function serves initial generation, day regeneration and manual
substitution, so the persisted list always matches the persisted recipes.
"""

import re
import unicodedata
from typing import Iterable, List, Tuple

from models import AggregatedItem, RecipeData, RecipeEntry, ShoppingList, parse_number

DEFAULT_CATEGORY = "Övrigt"

# Checked in order, first match wins
CATEGORY_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("Kött", re.compile(r"kyckling|kött|biff|fläsk|lamm|kalv|korv|färs|bacon")),
    ("Fisk", re.compile(r"fisk|lax|torsk|räk|musslor|sill|tonfisk")),
    (
        "Grönsaker",
        re.compile(r"tomat|gurka|sallad|paprika|lök|morot|potatis|broccoli|spenat|zucchini|aubergine|svamp"),
    ),
    ("Frukt", re.compile(r"äpple|banan|apelsin|päron|druv|melon|bär|citron|lime")),
    ("Mejeri", re.compile(r"mjölk|yoghurt|ost|smör|grädde|fil|ägg|créme")),
    ("Spannmål", re.compile(r"bröd|pasta|ris|müsli|flingor|havre|mjöl|couscous|quinoa")),
    ("Dryck", re.compile(r"juice|läsk|vatten|kaffe|te|öl|vin")),
]

# Swedish alphabet: å, ä and ö come after z; ü sorts as y
_SWEDISH_TAIL = str.maketrans({"å": "{", "ä": "|", "æ": "|", "ö": "}", "ø": "}", "ü": "y"})


def categorize_ingredient(name: str) -> str:
    """Category for an ingredient name; Övrigt when nothing matches."""
    name_lower = (name or "").lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(name_lower):
            return category
    return DEFAULT_CATEGORY


def swedish_sort_key(text: str) -> Tuple[str, str]:
    """
    Collation key that orders words the way a Swedish reader expects.

    Case and accents other than å, ä and ö are ignored on the first level;
    the original text breaks ties so the order is fully deterministic.
    """
    folded = (text or "").casefold().translate(_SWEDISH_TAIL)
    decomposed = unicodedata.normalize("NFD", folded)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return base, text or ""


def _recipes_by_day(entries: Iterable) -> List[Tuple[int, RecipeData]]:
    pairs = []
    for index, entry in enumerate(entries, start=1):
        if isinstance(entry, RecipeEntry):
            pairs.append((entry.day_number, entry.recipe))
        else:
            pairs.append((index, entry))
    return sorted(pairs, key=lambda pair: pair[0])


def plan_total_cost(entries: Iterable) -> float:
    """Sum of every recipe's estimated cost, recomputed from scratch."""
    return round(sum(recipe.cost for _, recipe in _recipes_by_day(entries)), 2)


def aggregate_ingredients(entries: Iterable) -> List[AggregatedItem]:
    """
    Group ingredients by lowercased name and sum their amounts.

    Args:
        entries (Iterable): RecipeEntry objects, or RecipeData in day order.

    Returns:
        List[AggregatedItem]: Sorted by category, then name.
    """
    groups = {}
    for day_number, recipe in _recipes_by_day(entries):
        for ingredient in recipe.ingredients:
            key = ingredient.name.strip().lower()
            if not key:
                continue
            group = groups.get(key)
            if group is None:
                name = ingredient.name.strip()
                group = groups[key] = {
                    "name": name,
                    "total": 0.0,
                    "unit": ingredient.unit,
                    "category": categorize_ingredient(name),
                    "days": [],
                }
            group["total"] += parse_number(ingredient.amount)
            if day_number not in group["days"]:
                group["days"].append(day_number)

    items = [
        AggregatedItem(
            name=g["name"],
            total_amount=round(g["total"], 2),
            unit=g["unit"],
            category=g["category"],
            source_days=g["days"],
        )
        for g in groups.values()
    ]
    items.sort(key=lambda item: (swedish_sort_key(item.category), swedish_sort_key(item.name)))
    return items


def build_shopping_list(entries: Iterable, meal_plan_id=None) -> ShoppingList:
    """Full shopping list (items and total cost) for a plan's recipes."""
    entries = list(entries)
    return ShoppingList(
        meal_plan_id=meal_plan_id,
        items=aggregate_ingredients(entries),
        total_cost=plan_total_cost(entries),
    )


def format_quantity(amount: float, unit: str) -> str:
    """Display text for a summed amount: 4.0 st -> "4 st", 0 -> unit only."""
    if not amount:
        return unit or ""
    text = f"{amount:.2f}".rstrip("0").rstrip(".")
    return f"{text} {unit}".strip()
