"""
Prompt builder.

Selects the template for the product mode and renders it with the product
list, the already-used main ingredients and the compiled constraints.
"""

import re
from typing import Iterable, List, Optional, Sequence

from langchain_core.prompts import PromptTemplate
from loguru import logger

from constraints import render_constraints
from errors import EmptyCatalog, EmptyShoppingList
from models import DEFAULT_PRODUCT_MODE, Preferences, Product
from prompts import (
    EMPTY_CATALOG_MESSAGE,
    EMPTY_SHOPPING_LIST_MESSAGE,
    EXCLUDE_USED_TEMPLATE,
    MODE_TEMPLATES,
)

_BLANK_RUNS = re.compile(r"\n{3,}")

_TEMPLATES = {
    mode: PromptTemplate.from_template(template) for mode, template in MODE_TEMPLATES.items()
}


def format_product_list(products: Iterable[Product]) -> str:
    """One "- name: price kr/unit" line per product."""
    lines = []
    for p in products:
        line = f"- {p.name}: {p.price:g} kr/{p.unit}"
        if p.store:
            line += f" ({p.store})"
        lines.append(line)
    return "\n".join(lines)


def ensure_products(mode: str, products: Sequence[Product]) -> None:
    """
    Fail fast when the mode cannot work without products.

    Raises:
        EmptyShoppingList: shopping-list mode with no items.
        EmptyCatalog: store-only mode with no catalog products.
    """
    if products:
        return
    if mode == "shopping-list":
        raise EmptyShoppingList(EMPTY_SHOPPING_LIST_MESSAGE)
    if mode == "store-only":
        raise EmptyCatalog(EMPTY_CATALOG_MESSAGE)


def resolve_products(prefs: Preferences, catalog) -> List[Product]:
    """
    Collect the products a run may draw from.

    Args:
        prefs (Preferences): The run's preferences.
        catalog: Object with get_products(stores) -> List[Product].

    Returns:
        List[Product]: Shopping-list items, catalog products, or nothing for
        free-generate.
    """
    mode = prefs.product_mode
    if mode == "shopping-list":
        products = [
            Product(name=item.name, price=item.price, unit=item.unit)
            for item in prefs.shopping_list_items
        ]
    elif mode == "free-generate":
        products = []
    else:
        products = list(catalog.get_products(prefs.selected_stores))
        logger.info(
            f"Found {len(products)} products from stores: {', '.join(prefs.selected_stores)}"
        )

    ensure_products(mode, products)
    return products


def build_prompt(
    mode: Optional[str],
    products: Sequence[Product],
    used_ingredients: Sequence[str],
    constraints: Sequence[str],
    day_number: int,
    total_days: int,
    servings: int,
    max_cost_per_serving: float,
) -> str:
    """
    Render the generation prompt for one plan day.

    Args:
        mode (Optional[str]): Product mode; shopping-list when unset.
        products (Sequence[Product]): Products for the mode (ignored by free-generate).
        used_ingredients (Sequence[str]): Main ingredients of other days.
        constraints (Sequence[str]): Output of compile_constraints.
        day_number (int): The day being generated, 1-based.
        total_days (int): Number of days in the plan.
        servings (int): Portions per recipe.
        max_cost_per_serving (float): Budget per portion in kr.

    Returns:
        str: The prompt text.
    """
    mode = mode or DEFAULT_PRODUCT_MODE
    if mode not in _TEMPLATES:
        raise ValueError(f"Unknown product mode: {mode}")
    ensure_products(mode, products)

    used = [u for u in dict.fromkeys(used_ingredients) if u]
    exclude_block = EXCLUDE_USED_TEMPLATE.format(used=", ".join(used)) if used else ""

    template = _TEMPLATES[mode]
    values = {
        "product_list": format_product_list(products),
        "exclude_block": exclude_block,
        "constraints_block": render_constraints(list(constraints)),
        "max_cost": f"{max_cost_per_serving:g}",
        "servings": servings,
        "day_number": day_number,
        "total_days": total_days,
    }
    prompt = template.format(**{k: v for k, v in values.items() if k in template.input_variables})
    return _BLANK_RUNS.sub("\n\n", prompt).strip()
