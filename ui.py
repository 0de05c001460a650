"""
UI components and styles for the Veckomeny Streamlit app.
"""

from typing import Callable, List, Optional

import pandas as pd
import streamlit as st

from aggregator import format_quantity
from models import RecipeEntry, ShoppingList

STREAMLIT_STYLE = """
<style>
    .meal-card {
        background-color: #ffffff; border: 1px solid #e0e0e0; border-radius: 10px;
        padding: 20px; margin-bottom: 15px; box-shadow: 0 4px 6px rgba(0,0,0,0.05);
        border-left: 8px solid #2e8b57;
    }
    .meal-card.placeholder { border-left-color: #ff4b4b; }
    .meal-header { font-size: 1.2rem; font-weight: 700; color: #1f1f1f; margin-bottom: 8px; }
    .meal-body { font-size: 1rem; color: #4f4f4f; line-height: 1.5; }
</style>
"""


def nutrition_frame(entries: List[RecipeEntry]) -> pd.DataFrame:
    """Per-day nutrition table; days without nutrition data are left out."""
    rows = []
    for entry in entries:
        n = entry.recipe.nutrition
        if n is None:
            continue
        rows.append(
            {
                "Dag": f"Dag {entry.day_number}",
                "Kalorier": n.calories or 0,
                "Protein": n.protein or 0,
                "Kolhydrater": n.carbs or 0,
                "Fett": n.fat or 0,
            }
        )
    return pd.DataFrame(rows, columns=["Dag", "Kalorier", "Protein", "Kolhydrater", "Fett"])


def shopping_list_frame(shopping_list: ShoppingList) -> pd.DataFrame:
    """Shopping list as a table, in the aggregator's order."""
    return pd.DataFrame(
        [
            {
                "Kategori": item.category,
                "Vara": item.name,
                "Mängd": format_quantity(item.total_amount, item.unit),
                "Dagar": ", ".join(str(d) for d in item.source_days),
            }
            for item in shopping_list.items
        ],
        columns=["Kategori", "Vara", "Mängd", "Dagar"],
    )


def render_plan_ui(entries: List[RecipeEntry], on_regenerate: Optional[Callable[[int], None]] = None):
    """
    Render the plan's recipes with a nutrition overview.

    Args:
        entries (List[RecipeEntry]): The plan's recipes in day order.
        on_regenerate (Optional[Callable[[int], None]]): Called with the day
            number when the user asks for a new recipe.
    """
    df_nutri = nutrition_frame(entries)
    if not df_nutri.empty:
        st.subheader("📊 Näringsvärden per portion")
        c1, c2 = st.columns(2)
        with c1:
            st.bar_chart(df_nutri.set_index("Dag")["Kalorier"], color="#2e8b57")
        with c2:
            st.bar_chart(df_nutri.set_index("Dag")[["Protein", "Kolhydrater", "Fett"]])

    st.subheader("📅 Veckans recept")
    if not entries:
        st.info("Inga recept ännu.")
        return
    tabs = st.tabs([f"Dag {entry.day_number}" for entry in entries])
    for tab, entry in zip(tabs, entries):
        recipe = entry.recipe
        with tab:
            css = "meal-card placeholder" if recipe.is_placeholder else "meal-card"
            st.markdown(
                f"""<div class="{css}"><div class="meal-header">{recipe.name}</div><div class="meal-body">{recipe.description}</div></div>""",
                unsafe_allow_html=True,
            )
            if recipe.ingredients:
                st.markdown(
                    "\n".join(
                        f"- {i.amount or ''} {i.unit} {i.name}".replace("  ", " ")
                        for i in recipe.ingredients
                    )
                )
            with st.expander("👨‍🍳 Gör så här"):
                for number, step in enumerate(recipe.instructions, start=1):
                    st.write(f"{number}. {step}")
                if recipe.tips:
                    st.caption(f"Tips: {recipe.tips}")
            if on_regenerate and st.button("🔄 Nytt recept", key=f"regen_{entry.meal_plan_id}_{entry.day_number}"):
                on_regenerate(entry.day_number)


def render_shopping_list(shopping_list: Optional[ShoppingList]):
    st.subheader("🛒 Inköpslista")
    if shopping_list is None or not shopping_list.items:
        st.write("Inga ingredienser.")
        return
    st.dataframe(shopping_list_frame(shopping_list), use_container_width=True, hide_index=True)
    st.metric("Uppskattad kostnad", f"{shopping_list.total_cost:.2f} kr")
