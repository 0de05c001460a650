"""
Main application entry point for Veckomeny.

This Streamlit application collects the user's preferences, runs the day-by-day
recipe generation and shows the resulting plan, its shopping list and the plan
history. Days can be regenerated one at a time and plans exported to PDF.
"""

import asyncio

import streamlit as st
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from config import (
    DEFAULT_STORES,
    LOG_FILE,
    LOG_LEVEL,
    MAX_DAYS,
    PAGE_ICON,
    PAGE_TITLE,
)
from constraints import COOKING_TIME_LABELS, CUISINE_LABELS, DIET_LABELS, SKILL_LABELS
from database import DBManager
from errors import MealPlanError
from generator import GeminiRecipeGenerator, MeteredGenerator
from lifecycle import MealPlanService
from logger import setup_logger
from models import Preferences
from pdf_generator import generate_pdf
from quota import UsageLimiter
from ui import STREAMLIT_STYLE, render_plan_ui, render_shopping_list
from utils import get_api_key, load_default_preferences, save_default_preferences

PRODUCT_MODES = {
    "shopping-list": "Min inköpslista",
    "store-plus": "Veckans erbjudanden + annat",
    "store-only": "Endast veckans erbjudanden",
    "free-generate": "Fritt",
}

# ==========================================
# 1. CREDENTIAL CHECK
# ==========================================
GOOGLE_API_KEY = get_api_key()


@st.cache_resource
def get_services():
    """One database, generator and service per Streamlit server process."""
    setup_logger(level=LOG_LEVEL, log_file=LOG_FILE)
    db = DBManager()
    generator = MeteredGenerator(GeminiRecipeGenerator(api_key=GOOGLE_API_KEY), db)
    service = MealPlanService(generator, db, quota=UsageLimiter(db))
    return db, service


def _choice(label, options, current, key):
    keys = list(options)
    index = keys.index(current) if current in keys else 0
    return st.selectbox(label, keys, index=index, format_func=lambda k: options[k], key=key)


def preferences_form(defaults: Preferences) -> Preferences:
    """Sidebar form; returns the preferences for the next run."""
    st.header("⚙️ Preferenser")
    servings = st.number_input("Portioner", min_value=1, max_value=20, value=defaults.servings)
    days = st.number_input("Dagar", min_value=1, max_value=MAX_DAYS, value=defaults.days)
    max_cost = st.number_input(
        "Max kostnad per portion (kr)", min_value=5.0, value=float(defaults.max_cost_per_serving), step=5.0
    )
    diet = _choice("Kosthållning", {"none": "Ingen", **DIET_LABELS}, defaults.diet, "diet")
    cuisine = _choice("Matstil", {"mixed": "Blandat", **CUISINE_LABELS}, defaults.cuisine_style, "cuisine")
    cooking_time = _choice(
        "Tillagningstid", {"any": "Spelar ingen roll", **COOKING_TIME_LABELS}, defaults.cooking_time, "time"
    )
    skill = _choice("Svårighetsgrad", {"any": "Spelar ingen roll", **SKILL_LABELS}, defaults.skill_level, "skill")
    family_friendly = st.checkbox("Barnvänligt", value=defaults.family_friendly)
    excluded = st.text_input("Undvik ingredienser", value=defaults.excluded_ingredients)
    preferred = st.text_input("Gärna ingredienser", value=defaults.preferred_ingredients)

    mode = _choice("Produkter", PRODUCT_MODES, defaults.product_mode, "mode")
    stores = defaults.selected_stores
    items = defaults.shopping_list_items
    if mode in ("store-plus", "store-only"):
        stores = st.multiselect("Butiker", DEFAULT_STORES, default=[s for s in stores if s in DEFAULT_STORES])
    elif mode == "shopping-list":
        text = st.text_area(
            "Inköpslista (en vara per rad, t.ex. 'Kycklingfilé; 89')",
            value="\n".join(f"{i.name}; {i.price:g}" for i in items),
        )
        items = []
        for line in text.splitlines():
            name, _, price = line.partition(";")
            if name.strip():
                items.append({"name": name.strip(), "price": price.strip().replace(",", ".") or 0})

    return Preferences(
        servings=servings,
        days=days,
        max_cost_per_serving=max_cost,
        diet=diet,
        cuisine_style=cuisine,
        cooking_time=cooking_time,
        skill_level=skill,
        family_friendly=family_friendly,
        excluded_ingredients=excluded,
        preferred_ingredients=preferred,
        product_mode=mode,
        selected_stores=stores,
        shopping_list_items=items,
    )


# ==========================================
# STREAMLIT UI SETUP
# ==========================================

st.set_page_config(page_title=PAGE_TITLE, page_icon=PAGE_ICON, layout="wide")
st.markdown(STREAMLIT_STYLE, unsafe_allow_html=True)

db, service = get_services()

# SIDEBAR
with st.sidebar:
    try:
        prefs = preferences_form(load_default_preferences(db))
    except ValueError as e:
        st.error(f"Ogiltiga preferenser: {e}")
        st.stop()

    if st.button("Spara som standard"):
        save_default_preferences(db, prefs)
        st.success("Sparat!")

    st.divider()
    st.subheader("📜 Historik")

    if st.button("🗑️ Rensa historik"):
        db.delete_all_plans()
        st.session_state.pop("plan_id", None)
        st.rerun()

    for p in db.get_recent_plans():
        col1, col2 = st.columns([4, 1])
        with col1:
            label = f"{p['name']} - {p['days']} dagar, {p['total_cost']:.0f} kr"
            if st.button(label, key=f"hist_{p['id']}"):
                st.session_state.plan_id = p["id"]
                st.rerun()
        with col2:
            if st.button("🗑️", key=f"del_{p['id']}", help="Radera planen"):
                db.delete_plan(p["id"])
                if st.session_state.get("plan_id") == p["id"]:
                    del st.session_state.plan_id
                st.rerun()

st.title(f"{PAGE_ICON} {PAGE_TITLE}")

if st.button("📝 Skapa veckomeny", type="primary"):
    progress = st.progress(0.0, text="Skapar recept...")

    def on_day(entry):
        progress.progress(entry.day_number / prefs.days, text=f"Dag {entry.day_number}: {entry.recipe.name}")

    try:
        result = asyncio.run(service.generate(prefs, on_day=on_day))
    except MealPlanError as e:
        st.error(e.message)
        if e.limit_reached and e.upgrade_path:
            st.info(f"Uppgradera för fler: {e.upgrade_path}")
        st.stop()

    st.session_state.plan_id = result.meal_plan_id
    if result.degraded_days:
        st.session_state.notice = (
            f"Dag {', '.join(str(d) for d in result.degraded_days)} kunde inte genereras. "
            "Prova att skapa ett nytt recept för de dagarna."
        )
    st.rerun()

# --- CURRENT PLAN ---
plan_id = st.session_state.get("plan_id")
plan = db.get_plan(plan_id) if plan_id is not None else None

if plan is None:
    st.info("Välj preferenser i sidopanelen och skapa en veckomeny.")
    st.stop()

if "notice" in st.session_state:
    st.warning(st.session_state.pop("notice"))

entries = db.get_recipe_entries(plan.id)
shopping_list = db.get_shopping_list(plan.id)
avg = plan.total_cost / plan.preferences.days / plan.servings
st.caption(f"📂 **{plan.name}** · {plan.total_cost:.2f} kr · {avg:.2f} kr per portion")


def regenerate(day_number):
    try:
        asyncio.run(service.regenerate_day(plan.id, day_number))
    except MealPlanError as e:
        st.error(e.message)
        return
    st.rerun()


tab_plan, tab_list = st.tabs(["Recept", "Inköpslista"])
with tab_plan:
    render_plan_ui(entries, on_regenerate=regenerate)
with tab_list:
    render_shopping_list(shopping_list)
    if shopping_list is not None:
        st.download_button(
            label="📄 Ladda ner PDF",
            data=generate_pdf(plan.name, entries, shopping_list),
            file_name=f"{plan.name.replace(' ', '_')}.pdf",
            mime="application/pdf",
        )
