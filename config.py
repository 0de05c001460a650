"""
Configuration settings for the Veckomeny meal planner.

Every value can be overridden through the environment (or a .env file loaded by
the entry points).
"""

import os

# --- DATABASE ---
DB_NAME = os.getenv("VECKOMENY_DB", "veckomeny.db")

# --- AI MODELS ---
PLANNER_MODEL = os.getenv("PLANNER_MODEL", "gemini-2.5-flash")
PLANNER_TEMPERATURE = float(os.getenv("PLANNER_TEMPERATURE", "0.9"))
GENERATOR_TIMEOUT_SECONDS = float(os.getenv("GENERATOR_TIMEOUT_SECONDS", "60"))

# Pause between two successful days to stay under the generator's rate limit
INTER_DAY_DELAY_SECONDS = float(os.getenv("INTER_DAY_DELAY_SECONDS", "0.5"))

# How often a writer waiting for a busy plan checks again
LOCK_POLL_SECONDS = 0.05

# --- PLAN DEFAULTS ---
DEFAULT_SERVINGS = 4
DEFAULT_DAYS = 7
MAX_DAYS = 14
DEFAULT_MAX_COST_PER_SERVING = 50.0
DEFAULT_STORES = ["ICA", "Coop", "City Gross", "Willys"]
CATALOG_LIMIT = int(os.getenv("CATALOG_LIMIT", "50"))

# --- SUBSCRIPTION LIMITS (per calendar month) ---
PLAN_LIMITS = {
    "free": {"meal_plans_per_month": 3, "recipe_regens_per_month": 5},
    "premium": {"meal_plans_per_month": None, "recipe_regens_per_month": None},
}
UPGRADE_PATH = "/pricing"

# --- LOGGING ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")

# --- UI ---
PAGE_TITLE = "Veckomeny"
PAGE_ICON = "🥘"
