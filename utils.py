"""
Utility functions for the Veckomeny Streamlit app.
"""

import os

import streamlit as st
from loguru import logger
from pydantic import ValidationError

from models import Preferences

DEFAULT_PREFERENCES_KEY = "default_preferences"


def get_api_key():
    """Get API key from Environment OR Sidebar"""
    api_key = os.getenv("GOOGLE_API_KEY")

    if not api_key:
        with st.sidebar:
            st.divider()
            st.warning("🔑 API-nyckel krävs")
            api_key = st.text_input(
                "Ange Gemini API-nyckel:",
                type="password",
                help="Skapa en på aistudio.google.com",
            )
            if api_key:
                os.environ["GOOGLE_API_KEY"] = api_key
                st.success("Nyckeln sparad för sessionen.")
                st.rerun()
            else:
                st.stop()
    return api_key


def load_default_preferences(db) -> Preferences:
    """Saved default preferences, or the built-in defaults when none are stored."""
    raw = db.get_setting(DEFAULT_PREFERENCES_KEY, "")
    if not raw:
        return Preferences()
    try:
        return Preferences.model_validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring stored default preferences: {e.error_count()} invalid fields")
        return Preferences()


def save_default_preferences(db, preferences: Preferences):
    db.save_setting(DEFAULT_PREFERENCES_KEY, preferences.to_json())
