"""
Constraint compiler.

Turns a Preferences record into an ordered list of Swedish constraint
statements for the recipe prompt. When the household block is enabled its diet,
allergies, intolerances and dislikes replace the individual diet and protein
choices; cuisine, cooking time and skill level still come from the individual.
"""

from typing import List

from models import Preferences

NO_CONSTRAINT = {"none", "any", "mixed", ""}

DIET_LABELS = {
    "vegetarian": "Vegetariskt (inget kött eller fisk)",
    "vegan": "Veganskt (inga animaliska produkter)",
    "pescatarian": "Pescetarianskt (fisk ok, inget kött)",
    "high-protein": "Högt proteininnehåll (minst 30g protein per portion)",
    "keto": "Keto (mycket lite kolhydrater, högfett)",
    "low-carb": "Låg kolhydrat (max 20g kolhydrater per portion)",
    "low-fat": "Fettsnålt (minimera fett)",
    "gluten-free": "Glutenfritt (inga glutenhaltiga ingredienser)",
    "dairy-free": "Laktosfritt (inga mejeriprodukter)",
    "fodmap": "Låg FODMAP (undvik lök, vitlök, vete, baljväxter)",
    "diabetic-friendly": "Diabetesvänligt (lågt glykemiskt index, balanserade kolhydrater)",
}

PROTEIN_LABELS = {
    "meat": "Använd ENDAST kött (nöt, fläsk, lamm) som huvudprotein",
    "poultry": "Använd ENDAST fågel (kyckling, kalkon) som huvudprotein",
    "fish": "Använd ENDAST fisk eller skaldjur som huvudprotein",
    "plant-based": "Använd ENDAST växtbaserat protein (bönor, linser, tofu, tempeh)",
    "eggs": "Använd ägg som huvudprotein",
}

CUISINE_LABELS = {
    "swedish": "Svensk husmanskost med traditionella svenska smaker",
    "mediterranean": "Medelhavskök med olivolja, örter och grönsaker",
    "asian": "Asiatiskt kök med soja, ingefära och asiatiska smaker",
    "mexican": "Mexikanskt kök med lime, koriander och kryddor",
    "italian": "Italienskt kök med tomat, basilika och parmesan",
    "indian": "Indiskt kök med curry, gurkmeja och aromatiska kryddor",
    "american": "Amerikanskt kök",
}

COOKING_TIME_LABELS = {
    "quick": "Total tillagningstid under 30 minuter",
    "medium": "Total tillagningstid 30-60 minuter",
    "long": "Tillagningstid över 60 minuter är ok (långkok, ugnsrätter)",
}

SKILL_LABELS = {
    "easy": "Enkelt recept med få steg och vanliga tekniker",
    "medium": "Medelsvårt recept",
    "advanced": "Avancerat recept med mer komplexa tekniker",
}

FAMILY_FRIENDLY = "BARNVÄNLIGT: Undvik starka kryddor, chili, vitlök. Använd milda smaker som barn gillar."


def _is_set(value: str) -> bool:
    return (value or "").strip().lower() not in NO_CONSTRAINT


def _individual_diet(prefs: Preferences) -> List[str]:
    constraints = []
    if _is_set(prefs.diet):
        constraints.append(f"Kosthållning: {DIET_LABELS.get(prefs.diet, prefs.diet)}")
    if _is_set(prefs.protein_type):
        constraints.append(
            PROTEIN_LABELS.get(prefs.protein_type, f"Huvudprotein: {prefs.protein_type}")
        )
    return constraints


def _household(prefs: Preferences) -> List[str]:
    restrictions = prefs.household_restrictions
    size = len(prefs.household_members) or prefs.servings
    constraints = [f"Hushållet består av {size} personer"]

    # The stored diet_type is already the strictest member diet
    if _is_set(restrictions.diet_type):
        constraints.append(
            f"Kosthållning för hela hushållet: {DIET_LABELS[restrictions.diet_type]}"
        )
    if restrictions.allergies:
        constraints.append(
            f"ALLERGIER - receptet får ABSOLUT INTE innehålla: {', '.join(restrictions.allergies)}"
        )
    if restrictions.intolerances:
        constraints.append(
            f"INTOLERANSER - receptet får INTE innehålla: {', '.join(restrictions.intolerances)}"
        )
    if restrictions.dislikes:
        constraints.append(
            f"Försök undvika (ogillas av hushållet): {', '.join(restrictions.dislikes)}"
        )
    return constraints


def _style(prefs: Preferences) -> List[str]:
    constraints = []
    if _is_set(prefs.cuisine_style):
        constraints.append(f"Matstil: {CUISINE_LABELS.get(prefs.cuisine_style, prefs.cuisine_style)}")
    if _is_set(prefs.cooking_time):
        constraints.append(
            COOKING_TIME_LABELS.get(prefs.cooking_time, f"Tillagningstid: {prefs.cooking_time}")
        )
    if _is_set(prefs.skill_level):
        constraints.append(SKILL_LABELS.get(prefs.skill_level, f"Svårighetsgrad: {prefs.skill_level}"))
    return constraints


def compile_constraints(prefs: Preferences) -> List[str]:
    """
    Compile preferences into prompt constraints.

    Args:
        prefs (Preferences): Validated preferences.

    Returns:
        List[str]: Constraint statements in evaluation order. Duplicates between
        the household block and individual fields are kept.
    """
    if prefs.household_enabled:
        constraints = _household(prefs)
    else:
        constraints = _individual_diet(prefs)
    constraints.extend(_style(prefs))

    if prefs.family_friendly:
        constraints.append(FAMILY_FRIENDLY)
    if prefs.excluded_ingredients:
        constraints.append(f"Undvik dessa ingredienser: {prefs.excluded_ingredients}")
    if prefs.preferred_ingredients:
        constraints.append(
            f"Försök inkludera dessa ingredienser om möjligt: {prefs.preferred_ingredients}"
        )
    return constraints


def render_constraints(constraints: List[str]) -> str:
    """Bullet list for the prompt, empty when there is nothing to say."""
    if not constraints:
        return ""
    return "PREFERENSER:\n" + "\n".join(f"- {c}" for c in constraints)
