"""
Data model for meal plans, recipes and shopping lists.

Preferences and recipe payloads are stored as JSON using the camelCase aliases
below, so a stored plan can be re-validated verbatim when a day is regenerated.
"""

import re
from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import (
    DEFAULT_DAYS,
    DEFAULT_MAX_COST_PER_SERVING,
    DEFAULT_SERVINGS,
    DEFAULT_STORES,
    MAX_DAYS,
)

ProductMode = Literal["shopping-list", "free-generate", "store-plus", "store-only"]
HouseholdDiet = Literal["none", "vegetarian", "vegan", "pescatarian"]

DEFAULT_PRODUCT_MODE = "shopping-list"

_LEADING_NUMBER = re.compile(r"^\s*([-+]?(?:\d+(?:[.,]\d*)?|[.,]\d+))")


def parse_number(value) -> float:
    """
    Read the leading number of an amount or cost.

    "2" -> 2.0, "1,5 dl" -> 1.5, "ca 3" -> 0.0, None -> 0.0. Never raises.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value == value else 0.0
    match = _LEADING_NUMBER.match(str(value))
    if not match:
        return 0.0
    return float(match.group(1).replace(",", "."))


def optional_number(value) -> Optional[float]:
    """Leading number of a loosely typed field, or None when there is none: "450 kcal" -> 450.0."""
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value == value else None
    if not _LEADING_NUMBER.match(str(value)):
        return None
    return parse_number(value)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- PREFERENCES ---


class HouseholdMember(_CamelModel):
    name: str = ""
    portion_multiplier: float = Field(1.0, alias="portionMultiplier", gt=0)


class HouseholdRestrictions(_CamelModel):
    """Combined restrictions of every household member."""

    diet_type: HouseholdDiet = Field("none", alias="dietType")
    allergies: List[str] = Field(default_factory=list)
    intolerances: List[str] = Field(default_factory=list)
    dislikes: List[str] = Field(default_factory=list)

    @field_validator("diet_type", mode="before")
    @classmethod
    def _default_diet(cls, value):
        return value or "none"


class ShoppingListItem(_CamelModel):
    name: str = "Okänd produkt"
    price: float = 0.0
    unit: str = "st"

    @field_validator("name", "unit", mode="before")
    @classmethod
    def _fill_blank(cls, value, info):
        if value:
            return value
        return "Okänd produkt" if info.field_name == "name" else "st"


class Preferences(_CamelModel):
    """
    Everything a generation run needs to know about the user's wishes.

    The sentinels "none", "any" and "mixed" mean "no constraint" for the
    diet, protein, cuisine, cooking-time and skill axes.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    servings: int = Field(DEFAULT_SERVINGS, ge=1, le=20)
    days: int = Field(DEFAULT_DAYS, ge=1, le=MAX_DAYS)
    max_cost_per_serving: float = Field(DEFAULT_MAX_COST_PER_SERVING, alias="maxCostPerServing", gt=0)
    diet: str = "none"
    protein_type: str = Field("any", alias="proteinType")
    cuisine_style: str = Field("mixed", alias="cuisineStyle")
    cooking_time: str = Field("any", alias="cookingTime")
    skill_level: str = Field("any", alias="skillLevel")
    family_friendly: bool = Field(False, alias="familyFriendly")
    excluded_ingredients: str = Field("", alias="excludedIngredients")
    preferred_ingredients: str = Field("", alias="preferredIngredients")
    use_household: bool = Field(False, alias="useHousehold")
    household_restrictions: Optional[HouseholdRestrictions] = Field(None, alias="householdRestrictions")
    household_members: List[HouseholdMember] = Field(default_factory=list, alias="householdMembers")
    product_mode: ProductMode = Field(DEFAULT_PRODUCT_MODE, alias="productMode")
    selected_stores: List[str] = Field(default_factory=lambda: list(DEFAULT_STORES), alias="selectedStores")
    shopping_list_items: List[ShoppingListItem] = Field(default_factory=list, alias="shoppingListItems")
    user_id: Optional[str] = Field(None, alias="userId")

    @field_validator("product_mode", mode="before")
    @classmethod
    def _default_mode(cls, value):
        return value or DEFAULT_PRODUCT_MODE

    @field_validator("diet", mode="before")
    @classmethod
    def _default_diet(cls, value):
        return value or "none"

    @field_validator("protein_type", "cooking_time", "skill_level", mode="before")
    @classmethod
    def _default_any(cls, value):
        return value or "any"

    @field_validator("cuisine_style", mode="before")
    @classmethod
    def _default_mixed(cls, value):
        return value or "mixed"

    @field_validator("excluded_ingredients", "preferred_ingredients", mode="before")
    @classmethod
    def _strip_text(cls, value):
        return (value or "").strip()

    @property
    def household_enabled(self) -> bool:
        return self.use_household and self.household_restrictions is not None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# --- CATALOG ---


class Product(_CamelModel):
    name: str
    price: float = 0.0
    unit: str = "st"
    store: Optional[str] = None
    category: Optional[str] = None


# --- RECIPES ---


class Ingredient(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(min_length=1)
    amount: Optional[Union[float, str]] = None
    unit: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _scalar_amount(cls, value):
        return value if isinstance(value, (int, float, str)) and not isinstance(value, bool) else None

    @field_validator("unit", mode="before")
    @classmethod
    def _blank_unit(cls, value):
        return "" if value is None else str(value)


class Nutrition(_CamelModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None

    # Generators often answer "450 kcal" or "25g"
    @field_validator("calories", "protein", "carbs", "fat", "fiber", mode="before")
    @classmethod
    def _number(cls, value):
        return optional_number(value)


class RecipeData(_CamelModel):
    """
    One day's recipe as returned by the generator (or supplied by the user).

    Unknown keys are kept so the payload survives a round trip unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(min_length=1)
    description: str = ""
    servings: Optional[int] = None
    prep_time: Optional[str] = Field(None, alias="prepTime")
    cook_time: Optional[str] = Field(None, alias="cookTime")
    difficulty: Optional[str] = None
    estimated_cost: Optional[Union[float, str]] = Field(None, alias="estimatedCost")
    nutrition: Optional[Nutrition] = None
    ingredients: List[Ingredient]
    instructions: List[str]
    tips: Optional[str] = None
    is_placeholder: bool = Field(False, alias="isPlaceholder")

    @field_validator("description", mode="before")
    @classmethod
    def _blank_description(cls, value):
        return str(value) if value else ""

    @field_validator("servings", mode="before")
    @classmethod
    def _servings(cls, value):
        number = optional_number(value)
        return int(number) if number and number >= 1 else None

    @field_validator("estimated_cost", mode="before")
    @classmethod
    def _scalar_cost(cls, value):
        return value if value is None or isinstance(value, (int, float, str)) else None

    @field_validator("nutrition", mode="before")
    @classmethod
    def _nutrition_object(cls, value):
        return value if isinstance(value, (dict, Nutrition)) else None

    @field_validator("prep_time", "cook_time", "difficulty", "tips", mode="before")
    @classmethod
    def _stringify(cls, value):
        return None if value is None else str(value)

    @property
    def cost(self) -> float:
        """Estimated cost as a number; placeholders cost nothing."""
        if self.is_placeholder:
            return 0.0
        return parse_number(self.estimated_cost)

    @property
    def main_ingredient(self) -> Optional[str]:
        """Lowercased name of the first ingredient, used to avoid repeats."""
        if not self.ingredients:
            return None
        return self.ingredients[0].name.strip().lower() or None

    @classmethod
    def placeholder(cls, day_number: int, servings: int = DEFAULT_SERVINGS) -> "RecipeData":
        return cls(
            name=f"Dag {day_number} - Recept kunde inte genereras",
            description="Försök igen senare",
            servings=servings,
            estimated_cost="0",
            ingredients=[],
            instructions=[],
            tips="",
            is_placeholder=True,
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RecipeEntry(_CamelModel):
    id: Optional[int] = None
    meal_plan_id: int = Field(alias="mealPlanId")
    day_number: int = Field(alias="dayNumber", ge=1)
    recipe: RecipeData


# --- SHOPPING LIST ---


class AggregatedItem(_CamelModel):
    name: str
    total_amount: float = Field(alias="totalAmount")
    unit: str = ""
    category: str
    source_days: List[int] = Field(default_factory=list, alias="sourceDays")


class ShoppingList(_CamelModel):
    meal_plan_id: Optional[int] = Field(None, alias="mealPlanId")
    items: List[AggregatedItem] = Field(default_factory=list)
    total_cost: float = Field(0.0, alias="totalCost")

    def items_payload(self) -> List[dict]:
        return [item.model_dump(mode="json", by_alias=True) for item in self.items]


# --- PLANS, QUOTA AND RESULTS ---


class MealPlanRecord(_CamelModel):
    id: int
    name: str
    created_at: datetime = Field(alias="createdAt")
    week_start_date: date = Field(alias="weekStartDate")
    servings: int
    total_cost: float = Field(0.0, alias="totalCost")
    preferences: Preferences
    user_id: Optional[str] = Field(None, alias="userId")


class QuotaDecision(_CamelModel):
    allowed: bool
    reason: Optional[str] = None
    upgrade_path: Optional[str] = Field(None, alias="upgradePath")
    requires_premium: bool = Field(False, alias="requiresPremium")
    limit: Optional[int] = None
    used: Optional[int] = None


class GenerationResult(_CamelModel):
    meal_plan_id: int = Field(alias="mealPlanId")
    recipes: List[RecipeData]
    total_cost: float = Field(alias="totalCost")
    avg_cost_per_serving: float = Field(alias="avgCostPerServing")
    degraded_days: List[int] = Field(default_factory=list, alias="degradedDays")
    cancelled: bool = False
    generated_at: datetime = Field(default_factory=datetime.now, alias="generatedAt")
