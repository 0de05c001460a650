"""
Plan lifecycle manager.

Entry points for creating a plan, regenerating one day and substituting one
day's recipe. Every path that changes a recipe rebuilds the whole shopping list
from the stored recipes, so the stored list is never stale.
"""

import asyncio
import threading
from contextlib import asynccontextmanager
from typing import Callable, Optional, Union

from loguru import logger
from pydantic import ValidationError

from aggregator import build_shopping_list
from config import INTER_DAY_DELAY_SECONDS, LOCK_POLL_SECONDS
from constraints import compile_constraints
from errors import (
    ExtractionFailure,
    GeneratorCallFailure,
    InvalidDay,
    InvalidRecipe,
    PersistenceFailure,
    PlanNotFound,
    PreferencesInvalid,
    QuotaExceeded,
)
from models import GenerationResult, MealPlanRecord, Preferences, RecipeData, RecipeEntry, ShoppingList
from prompt_builder import resolve_products
from quota import CREATE_MEAL_PLAN, REGENERATE_RECIPE
from workflow import DaySequencer


class PlanLocks:
    """
    One lock per plan id; serializes writers of the same plan.

    Streamlit sessions share one service but each runs its own event loop on
    its own thread, so the per-plan lock is a threading.Lock polled from the
    loop. Entries are dropped once no caller holds or waits for them.
    """

    def __init__(self, poll=LOCK_POLL_SECONDS):
        self.poll = poll
        self._guard = threading.Lock()
        self._locks = {}  # plan id -> [lock, holders and waiters]

    def __len__(self):
        with self._guard:
            return len(self._locks)

    @asynccontextmanager
    async def hold(self, plan_id: int):
        with self._guard:
            slot = self._locks.setdefault(plan_id, [threading.Lock(), 0])
            slot[1] += 1
        try:
            while not slot[0].acquire(blocking=False):
                await asyncio.sleep(self.poll)
            try:
                yield
            finally:
                slot[0].release()
        finally:
            with self._guard:
                slot[1] -= 1
                if slot[1] == 0:
                    del self._locks[plan_id]


def _validate_preferences(preferences: Union[Preferences, dict]) -> Preferences:
    if isinstance(preferences, Preferences):
        return preferences
    try:
        return Preferences.model_validate(preferences or {})
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise PreferencesInvalid(f"Ogiltiga preferenser: {fields}") from e


class MealPlanService:
    """
    Creates and maintains meal plans.

    Attributes:
        store: Persistence (create_plan, get_plan, upsert_recipe_entry,
            get_recipe_entries, replace_shopping_list, update_plan_total_cost).
        catalog: Product catalog with get_products(stores).
        quota: Quota service with can_perform_action and increment_usage,
            or None to skip limits.
        sequencer (DaySequencer): Per-day generation pipeline.
        locks (PlanLocks): Per-plan write serialization.
    """

    def __init__(
        self,
        generator,
        store,
        catalog=None,
        quota=None,
        delay=INTER_DAY_DELAY_SECONDS,
        locks: Optional[PlanLocks] = None,
    ):
        self.store = store
        self.catalog = catalog if catalog is not None else store
        self.quota = quota
        self.sequencer = DaySequencer(generator, store, delay=delay)
        self.locks = locks or PlanLocks()

    # --- HELPERS ---

    def _check_quota(self, user_id: Optional[str], action: str) -> None:
        if self.quota is None:
            return
        decision = self.quota.can_perform_action(user_id, action)
        if not decision.allowed:
            raise QuotaExceeded(
                decision.reason or "Du har nått din gräns",
                upgrade_path=decision.upgrade_path,
                requires_premium=decision.requires_premium,
            )

    def _increment_usage(self, user_id: Optional[str], action: str) -> None:
        if self.quota is None:
            return
        try:
            self.quota.increment_usage(user_id, action)
        except PersistenceFailure as e:
            logger.error(f"Could not count {action} for user {user_id}: {e.message}")

    def _load_plan(self, plan_id: int) -> MealPlanRecord:
        plan = self.store.get_plan(plan_id)
        if plan is None:
            raise PlanNotFound(f"Matplanen {plan_id} hittades inte")
        return plan

    @staticmethod
    def _check_day(plan: MealPlanRecord, day_number: int) -> None:
        if not 1 <= day_number <= plan.preferences.days:
            raise InvalidDay(
                f"Dag {day_number} finns inte i en plan med {plan.preferences.days} dagar"
            )

    def refresh_shopping_list(self, plan_id: int) -> ShoppingList:
        """
        Rebuild the plan's shopping list and total cost from its stored recipes.

        Raises:
            PersistenceFailure: The recipes could not be read or the list written.
        """
        entries = self.store.get_recipe_entries(plan_id)
        shopping_list = build_shopping_list(entries, meal_plan_id=plan_id)
        self.store.replace_shopping_list(plan_id, shopping_list)
        self.store.update_plan_total_cost(plan_id, shopping_list.total_cost)
        logger.info(
            f"Shopping list for plan {plan_id}: {len(shopping_list.items)} items, "
            f"total cost {shopping_list.total_cost:.2f} kr"
        )
        return shopping_list

    # --- ENTRY POINTS ---

    async def generate(
        self,
        preferences: Union[Preferences, dict],
        cancel_event: Optional[asyncio.Event] = None,
        on_day: Optional[Callable[[RecipeEntry], None]] = None,
    ) -> GenerationResult:
        """
        Create a plan and generate every day of it.

        Args:
            preferences (Union[Preferences, dict]): The user's choices.
            cancel_event (Optional[asyncio.Event]): Stops scheduling further days.
            on_day (Optional[Callable]): Progress callback per persisted day.

        Returns:
            GenerationResult: Recipes, costs, plan id and degraded days.

        Raises:
            PreferencesInvalid, QuotaExceeded, EmptyShoppingList, EmptyCatalog:
                Before any generator call.
        """
        prefs = _validate_preferences(preferences)
        self._check_quota(prefs.user_id, CREATE_MEAL_PLAN)
        products = resolve_products(prefs, self.catalog)
        constraints = compile_constraints(prefs)

        plan_id = self.store.create_plan(prefs)
        logger.info(
            f"Created plan {plan_id}: {prefs.days} days, {prefs.servings} servings, mode {prefs.product_mode}"
        )

        async with self.locks.hold(plan_id):
            result = await self.sequencer.run(
                plan_id,
                prefs,
                products,
                constraints,
                range(1, prefs.days + 1),
                cancel_event=cancel_event,
                on_day=on_day,
            )
            try:
                total_cost = self.refresh_shopping_list(plan_id).total_cost
            except PersistenceFailure as e:
                logger.error(f"Could not store shopping list for plan {plan_id}: {e.message}")
                total_cost = build_shopping_list(result.entries).total_cost

        self._increment_usage(prefs.user_id, CREATE_MEAL_PLAN)

        if result.degraded_days:
            logger.warning(f"Plan {plan_id} has placeholder days: {result.degraded_days}")
        return GenerationResult(
            meal_plan_id=plan_id,
            recipes=[entry.recipe for entry in result.entries],
            total_cost=total_cost,
            avg_cost_per_serving=round(total_cost / prefs.days / prefs.servings, 2),
            degraded_days=result.degraded_days,
            cancelled=result.cancelled,
        )

    async def regenerate_day(self, plan_id: int, day_number: int) -> RecipeData:
        """
        Generate a new recipe for one day with the plan's stored preferences.

        The main ingredients of every other day are passed as the exclusion
        list. The shopping list is rebuilt afterwards. When no usable recipe
        comes back the stored recipe is left as it was.

        Raises:
            PlanNotFound, InvalidDay, QuotaExceeded, EmptyShoppingList, EmptyCatalog:
                Before any generator call.
            GeneratorCallFailure: The generator failed or its answer was unusable.
            PersistenceFailure: The new recipe or the shopping list was not saved.
        """
        plan = self._load_plan(plan_id)
        self._check_day(plan, day_number)
        prefs = plan.preferences
        self._check_quota(prefs.user_id, REGENERATE_RECIPE)
        products = resolve_products(prefs, self.catalog)
        constraints = compile_constraints(prefs)

        async with self.locks.hold(plan_id):
            used = [
                entry.recipe.main_ingredient
                for entry in self.store.get_recipe_entries(plan_id)
                if entry.day_number != day_number and entry.recipe.main_ingredient
            ]
            logger.info(f"Regenerating day {day_number} of plan {plan_id}...")
            try:
                recipe = await self.sequencer.generate_recipe(
                    prefs, products, constraints, day_number, used_ingredients=used
                )
            except (GeneratorCallFailure, ExtractionFailure) as e:
                logger.warning(f"Plan {plan_id} day {day_number} kept its recipe: {e.message}")
                raise GeneratorCallFailure(
                    f"Kunde inte skapa ett nytt recept för dag {day_number}. Försök igen."
                ) from e

            self.store.upsert_recipe_entry(plan_id, day_number, recipe)
            logger.info(f"Plan {plan_id} day {day_number}: {recipe.name}")
            self.refresh_shopping_list(plan_id)

        self._increment_usage(prefs.user_id, REGENERATE_RECIPE)
        return recipe

    async def substitute_day(
        self, plan_id: int, day_number: int, new_recipe: Union[RecipeData, dict]
    ) -> RecipeData:
        """
        Replace one day's recipe with caller-supplied data, e.g. a favorite.

        Raises:
            PlanNotFound, InvalidDay, InvalidRecipe: Nothing was changed.
            PersistenceFailure: The recipe or the shopping list was not saved.
        """
        plan = self._load_plan(plan_id)
        self._check_day(plan, day_number)
        if isinstance(new_recipe, RecipeData):
            recipe = new_recipe
        else:
            try:
                recipe = RecipeData.model_validate(new_recipe or {})
            except ValidationError as e:
                raise InvalidRecipe(f"Ogiltigt recept: {e.error_count()} fel") from e

        async with self.locks.hold(plan_id):
            entry = self.store.upsert_recipe_entry(plan_id, day_number, recipe)
            logger.info(f"Plan {plan_id} day {day_number} switched to {recipe.name}")
            self.refresh_shopping_list(plan_id)
        return entry.recipe
