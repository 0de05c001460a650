"""
LangGraph day sequencer.

One run generates a list of plan days strictly in order:

    generate_day -> persist_day -> (pause ->) generate_day ... -> END

A failed day (generator error, timeout or unparseable answer) is replaced by a
placeholder recipe and the run continues. Every day is persisted before the
next one starts, and a failed write is logged without stopping the run.
"""

import asyncio
from dataclasses import dataclass, field
from operator import add
from typing import Annotated, Any, Callable, List, Optional, Sequence, TypedDict

from langgraph.graph import END, StateGraph
from loguru import logger

from config import INTER_DAY_DELAY_SECONDS
from errors import ExtractionFailure, GeneratorCallFailure, PersistenceFailure
from extractor import extract_recipe
from models import Preferences, Product, RecipeData, RecipeEntry
from prompt_builder import build_prompt


class DayState(TypedDict):
    """
    State of one sequencer run.

    Attributes:
        plan_id (int): Plan the days belong to.
        preferences (Preferences): Preferences of the plan.
        products (List[Product]): Products for the prompt.
        constraints (List[str]): Compiled constraints.
        pending_days (List[int]): Days still to generate, in order.
        current_day (int): Day produced by the last generate step.
        current_recipe (Optional[RecipeData]): Its recipe or placeholder.
        current_ok (bool): Whether the last day succeeded.
        used_ingredients (List[str]): Main ingredients to avoid repeating.
        entries (List[RecipeEntry]): Entries produced so far.
        degraded_days (List[int]): Days that got a placeholder.
        unsaved_days (List[int]): Days whose write failed.
        cancel_event (Optional[asyncio.Event]): Stops scheduling further days.
        on_day (Optional[Callable]): Called with each entry after it is persisted.
    """

    plan_id: int
    preferences: Preferences
    products: List[Product]
    constraints: List[str]
    pending_days: List[int]
    current_day: int
    current_recipe: Optional[RecipeData]
    current_ok: bool
    used_ingredients: Annotated[List[str], add]
    entries: Annotated[List[RecipeEntry], add]
    degraded_days: Annotated[List[int], add]
    unsaved_days: Annotated[List[int], add]
    cancel_event: Optional[Any]
    on_day: Optional[Callable[[RecipeEntry], None]]


@dataclass
class SequenceResult:
    entries: List[RecipeEntry] = field(default_factory=list)
    degraded_days: List[int] = field(default_factory=list)
    unsaved_days: List[int] = field(default_factory=list)
    cancelled: bool = False


class DaySequencer:
    """
    Runs the per-day generation graph.

    Attributes:
        generator: Object with async generate(prompt) -> str.
        store: Object with upsert_recipe_entry(plan_id, day, recipe).
        delay (float): Seconds to wait after a successful day.
    """

    def __init__(self, generator, store, delay=INTER_DAY_DELAY_SECONDS):
        self.generator = generator
        self.store = store
        self.delay = delay
        self.graph = self._create_workflow()

    def _create_workflow(self):
        workflow = StateGraph(DayState)
        workflow.add_node("generate_day", self.generate_day_node)
        workflow.add_node("persist_day", self.persist_day_node)
        workflow.add_node("pause", self.pause_node)
        workflow.set_entry_point("generate_day")
        workflow.add_edge("generate_day", "persist_day")
        workflow.add_conditional_edges(
            "persist_day",
            self.route_next_day,
            {"pause": "pause", "generate_day": "generate_day", END: END},
        )
        workflow.add_edge("pause", "generate_day")
        return workflow.compile()

    async def _generate_recipe(self, prompt: str) -> RecipeData:
        try:
            raw = await self.generator.generate(prompt)
        except GeneratorCallFailure:
            raise
        except Exception as e:
            raise GeneratorCallFailure(f"Generator call failed: {e}") from e
        return extract_recipe(raw)

    async def generate_recipe(
        self,
        preferences: Preferences,
        products: Sequence[Product],
        constraints: Sequence[str],
        day: int,
        used_ingredients: Sequence[str] = (),
    ) -> RecipeData:
        """
        Generate one day's recipe without persisting it.

        Raises:
            GeneratorCallFailure, ExtractionFailure: No usable recipe.
        """
        prompt = build_prompt(
            preferences.product_mode,
            products,
            used_ingredients,
            constraints,
            day,
            preferences.days,
            preferences.servings,
            preferences.max_cost_per_serving,
        )
        return await self._generate_recipe(prompt)

    async def generate_day_node(self, state: DayState):
        """Generate the next pending day, falling back to a placeholder."""
        prefs = state["preferences"]
        day, rest = state["pending_days"][0], state["pending_days"][1:]
        logger.info(f"Generating recipe for day {day} of plan {state['plan_id']}...")

        try:
            recipe = await self.generate_recipe(
                prefs, state["products"], state["constraints"], day, state["used_ingredients"]
            )
        except ExtractionFailure as e:
            logger.warning(f"Day {day}: {e.message}. Response was: {e.excerpt!r}")
            return self._placeholder_update(day, rest, prefs)
        except GeneratorCallFailure as e:
            logger.warning(f"Day {day}: {e.message}")
            return self._placeholder_update(day, rest, prefs)

        logger.info(f"Day {day}: {recipe.name}")
        main = recipe.main_ingredient
        return {
            "pending_days": rest,
            "current_day": day,
            "current_recipe": recipe,
            "current_ok": True,
            "used_ingredients": [main] if main else [],
        }

    @staticmethod
    def _placeholder_update(day, rest, prefs):
        return {
            "pending_days": rest,
            "current_day": day,
            "current_recipe": RecipeData.placeholder(day, prefs.servings),
            "current_ok": False,
            "degraded_days": [day],
        }

    async def persist_day_node(self, state: DayState):
        """Write the day's recipe before anything else happens."""
        day, recipe = state["current_day"], state["current_recipe"]
        update = {}
        try:
            entry = self.store.upsert_recipe_entry(state["plan_id"], day, recipe)
        except PersistenceFailure as e:
            logger.error(f"Could not save day {day} of plan {state['plan_id']}: {e.message}")
            entry = RecipeEntry(meal_plan_id=state["plan_id"], day_number=day, recipe=recipe)
            update["unsaved_days"] = [day]
        update["entries"] = [entry]

        if state.get("on_day"):
            state["on_day"](entry)
        return update

    async def pause_node(self, state: DayState):
        """Inter-day pause to respect the generator's rate limit."""
        del state  # Unused argument
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        return {}

    def route_next_day(self, state: DayState):
        if not state["pending_days"]:
            return END
        cancel_event = state.get("cancel_event")
        if cancel_event is not None and cancel_event.is_set():
            logger.info(
                f"Plan {state['plan_id']} cancelled, skipping days {state['pending_days']}"
            )
            return END
        return "pause" if state["current_ok"] else "generate_day"

    async def run(
        self,
        plan_id: int,
        preferences: Preferences,
        products: Sequence[Product],
        constraints: Sequence[str],
        days: Sequence[int],
        used_ingredients: Sequence[str] = (),
        cancel_event: Optional[asyncio.Event] = None,
        on_day: Optional[Callable[[RecipeEntry], None]] = None,
    ) -> SequenceResult:
        """
        Generate and persist the given days in order.

        Args:
            plan_id (int): Plan to write into.
            preferences (Preferences): The plan's preferences.
            products (Sequence[Product]): Products for the prompt.
            constraints (Sequence[str]): Compiled constraints.
            days (Sequence[int]): Days to generate.
            used_ingredients (Sequence[str]): Main ingredients already taken.
            cancel_event (Optional[asyncio.Event]): Checked between days.
            on_day (Optional[Callable]): Progress callback per persisted entry.

        Returns:
            SequenceResult: Entries in day order plus degraded and unsaved days.
        """
        days = list(days)
        if not days:
            return SequenceResult()
        if cancel_event is not None and cancel_event.is_set():
            return SequenceResult(cancelled=True)

        initial = {
            "plan_id": plan_id,
            "preferences": preferences,
            "products": list(products),
            "constraints": list(constraints),
            "pending_days": days,
            "current_day": days[0],
            "current_recipe": None,
            "current_ok": False,
            "used_ingredients": list(used_ingredients),
            "entries": [],
            "degraded_days": [],
            "unsaved_days": [],
            "cancel_event": cancel_event,
            "on_day": on_day,
        }
        final = await self.graph.ainvoke(
            initial, config={"recursion_limit": 3 * len(days) + 10}
        )
        return SequenceResult(
            entries=final["entries"],
            degraded_days=final["degraded_days"],
            unsaved_days=final["unsaved_days"],
            cancelled=bool(final["pending_days"]),
        )
