"""
Usage-limit enforcement.

Monthly counters per user decide whether a free user may create another meal
plan or regenerate another recipe. Anonymous requests are never limited.
"""

from datetime import date, datetime
from typing import Callable, Optional

from loguru import logger

from config import PLAN_LIMITS, UPGRADE_PATH
from models import QuotaDecision

CREATE_MEAL_PLAN = "create_meal_plan"
REGENERATE_RECIPE = "regenerate_recipe"

# action -> (limit key, usage column, what the user ran out of)
ACTIONS = {
    CREATE_MEAL_PLAN: ("meal_plans_per_month", "meal_plans_generated", "veckomenyer"),
    REGENERATE_RECIPE: ("recipe_regens_per_month", "recipes_regenerated", "receptbyten"),
}

ACTIVE_STATUSES = {"active", "trialing"}


def month_start(day: date) -> date:
    return day.replace(day=1)


class UsageLimiter:
    """
    Quota service backed by the usage_tracking and user_subscriptions tables.

    Attributes:
        db (DBManager): Storage for subscriptions and counters.
        clock (Callable[[], datetime]): Source of the current time.
    """

    def __init__(self, db, clock: Callable[[], datetime] = datetime.now):
        self.db = db
        self.clock = clock

    def get_plan(self, user_id: str) -> str:
        subscription = self.db.get_subscription(user_id)
        if not subscription or subscription["plan"] != "premium":
            return "free"
        if subscription["status"] not in ACTIVE_STATUSES:
            return "free"
        period_end = subscription["current_period_end"]
        if period_end is not None and period_end <= self.clock():
            return "free"
        return "premium"

    def can_perform_action(self, user_id: Optional[str], action: str) -> QuotaDecision:
        """
        Check an action against the user's monthly limit.

        Args:
            user_id (Optional[str]): The user, or None for anonymous use.
            action (str): One of the ACTIONS keys; unknown actions are allowed.

        Returns:
            QuotaDecision: allowed flag plus reason, limit and usage when denied.
        """
        if not user_id or action not in ACTIONS:
            return QuotaDecision(allowed=True)

        limit_key, column, label = ACTIONS[action]
        plan = self.get_plan(user_id)
        limit = PLAN_LIMITS.get(plan, PLAN_LIMITS["free"])[limit_key]
        if limit is None:
            return QuotaDecision(allowed=True)

        used = self.db.get_usage(user_id, month_start(self.clock().date()))[column]
        if used < limit:
            return QuotaDecision(allowed=True, limit=limit, used=used)

        logger.warning(f"User {user_id} reached {limit_key} ({used}/{limit}) on plan {plan}")
        return QuotaDecision(
            allowed=False,
            reason=f"Du har nått din månadsgräns för {label}",
            upgrade_path=UPGRADE_PATH if plan == "free" else None,
            limit=limit,
            used=used,
        )

    def increment_usage(self, user_id: Optional[str], action: str) -> None:
        if not user_id or action not in ACTIONS:
            return
        _, column, _ = ACTIONS[action]
        self.db.increment_usage(user_id, month_start(self.clock().date()), column)
