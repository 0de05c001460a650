"""
Error types for the meal-plan pipeline.

Fatal errors (quota, empty catalog, empty shopping list, unknown plan) abort a
request before the generator is called. Per-day errors (generator call failure,
extraction failure, persistence failure) are absorbed by the day sequencer.
"""

from typing import Optional


class MealPlanError(Exception):
    """
    Base class for every error the pipeline raises.

    Attributes:
        message (str): Human-readable message shown to the user.
        status (int): HTTP-style status code for the outer surface.
        limit_reached (bool): Set when a usage limit stopped the request.
        requires_premium (bool): Set when the action needs a premium plan.
        upgrade_path (Optional[str]): Where the user can upgrade, if relevant.
    """

    status = 500

    def __init__(
        self,
        message: str,
        limit_reached: bool = False,
        requires_premium: bool = False,
        upgrade_path: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.limit_reached = limit_reached
        self.requires_premium = requires_premium
        self.upgrade_path = upgrade_path

    def to_dict(self) -> dict:
        """Caller-facing error payload."""
        return {
            "error": self.message,
            "limitReached": self.limit_reached,
            "requiresPremium": self.requires_premium,
            "upgradePath": self.upgrade_path,
        }


class QuotaExceeded(MealPlanError):
    status = 403

    def __init__(self, message: str, upgrade_path: Optional[str] = None, requires_premium: bool = False):
        super().__init__(
            message,
            limit_reached=True,
            requires_premium=requires_premium,
            upgrade_path=upgrade_path,
        )


class EmptyCatalog(MealPlanError):
    status = 400


class EmptyShoppingList(MealPlanError):
    status = 400


class PlanNotFound(MealPlanError):
    status = 404


class InvalidDay(MealPlanError):
    status = 400


class InvalidRecipe(MealPlanError):
    status = 400


class PreferencesInvalid(MealPlanError):
    status = 400


class GeneratorCallFailure(MealPlanError):
    """The external generator timed out or raised."""

    status = 502


class ExtractionFailure(MealPlanError):
    """
    The generator answered but no recipe could be parsed from the answer.

    Only the first 200 characters of the raw answer are kept.
    """

    status = 502
    EXCERPT_LENGTH = 200

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.excerpt = (raw_text or "")[: self.EXCERPT_LENGTH]


class PersistenceFailure(MealPlanError):
    status = 500
