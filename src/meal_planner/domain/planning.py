"""Generation requests and results."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel

from meal_planner.domain.budget import BudgetStatus
from meal_planner.domain.meals import Meal
from meal_planner.domain.profiles import HouseholdPreferences, UserProfile


@dataclass(frozen=True)
class MealPlanRequest:
    """Everything the generator needs to synthesize a weekly plan."""

    user_profile: UserProfile
    exclude_recipes: tuple[str, ...] = ()
    pantry_items: tuple[str, ...] = ()
    preferred_cuisines: tuple[str, ...] = ()
    week_start_date: datetime | None = None
    household_preferences: HouseholdPreferences | None = None


class MealPlanDraft(BaseModel):
    """Generated meals and cost summary before a plan identity is assigned."""

    meals: list[Meal]
    total_estimated_cost: float
    budget_status: BudgetStatus


@dataclass(frozen=True)
class Substitute:
    """Cheaper alternative for an ingredient."""

    name: str
    estimated_price: float
    reason: str
    cooking_tip: str | None = None
