"""Meal and meal plan models."""

import re
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meal_planner.domain.budget import BudgetStatus, calculate_budget_status

_WHITESPACE = re.compile(r"\s+")


class MealType(StrEnum):
    """Meal slot within a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


MEAL_TYPES = (MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER)
DAYS_PER_WEEK = 7
MEALS_PER_WEEK = DAYS_PER_WEEK * len(MEAL_TYPES)


class _CamelModel(BaseModel):
    """Accepts camelCase (LLM and document store) and snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Ingredient(_CamelModel):
    """Single ingredient line of a recipe."""

    name: str
    amount: float = Field(gt=0)
    unit: str
    category: str
    estimated_price: float = Field(ge=0)


class Meal(_CamelModel):
    """A recipe scheduled into a day and meal slot."""

    id: str
    day_of_week: int = Field(ge=0, le=DAYS_PER_WEEK - 1)
    meal_type: MealType
    recipe_name: str
    description: str = ""
    prep_time: int = Field(ge=0)
    cook_time: int = Field(ge=0)
    servings: int = Field(gt=0)
    estimated_cost: float = Field(ge=0)
    ingredients: list[Ingredient]
    recipe_id: str

    @property
    def total_time(self) -> int:
        return self.prep_time + self.cook_time


class MealPlan(_CamelModel):
    """A persisted week of meals with aggregate cost."""

    id: str
    user_id: str
    week_start_date: datetime
    meals: list[Meal]
    total_estimated_cost: float
    budget_status: BudgetStatus
    created_at: datetime
    updated_at: datetime

    def find_meal(self, meal_id: str) -> Meal | None:
        """Return the meal with the given id, if present."""
        for meal in self.meals:
            if meal.id == meal_id:
                return meal
        return None

    def replace_meal(self, meal_id: str, replacement: Meal) -> bool:
        """Swap a meal in place, keeping its position."""
        for index, meal in enumerate(self.meals):
            if meal.id == meal_id:
                self.meals[index] = replacement
                return True
        return False

    def recalculate(self, weekly_budget: float) -> None:
        """Re-derive total cost and budget status after a mutation."""
        self.total_estimated_cost = total_meal_cost(self.meals)
        self.budget_status = calculate_budget_status(
            self.total_estimated_cost, weekly_budget
        )

    def to_document(self) -> dict[str, object]:
        """Serialize for the document store using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


def recipe_id_from_name(recipe_name: str) -> str:
    """Derive a stable recipe id from a recipe name."""
    return "recipe_" + _WHITESPACE.sub("_", recipe_name.strip().lower())


def total_meal_cost(meals: list[Meal]) -> float:
    """Sum the estimated cost of all meals."""
    return sum(meal.estimated_cost for meal in meals)
