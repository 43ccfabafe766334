"""Recipe details from the recipe catalogue."""

from dataclasses import dataclass

from meal_planner.domain.meals import Ingredient


@dataclass(frozen=True)
class RecipeDetail:
    """Catalogue recipe used to fill gaps in generated meals."""

    id: str
    name: str
    description: str
    prep_time: int
    cook_time: int
    servings: int
    ingredients: tuple[Ingredient, ...] = ()
    instructions: tuple[str, ...] = ()
