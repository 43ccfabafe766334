"""Deterministic local generator used when no live model is configured."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from meal_planner.domain.budget import calculate_budget_status
from meal_planner.domain.meals import (
    DAYS_PER_WEEK,
    MEAL_TYPES,
    Ingredient,
    Meal,
    MealType,
    recipe_id_from_name,
    total_meal_cost,
)
from meal_planner.domain.planning import MealPlanDraft, MealPlanRequest, Substitute
from meal_planner.domain.profiles import HouseholdPreferences, SkillLevel, UserProfile
from meal_planner.services.ai import MealPlanGenerator


def _meal(  # noqa: PLR0913
    meal_type: MealType,
    name: str,
    description: str,
    prep_time: int,
    cook_time: int,
    cost: float,
    ingredients: list[tuple[str, float, str, str, float]],
) -> Meal:
    return Meal(
        id=recipe_id_from_name(name),
        day_of_week=0,
        meal_type=meal_type,
        recipe_name=name,
        description=description,
        prep_time=prep_time,
        cook_time=cook_time,
        servings=4,
        estimated_cost=cost,
        recipe_id=recipe_id_from_name(name),
        ingredients=[
            Ingredient(
                name=ingredient_name,
                amount=amount,
                unit=unit,
                category=category,
                estimated_price=price,
            )
            for ingredient_name, amount, unit, category, price in ingredients
        ],
    )


MEAL_DATABASE: dict[str, list[Meal]] = {
    "regular": [
        _meal(
            MealType.BREAKFAST,
            "Scrambled Eggs with Toast",
            "Fluffy scrambled eggs with whole wheat toast and fresh fruit",
            10,
            10,
            8.50,
            [
                ("Eggs", 8, "large", "dairy", 3.00),
                ("Whole wheat bread", 8, "slices", "grains", 2.50),
                ("Butter", 2, "tbsp", "dairy", 0.50),
                ("Mixed berries", 2, "cups", "produce", 2.50),
            ],
        ),
        _meal(
            MealType.LUNCH,
            "Chicken Caesar Salad",
            "Classic Caesar salad with grilled chicken breast",
            15,
            20,
            14.00,
            [
                ("Chicken breast", 1.5, "lbs", "meat", 7.00),
                ("Romaine lettuce", 2, "heads", "produce", 3.00),
                ("Caesar dressing", 1, "cup", "condiments", 2.00),
                ("Parmesan cheese", 0.5, "cup", "dairy", 2.00),
            ],
        ),
        _meal(
            MealType.DINNER,
            "Spaghetti Bolognese",
            "Traditional Italian pasta with meat sauce",
            20,
            40,
            16.00,
            [
                ("Ground beef", 1, "lb", "meat", 6.00),
                ("Spaghetti", 1, "lb", "grains", 2.00),
                ("Tomato sauce", 24, "oz", "canned", 3.00),
                ("Onion", 1, "large", "produce", 1.00),
                ("Garlic", 4, "cloves", "produce", 0.50),
            ],
        ),
    ],
    "vegetarian": [
        _meal(
            MealType.BREAKFAST,
            "Vegetable Omelette",
            "Fluffy omelette with mushrooms, peppers and cheese",
            10,
            15,
            9.00,
            [
                ("Eggs", 8, "large", "dairy", 3.00),
                ("Bell peppers", 2, "medium", "produce", 2.00),
                ("Mushrooms", 8, "oz", "produce", 2.50),
                ("Cheddar cheese", 1, "cup", "dairy", 1.50),
            ],
        ),
        _meal(
            MealType.LUNCH,
            "Caprese Sandwich",
            "Fresh mozzarella, tomato and basil on ciabatta",
            10,
            5,
            12.00,
            [
                ("Fresh mozzarella", 1, "lb", "dairy", 5.00),
                ("Tomatoes", 3, "large", "produce", 2.50),
                ("Fresh basil", 1, "bunch", "produce", 2.00),
                ("Ciabatta bread", 4, "rolls", "grains", 2.50),
            ],
        ),
        _meal(
            MealType.DINNER,
            "Mushroom Risotto",
            "Creamy Italian rice with wild mushrooms",
            15,
            30,
            14.00,
            [
                ("Arborio rice", 2, "cups", "grains", 4.00),
                ("Mixed mushrooms", 1, "lb", "produce", 5.00),
                ("Vegetable broth", 6, "cups", "canned", 3.00),
                ("Parmesan cheese", 1, "cup", "dairy", 2.00),
            ],
        ),
    ],
    "vegan": [
        _meal(
            MealType.BREAKFAST,
            "Avocado Toast with Chickpeas",
            "Whole grain toast topped with mashed avocado and spiced chickpeas",
            10,
            5,
            8.00,
            [
                ("Avocados", 4, "medium", "produce", 4.00),
                ("Whole grain bread", 8, "slices", "grains", 2.50),
                ("Chickpeas", 1, "can", "canned", 1.50),
            ],
        ),
        _meal(
            MealType.LUNCH,
            "Buddha Bowl",
            "Quinoa bowl with roasted vegetables and tahini dressing",
            20,
            25,
            11.00,
            [
                ("Quinoa", 2, "cups", "grains", 3.00),
                ("Sweet potato", 2, "large", "produce", 2.00),
                ("Broccoli", 1, "head", "produce", 2.50),
                ("Tahini", 0.5, "cup", "condiments", 3.50),
            ],
        ),
        _meal(
            MealType.DINNER,
            "Thai Red Curry",
            "Spicy coconut curry with tofu and vegetables",
            20,
            25,
            13.00,
            [
                ("Firm tofu", 1, "lb", "protein", 3.50),
                ("Coconut milk", 2, "cans", "canned", 4.00),
                ("Mixed vegetables", 2, "lbs", "produce", 4.00),
                ("Red curry paste", 3, "tbsp", "condiments", 1.50),
            ],
        ),
    ],
}

SKILL_TIME_MULTIPLIERS = {
    SkillLevel.BEGINNER: 1.3,
    SkillLevel.INTERMEDIATE: 1.0,
    SkillLevel.ADVANCED: 0.8,
}

COOKING_TIPS = {
    SkillLevel.BEGINNER: [
        "Prep all ingredients before you start cooking",
        "Read the entire recipe before beginning",
        "Use a timer to avoid overcooking",
        "Taste as you go and adjust seasoning",
        "Clean as you cook to save time later",
    ],
    SkillLevel.INTERMEDIATE: [
        "Try substituting ingredients based on what you have",
        "Experiment with different herbs and spices",
        "Use high heat for searing, medium for sauteing",
        "Let meat rest after cooking for better flavor",
        "Prep vegetables uniformly for even cooking",
    ],
    SkillLevel.ADVANCED: [
        "Try making your own pasta or bread from scratch",
        "Experiment with different cooking techniques",
        "Create your own spice blends",
        "Try plating techniques for presentation",
        "Consider wine pairings with your meals",
    ],
}

_OVER_MEAL_BUDGET = 1.2


def select_meal_set(
    profile: UserProfile, household: HouseholdPreferences | None = None
) -> str:
    """Choose the meal set matching the strictest dietary restriction."""
    restrictions = set(profile.dietary_restrictions)
    if household is not None:
        restrictions.update(household.all_dietary_restrictions)
    lowered = {restriction.lower() for restriction in restrictions}
    if "vegan" in lowered:
        return "vegan"
    if "vegetarian" in lowered:
        return "vegetarian"
    return "regular"


def name_variation(base_name: str, day: int) -> str:
    """Give each day's copy of a base recipe a distinct name."""
    variations = {
        0: base_name,
        1: base_name.replace("with", "and"),
        2: f"Quick {base_name}",
        3: f"Homemade {base_name}",
        4: f"{base_name} Deluxe",
        5: f"Weekend {base_name}",
        6: f"Simple {base_name}",
    }
    return variations.get(day, base_name)


def adjust_cost_for_budget(base_cost: float, weekly_budget: float) -> float:
    """Cap a meal's cost near the per-meal share of the weekly budget."""
    meal_budget = weekly_budget / DAYS_PER_WEEK / len(MEAL_TYPES)
    if base_cost > meal_budget * _OVER_MEAL_BUDGET:
        return round(meal_budget, 2)
    return base_cost


def adjust_time_for_skill(base_minutes: int, skill: SkillLevel) -> int:
    return round(base_minutes * SKILL_TIME_MULTIPLIERS.get(skill, 1.0))


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class MockMealPlanGenerator(MealPlanGenerator):
    """Builds plans from a small built-in recipe set without network calls."""

    clock: Callable[[], datetime] = field(default=_utcnow)

    async def generate_plan(self, request: MealPlanRequest) -> MealPlanDraft:
        profile = request.user_profile
        base_meals = MEAL_DATABASE[
            select_meal_set(profile, request.household_preferences)
        ]
        stamp = int(self.clock().timestamp() * 1000)
        meals = []
        for day in range(DAYS_PER_WEEK):
            for meal_type in MEAL_TYPES:
                base = next(
                    (meal for meal in base_meals if meal.meal_type == meal_type),
                    base_meals[0],
                )
                name = name_variation(base.recipe_name, day)
                meals.append(
                    base.model_copy(
                        deep=True,
                        update={
                            "id": f"meal_{stamp}_{len(meals)}",
                            "day_of_week": day,
                            "meal_type": meal_type,
                            "recipe_name": name,
                            "recipe_id": recipe_id_from_name(name),
                            "estimated_cost": adjust_cost_for_budget(
                                base.estimated_cost, profile.weekly_budget
                            ),
                            "prep_time": adjust_time_for_skill(
                                base.prep_time, profile.cooking_skill_level
                            ),
                            "cook_time": adjust_time_for_skill(
                                base.cook_time, profile.cooking_skill_level
                            ),
                        },
                    )
                )
        total = total_meal_cost(meals)
        return MealPlanDraft(
            meals=meals,
            total_estimated_cost=total,
            budget_status=calculate_budget_status(total, profile.weekly_budget),
        )

    async def suggest_swap(
        self,
        meal: Meal,
        profile: UserProfile,
        exclude_recipes: tuple[str, ...] = (),
        household: HouseholdPreferences | None = None,
    ) -> Meal:
        """Pick the first same-type recipe from the matching meal set."""
        meal_set = select_meal_set(profile, household)
        candidates = MEAL_DATABASE[meal_set]
        if meal_set == "regular":
            candidates = [meal for meals in MEAL_DATABASE.values() for meal in meals]
        alternative = next(
            (
                candidate
                for candidate in candidates
                if candidate.meal_type == meal.meal_type
                and candidate.recipe_name != meal.recipe_name
                and candidate.recipe_name not in exclude_recipes
            ),
            meal,
        )
        stamp = int(self.clock().timestamp() * 1000)
        return alternative.model_copy(
            deep=True,
            update={
                "id": f"meal_{stamp}_swap",
                "day_of_week": meal.day_of_week,
                "meal_type": meal.meal_type,
                "servings": meal.servings,
                "estimated_cost": adjust_cost_for_budget(
                    alternative.estimated_cost, profile.weekly_budget
                ),
            },
        )

    async def generate_instructions(self, meal: Meal) -> list[str]:
        ingredients = ", ".join(ingredient.name for ingredient in meal.ingredients)
        return [
            f"Gather and prep the ingredients: {ingredients}.",
            f"Prepare {meal.recipe_name} over about {meal.prep_time} minutes of prep.",
            f"Cook for roughly {meal.cook_time} minutes, tasting as you go.",
            f"Serve {meal.servings} portions while warm.",
        ]

    async def generate_tips(self, meal: Meal, profile: UserProfile) -> list[str]:
        return list(COOKING_TIPS[profile.cooking_skill_level])

    async def suggest_substitutes(
        self,
        ingredient: Ingredient,
        profile: UserProfile,
        avoid: tuple[str, ...] = (),
    ) -> list[Substitute]:
        return []

    def clear_cache(self) -> None:
        return None
