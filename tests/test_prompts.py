"""Tests for prompt construction."""

from meal_planner.domain.planning import MealPlanRequest
from meal_planner.domain.profiles import (
    HouseholdPreferences,
    Macros,
    NutritionRequirement,
)
from meal_planner.services.prompts import (
    build_meal_plan_prompt,
    build_meal_swap_prompt,
    build_substitutes_prompt,
    merge_dietary_restrictions,
    rank_cuisines,
)
from tests.conftest import make_ingredient, make_meal, make_profile


def _household() -> HouseholdPreferences:
    return HouseholdPreferences(
        all_dietary_restrictions=("vegetarian", "gluten-free"),
        all_allergens=("peanuts",),
        all_disliked_ingredients=("olives",),
        cuisine_preferences={"Italian": 2, "Mexican": 3, "Thai": 2},
        nutrition_requirements=(
            NutritionRequirement(
                name="Alex",
                daily_calories=2000,
                macros=Macros(protein=100, carbs=250, fat=70),
            ),
        ),
    )


def test_meal_plan_prompt_includes_household_constraints() -> None:
    request = MealPlanRequest(
        user_profile=make_profile(dietary_restrictions=("vegetarian",)),
        household_preferences=_household(),
    )

    prompt = build_meal_plan_prompt(request)

    assert "- Household size: 4 people" in prompt
    assert "- Dietary restrictions: vegetarian, gluten-free" in prompt
    assert "- ALLERGENS (MUST AVOID): peanuts" in prompt
    assert "- Disliked ingredients (avoid when possible): olives" in prompt
    assert (
        "Mexican (3 people like it), Italian (2 people like it), "
        "Thai (2 people like it)" in prompt
    )
    assert "NUTRITION REQUIREMENTS (IMPORTANT):" in prompt
    assert "- Alex: 2000 calories/day (100g protein, 250g carbs, 70g fat)" in prompt
    assert "- Weekly budget: $100.00 (about $14.29 per day)" in prompt
    assert "exactly 21 meals" in prompt


def test_meal_plan_prompt_without_household() -> None:
    request = MealPlanRequest(
        user_profile=make_profile(cuisine_preferences=("Greek",)),
        pantry_items=("rice", "beans"),
        exclude_recipes=("Chili",),
    )

    prompt = build_meal_plan_prompt(request)

    assert "ALLERGENS" not in prompt
    assert "NUTRITION REQUIREMENTS" not in prompt
    assert "- Dietary restrictions: None" in prompt
    assert "- Cuisine preferences: Greek" in prompt
    assert "Available pantry items to use: rice, beans" in prompt
    assert "Exclude these recipes: Chili" in prompt


def test_meal_plan_prompt_is_deterministic() -> None:
    request = MealPlanRequest(
        user_profile=make_profile(), household_preferences=_household()
    )

    assert build_meal_plan_prompt(request) == build_meal_plan_prompt(request)


def test_merge_dietary_restrictions_keeps_first_occurrence() -> None:
    profile = make_profile(dietary_restrictions=("gluten-free", "dairy-free"))

    merged = merge_dietary_restrictions(profile, _household())

    assert merged == ["gluten-free", "dairy-free", "vegetarian"]


def test_rank_cuisines_falls_back_to_preferences() -> None:
    profile = make_profile(cuisine_preferences=("Indian",))

    assert rank_cuisines(profile, None) == "Indian"
    assert rank_cuisines(profile, None, ("Korean", "Thai")) == "Korean, Thai"
    assert rank_cuisines(make_profile(), HouseholdPreferences()) == "Any"


def test_meal_swap_prompt_describes_original_meal() -> None:
    meal = make_meal(
        "meal_1",
        name="Beef Tacos",
        cost=12.5,
        ingredients=[make_ingredient(f"Item {index}", 1.0) for index in range(6)],
    )

    prompt = build_meal_swap_prompt(
        meal, make_profile(), ("Beef Tacos", "Chili"), _household()
    )

    assert 'replace "Beef Tacos"' in prompt
    assert "- Estimated cost: $12.50" in prompt
    assert "Item 4" in prompt
    assert "Item 5" not in prompt
    assert "Do not suggest: Beef Tacos, Chili" in prompt
    assert "- ALLERGENS (MUST AVOID): peanuts" in prompt
    assert "single JSON object" in prompt


def test_substitutes_prompt_lists_terms_to_avoid() -> None:
    prompt = build_substitutes_prompt(
        make_ingredient("Saffron", 9.0, category="spices"),
        make_profile(dietary_restrictions=("vegan",)),
        ("chicken", "honey"),
    )

    assert '"Saffron"' in prompt
    assert "currently $9.00" in prompt
    assert "- Dietary restrictions: vegan" in prompt
    assert "- Never suggest: chicken, honey" in prompt
