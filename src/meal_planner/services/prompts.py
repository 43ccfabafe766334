"""Prompt construction for meal planning model calls.

Every function here is pure: the same inputs always produce the same text,
which keeps cache keys stable.
"""

from meal_planner.domain.meals import MEALS_PER_WEEK, Ingredient, Meal
from meal_planner.domain.planning import MealPlanRequest
from meal_planner.domain.profiles import (
    HouseholdPreferences,
    NutritionRequirement,
    UserProfile,
)

MEAL_PLAN_SYSTEM_PROMPT = """
You are a professional meal planning assistant that creates personalized weekly meal plans based on user preferences, dietary restrictions, and budget constraints.

Your meal plans are:
1. Nutritionally balanced and varied
2. Respectful of all dietary restrictions
3. Budget-conscious and cost-effective
4. Appropriate for the user's cooking skill level
5. Realistic for the user's available cooking time
6. Designed to minimize food waste by reusing ingredients across meals

You provide creative, delicious meal ideas that match the user's preferences while staying within their budget. You are knowledgeable about nutrition, cooking techniques, and ingredient substitutions.

Always respond with properly formatted JSON and nothing else.
""".strip()

MEAL_SWAP_SYSTEM_PROMPT = (
    "You are a meal planning assistant that suggests alternative recipes based on "
    "user preferences. You provide creative, delicious alternatives that match "
    "dietary restrictions and budget constraints."
)

INSTRUCTIONS_SYSTEM_PROMPT = (
    "You are a professional chef providing clear, step-by-step cooking "
    "instructions. Your instructions are concise, practical, and easy to follow."
)

COOKING_TIPS_SYSTEM_PROMPT = (
    "You are a helpful cooking assistant providing personalized tips to make "
    "cooking easier and more enjoyable."
)

SUBSTITUTES_SYSTEM_PROMPT = (
    "You are a grocery savings expert who suggests cheaper ingredient "
    "substitutes that keep a recipe working."
)

_MAIN_INGREDIENT_SAMPLE = 5


def build_system_prompt() -> str:
    """Return the fixed system instruction for full-plan generation."""
    return MEAL_PLAN_SYSTEM_PROMPT


def merge_dietary_restrictions(
    profile: UserProfile, household: HouseholdPreferences | None
) -> list[str]:
    """Union of profile and household restrictions, first occurrence wins."""
    restrictions = list(profile.dietary_restrictions)
    if household is not None:
        restrictions.extend(household.all_dietary_restrictions)
    return _unique(restrictions)


def rank_cuisines(
    profile: UserProfile,
    household: HouseholdPreferences | None,
    preferred_cuisines: tuple[str, ...] = (),
) -> str:
    """Describe cuisine preferences, most popular in the household first."""
    if household is not None and household.cuisine_preferences:
        ranked = sorted(
            household.cuisine_preferences.items(),
            key=lambda item: (-item[1], item[0]),
        )
        return ", ".join(
            f"{cuisine} ({count} people like it)" for cuisine, count in ranked
        )
    cuisines = preferred_cuisines or profile.cuisine_preferences
    return ", ".join(cuisines) or "Any"


def build_meal_plan_prompt(request: MealPlanRequest) -> str:
    """Build the per-request instruction for a full weekly plan."""
    profile = request.user_profile
    household = request.household_preferences
    restrictions = merge_dietary_restrictions(profile, household)
    allergens = list(household.all_allergens) if household else []
    disliked = list(household.all_disliked_ingredients) if household else []
    nutrition = list(household.nutrition_requirements) if household else []
    weekday = profile.cooking_time_preference.weekday
    weekend = profile.cooking_time_preference.weekend
    budget = profile.weekly_budget

    lines = [
        "Create a 7-day meal plan with the following requirements:",
        "",
        "User Profile:",
        f"- Household size: {profile.household_size} people",
        f"- Dietary restrictions: {', '.join(restrictions) or 'None'}",
    ]
    lines.extend(_avoidance_lines(allergens, disliked))
    lines.extend(
        [
            f"- Cuisine preferences: "
            f"{rank_cuisines(profile, household, request.preferred_cuisines)}",
            f"- Cooking skill level: {profile.cooking_skill_level}",
            f"- Weekly budget: ${budget:.2f} (about ${budget / 7:.2f} per day)",
            f"- Cooking time preference: {weekday} min weekdays, "
            f"{weekend} min weekends",
        ]
    )
    if nutrition:
        lines.extend(["", "NUTRITION REQUIREMENTS (IMPORTANT):"])
        lines.extend(_nutrition_line(requirement) for requirement in nutrition)
    if request.pantry_items:
        lines.extend(
            ["", f"Available pantry items to use: {', '.join(request.pantry_items)}"]
        )
    if request.exclude_recipes:
        lines.extend(
            ["", f"Exclude these recipes: {', '.join(request.exclude_recipes)}"]
        )

    guidelines = [
        "CRITICAL: Absolutely NO meals should contain any of the listed allergens",
        "Create meals that respect ALL dietary restrictions",
        "Avoid disliked ingredients when possible, but they are not as critical "
        "as allergens",
        f"Stay within the weekly budget of ${budget:.2f}",
        f"Weekday meals should take no more than {weekday} minutes to prepare",
        f"Weekend meals can be more elaborate (up to {weekend} minutes)",
        "Include a variety of cuisines with emphasis on the household's preferences",
        "Create a balanced plan with appropriate portion sizes for "
        f"{profile.household_size} people",
        "Reuse ingredients across meals when possible to reduce waste",
        "Adjust complexity based on the user's cooking skill level",
    ]
    if nutrition:
        guidelines.extend(
            [
                "IMPORTANT: Ensure meals meet the specified nutrition requirements "
                "for each household member",
                "Consider portion sizes and nutritional content to help members "
                "reach their daily targets",
            ]
        )
    lines.extend(["", "Planning Guidelines:"])
    lines.extend(
        f"{number}. {guideline}" for number, guideline in enumerate(guidelines, 1)
    )
    lines.extend(
        [
            "",
            f"Please provide a JSON response with exactly {MEALS_PER_WEEK} meals "
            "(7 days x 3 meals: breakfast, lunch and dinner for dayOfWeek 0-6) "
            "as a single JSON object in this exact format:",
            _plan_format_example(profile.household_size),
            "",
            "Ensure the total estimated cost stays within the budget and all meals "
            "respect dietary restrictions. Be realistic with portion sizes and "
            "ingredient costs.",
        ]
    )
    return "\n".join(lines)


def build_meal_swap_prompt(
    original_meal: Meal,
    profile: UserProfile,
    exclude_recipes: tuple[str, ...] = (),
    household: HouseholdPreferences | None = None,
) -> str:
    """Build the instruction asking for one replacement recipe."""
    restrictions = merge_dietary_restrictions(profile, household)
    allergens = list(household.all_allergens) if household else []
    disliked = list(household.all_disliked_ingredients) if household else []
    main_ingredients = ", ".join(
        ingredient.name
        for ingredient in original_meal.ingredients[:_MAIN_INGREDIENT_SAMPLE]
    )
    cost = original_meal.estimated_cost

    lines = [
        f"Suggest an alternative {original_meal.meal_type} recipe to replace "
        f'"{original_meal.recipe_name}".',
        "",
        "Original Recipe:",
        f"- Name: {original_meal.recipe_name}",
        f"- Description: {original_meal.description}",
        f"- Meal type: {original_meal.meal_type}",
        f"- Prep time: {original_meal.prep_time} minutes",
        f"- Cook time: {original_meal.cook_time} minutes",
        f"- Estimated cost: ${cost:.2f}",
        f"- Main ingredients: {main_ingredients}",
        "",
        "Requirements:",
        f"- Similar meal type: {original_meal.meal_type}",
        f"- Dietary restrictions: {', '.join(restrictions) or 'None'}",
    ]
    lines.extend(_avoidance_lines(allergens, disliked))
    lines.extend(
        [
            f"- Cuisine preferences: {', '.join(profile.cuisine_preferences) or 'Any'}",
            f"- Cooking skill level: {profile.cooking_skill_level}",
            f"- Target cost: around ${cost:.2f}",
            f"- Servings: {profile.household_size}",
            f"- Maximum prep time: {profile.cooking_time_preference.weekday} minutes",
            "",
            f"Do not suggest: {', '.join(exclude_recipes) or 'None'}",
            "",
            "Provide a single JSON object describing one replacement recipe in "
            "this format:",
            _SWAP_FORMAT_EXAMPLE,
            "",
            "Make sure the alternative recipe is different enough from the original "
            "but still satisfies the same meal need. Be creative but practical.",
        ]
    )
    return "\n".join(lines)


def build_instructions_prompt(meal: Meal) -> str:
    """Build the instruction for step-by-step cooking directions."""
    ingredients = "\n".join(
        f"- {_format_amount(ingredient)} {ingredient.unit} {ingredient.name}"
        for ingredient in meal.ingredients
    )
    return "\n".join(
        [
            f'Please provide detailed cooking instructions for "{meal.recipe_name}".',
            "",
            "Recipe details:",
            f"- Description: {meal.description}",
            f"- Preparation time: {meal.prep_time} minutes",
            f"- Cooking time: {meal.cook_time} minutes",
            f"- Servings: {meal.servings}",
            "",
            "Ingredients:",
            ingredients,
            "",
            "Provide step-by-step instructions in a JSON array format like this:",
            '["Step 1: Preheat oven to 350F.", "Step 2: Mix ingredients in a bowl.", '
            '"..."]',
            "",
            "Make sure the instructions are clear, detailed, and easy to follow.",
        ]
    )


def build_cooking_tips_prompt(meal: Meal, profile: UserProfile) -> str:
    """Build the instruction for skill-appropriate cooking tips."""
    skill = profile.cooking_skill_level
    time_preference = profile.cooking_time_preference
    main_ingredients = ", ".join(
        ingredient.name for ingredient in meal.ingredients[:_MAIN_INGREDIENT_SAMPLE]
    )
    return "\n".join(
        [
            f'Please provide 3-5 helpful cooking tips for "{meal.recipe_name}" '
            f"tailored to a {skill} cook.",
            "",
            "Recipe details:",
            f"- Description: {meal.description}",
            f"- Preparation time: {meal.prep_time} minutes",
            f"- Cooking time: {meal.cook_time} minutes",
            f"- Main ingredients: {main_ingredients}",
            "",
            f"User cooking skill level: {skill}",
            f"Available cooking time: {time_preference.weekday} minutes on weekdays, "
            f"{time_preference.weekend} minutes on weekends",
            "",
            "Provide tips in a JSON array format like this:",
            '["Tip 1: Prep all ingredients before starting to save time.", '
            '"Tip 2: Use a sharp knife for cleaner cuts.", "..."]',
            "",
            f"Focus on practical tips that will help this {skill} cook succeed "
            "with this recipe.",
        ]
    )


def build_substitutes_prompt(
    ingredient: Ingredient, profile: UserProfile, avoid: tuple[str, ...] = ()
) -> str:
    """Build the instruction asking for cheaper ingredient substitutes."""
    restrictions = ", ".join(profile.dietary_restrictions) or "None"
    return "\n".join(
        [
            f'Suggest up to 2 cheaper substitutes for "{ingredient.name}" '
            f"({_format_amount(ingredient)} {ingredient.unit}, category "
            f"{ingredient.category}, currently ${ingredient.estimated_price:.2f}).",
            "",
            f"- Dietary restrictions: {restrictions}",
            f"- Never suggest: {', '.join(avoid) or 'None'}",
            "",
            "Provide a JSON array in this format:",
            '[{"name": "substitute name", "estimatedPrice": 2.50, '
            '"description": "why it works", "tips": ["how to cook it"]}]',
        ]
    )


def _avoidance_lines(allergens: list[str], disliked: list[str]) -> list[str]:
    lines = []
    if allergens:
        lines.append(f"- ALLERGENS (MUST AVOID): {', '.join(allergens)}")
    if disliked:
        lines.append(
            f"- Disliked ingredients (avoid when possible): {', '.join(disliked)}"
        )
    return lines


def _nutrition_line(requirement: NutritionRequirement) -> str:
    line = f"- {requirement.name}:"
    if requirement.daily_calories:
        line += f" {requirement.daily_calories} calories/day"
    macros = requirement.macros
    if macros is not None:
        line += (
            f" ({macros.protein:g}g protein, {macros.carbs:g}g carbs, "
            f"{macros.fat:g}g fat"
        )
        if macros.fiber:
            line += f", {macros.fiber:g}g fiber"
        line += ")"
    return line


def _format_amount(ingredient: Ingredient) -> str:
    return f"{ingredient.amount:g}"


def _plan_format_example(household_size: int) -> str:
    return f"""{{
  "meals": [
    {{
      "dayOfWeek": 0,
      "mealType": "breakfast",
      "recipeName": "Recipe Name",
      "description": "Brief description",
      "prepTime": 15,
      "cookTime": 10,
      "servings": {household_size},
      "estimatedCost": 8.50,
      "ingredients": [
        {{
          "name": "ingredient name",
          "amount": 2,
          "unit": "cups",
          "category": "produce",
          "estimatedPrice": 3.00
        }}
      ]
    }}
  ]
}}"""


_SWAP_FORMAT_EXAMPLE = """{
  "recipeName": "New Recipe Name",
  "description": "Brief description",
  "prepTime": 20,
  "cookTime": 15,
  "estimatedCost": 9.00,
  "ingredients": [
    {
      "name": "ingredient name",
      "amount": 1,
      "unit": "lb",
      "category": "meat",
      "estimatedPrice": 5.00
    }
  ]
}"""


def _unique(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            unique.append(value)
    return unique
