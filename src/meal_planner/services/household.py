"""Household preference aggregation."""

from collections import Counter
from collections.abc import Iterable
from typing import Protocol

from meal_planner.domain.profiles import (
    HouseholdMember,
    HouseholdPreferences,
    NutritionRequirement,
)


class HouseholdPreferencesProvider(Protocol):
    """Interface for reading a user's aggregate household preferences."""

    def get_household_preferences(self, user_id: str) -> HouseholdPreferences:
        """Return merged preferences for every member of the user's household."""


def aggregate_household_preferences(
    members: Iterable[HouseholdMember],
) -> HouseholdPreferences:
    """Merge member records into one set of household constraints.

    Restrictions, allergens and dislikes are unioned in first-seen order.
    Cuisines become a histogram of how many members like each one. Only
    members with nutrition tracking enabled contribute nutrition targets.
    """
    restrictions: dict[str, None] = {}
    allergens: dict[str, None] = {}
    disliked: dict[str, None] = {}
    cuisines: Counter[str] = Counter()
    nutrition: list[NutritionRequirement] = []

    for member in members:
        restrictions.update(dict.fromkeys(member.dietary_restrictions))
        allergens.update(dict.fromkeys(member.allergens))
        disliked.update(dict.fromkeys(member.disliked_ingredients))
        cuisines.update(member.cuisine_preferences)
        if member.nutrition_enabled:
            nutrition.append(
                NutritionRequirement(
                    name=member.name,
                    daily_calories=member.daily_calories,
                    macros=member.macros,
                )
            )

    return HouseholdPreferences(
        all_dietary_restrictions=tuple(restrictions),
        all_allergens=tuple(allergens),
        all_disliked_ingredients=tuple(disliked),
        cuisine_preferences=dict(cuisines),
        nutrition_requirements=tuple(nutrition),
    )
