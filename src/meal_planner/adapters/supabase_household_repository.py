"""Supabase repository for household members."""

from dataclasses import dataclass

from supabase import Client

from meal_planner.domain.profiles import HouseholdMember, HouseholdPreferences, Macros
from meal_planner.services.household import (
    HouseholdPreferencesProvider,
    aggregate_household_preferences,
)


@dataclass
class SupabaseHouseholdRepository(HouseholdPreferencesProvider):
    """Supabase implementation for household member preferences."""

    client: Client

    def list_members(self, user_id: str) -> list[HouseholdMember]:
        """Return all household members recorded for a user."""
        response = (
            self.client.table("household_members")
            .select(
                "name, dietary_restrictions, allergens, disliked_ingredients, "
                "cuisine_preferences, advanced_nutrition"
            )
            .eq("user_id", user_id)
            .execute()
        )
        return [_to_member(row) for row in response.data or []]

    def get_household_preferences(self, user_id: str) -> HouseholdPreferences:
        """Aggregate preferences across the user's household members."""
        return aggregate_household_preferences(self.list_members(user_id))


def _to_member(row: dict[str, object]) -> HouseholdMember:
    nutrition = row.get("advanced_nutrition") or {}
    macros = nutrition.get("macros")
    return HouseholdMember(
        name=str(row.get("name") or ""),
        dietary_restrictions=tuple(row.get("dietary_restrictions") or ()),
        allergens=tuple(row.get("allergens") or ()),
        disliked_ingredients=tuple(row.get("disliked_ingredients") or ()),
        cuisine_preferences=tuple(row.get("cuisine_preferences") or ()),
        nutrition_enabled=bool(nutrition.get("enabled")),
        daily_calories=nutrition.get("dailyCalories"),
        macros=(
            Macros(
                protein=macros["protein"],
                carbs=macros["carbs"],
                fat=macros["fat"],
                fiber=macros.get("fiber"),
            )
            if macros
            else None
        ),
    )
