"""User and household profile models."""

from dataclasses import dataclass, field
from enum import StrEnum


class SkillLevel(StrEnum):
    """Cooking skill, ordered from least to most experienced."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def rank(self) -> int:
        return _SKILL_RANKS[self]


_SKILL_RANKS = {
    SkillLevel.BEGINNER: 0,
    SkillLevel.INTERMEDIATE: 1,
    SkillLevel.ADVANCED: 2,
}


@dataclass(frozen=True)
class CookingTimePreference:
    """Maximum cooking minutes per day type."""

    weekday: int
    weekend: int


@dataclass(frozen=True)
class UserProfile:
    """Immutable planning input describing the household owner."""

    user_id: str
    household_size: int
    weekly_budget: float
    cooking_skill_level: SkillLevel
    cooking_time_preference: CookingTimePreference
    dietary_restrictions: tuple[str, ...] = ()
    cuisine_preferences: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.household_size <= 0:
            raise ValueError("household_size must be positive")
        if self.weekly_budget <= 0:
            raise ValueError("weekly_budget must be positive")


@dataclass(frozen=True)
class Macros:
    """Daily macronutrient targets in grams."""

    protein: float
    carbs: float
    fat: float
    fiber: float | None = None


@dataclass(frozen=True)
class NutritionRequirement:
    """Nutrition targets for a single household member."""

    name: str
    daily_calories: int | None = None
    macros: Macros | None = None


@dataclass(frozen=True)
class HouseholdMember:
    """Preferences recorded for one member of a household."""

    name: str
    dietary_restrictions: tuple[str, ...] = ()
    allergens: tuple[str, ...] = ()
    disliked_ingredients: tuple[str, ...] = ()
    cuisine_preferences: tuple[str, ...] = ()
    nutrition_enabled: bool = False
    daily_calories: int | None = None
    macros: Macros | None = None


@dataclass(frozen=True)
class HouseholdPreferences:
    """Aggregate preferences across all household members."""

    all_dietary_restrictions: tuple[str, ...] = ()
    all_allergens: tuple[str, ...] = ()
    all_disliked_ingredients: tuple[str, ...] = ()
    cuisine_preferences: dict[str, int] = field(default_factory=dict)
    nutrition_requirements: tuple[NutritionRequirement, ...] = ()
