"""Pydantic models for API request bodies."""

from datetime import datetime

from pydantic import BaseModel, Field

from meal_planner.domain.profiles import CookingTimePreference, SkillLevel, UserProfile


class CookingTimeBody(BaseModel):
    """Cooking time ceilings in minutes."""

    weekday: int = Field(default=30, ge=0)
    weekend: int = Field(default=60, ge=0)


class ProfileBody(BaseModel):
    """User profile payload."""

    user_id: str
    household_size: int = Field(gt=0)
    weekly_budget: float = Field(gt=0)
    cooking_skill_level: SkillLevel = SkillLevel.INTERMEDIATE
    cooking_time_preference: CookingTimeBody = Field(default_factory=CookingTimeBody)
    dietary_restrictions: list[str] = Field(default_factory=list)
    cuisine_preferences: list[str] = Field(default_factory=list)

    def to_domain(self) -> UserProfile:
        return UserProfile(
            user_id=self.user_id,
            household_size=self.household_size,
            weekly_budget=self.weekly_budget,
            cooking_skill_level=self.cooking_skill_level,
            cooking_time_preference=CookingTimePreference(
                weekday=self.cooking_time_preference.weekday,
                weekend=self.cooking_time_preference.weekend,
            ),
            dietary_restrictions=tuple(self.dietary_restrictions),
            cuisine_preferences=tuple(self.cuisine_preferences),
        )


class GeneratePlanBody(BaseModel):
    """Request to generate a weekly plan."""

    profile: ProfileBody
    exclude_recipes: list[str] = Field(default_factory=list)
    pantry_items: list[str] = Field(default_factory=list)
    preferred_cuisines: list[str] = Field(default_factory=list)
    week_start_date: datetime | None = None
    budget_optimization: bool = True
    max_renegotiations: int = Field(default=3, ge=0)


class ProfileRequestBody(BaseModel):
    """Request carrying only the acting user's profile."""

    profile: ProfileBody


class SuggestionsBody(BaseModel):
    """Request for cost optimization suggestions."""

    profile: ProfileBody
    max_suggestions: int = Field(default=10, gt=0)
    include_advanced: bool = True


class ApplyOptimizationsBody(BaseModel):
    """Request to apply selected suggestions to a stored plan."""

    profile: ProfileBody
    suggestion_ids: list[str] = Field(min_length=1)
    include_advanced: bool = True
