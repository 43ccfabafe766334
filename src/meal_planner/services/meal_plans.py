"""Meal plan lifecycle: generate, persist, swap and look up plans."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Protocol

from meal_planner.domain.meals import DAYS_PER_WEEK, Meal, MealPlan
from meal_planner.domain.planning import MealPlanDraft, MealPlanRequest
from meal_planner.domain.profiles import UserProfile
from meal_planner.errors import MealNotFoundError, MealPlanNotFoundError
from meal_planner.services.ai import MealPlanGenerator
from meal_planner.services.household import HouseholdPreferencesProvider

_logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("meals", "totalEstimatedCost", "budgetStatus", "updatedAt")


class MealPlanRepository(Protocol):
    """Persistence interface for meal plans."""

    def save(self, plan: MealPlan) -> str:
        """Insert or replace a plan and return its id."""

    def get(self, plan_id: str) -> MealPlan | None:
        """Return a plan by id."""

    def list_by_user(self, user_id: str) -> list[MealPlan]:
        """Return a user's plans, newest week first."""

    def delete(self, plan_id: str) -> None:
        """Delete a plan."""

    def update(self, plan_id: str, fields: dict[str, object]) -> None:
        """Overwrite selected document fields of a plan."""

    def find_by_meal_id(self, meal_id: str) -> MealPlan | None:
        """Return the plan containing the given meal."""


def _local_now() -> datetime:
    return datetime.now().astimezone()


def start_of_tomorrow(now: datetime) -> datetime:
    """Midnight at the start of the day after ``now``, in ``now``'s timezone."""
    return (now + timedelta(days=1)).replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass
class MealPlanService:
    """Service that turns generated drafts into persisted plans."""

    generator: MealPlanGenerator
    repository: MealPlanRepository
    household_provider: HouseholdPreferencesProvider
    clock: Callable[[], datetime] = field(default=_local_now)

    async def generate_weekly_plan(
        self,
        profile: UserProfile,
        *,
        exclude_recipes: tuple[str, ...] = (),
        pantry_items: tuple[str, ...] = (),
        preferred_cuisines: tuple[str, ...] = (),
        week_start_date: datetime | None = None,
    ) -> MealPlan:
        """Generate, persist and return a plan for the coming week."""
        request = self.build_request(
            profile,
            exclude_recipes=exclude_recipes,
            pantry_items=pantry_items,
            preferred_cuisines=preferred_cuisines,
            week_start_date=week_start_date,
        )
        draft = await self.generator.generate_plan(request)
        plan = self.create_plan(profile, draft, week_start_date)
        self.save_plan(plan)
        return plan

    def save_plan(self, plan: MealPlan) -> str:
        """Persist a new plan."""
        plan_id = self.repository.save(plan)
        _logger.info(
            "Saved meal plan %s for user %s (total=%.2f, status=%s)",
            plan.id,
            plan.user_id,
            plan.total_estimated_cost,
            plan.budget_status,
        )
        return plan_id

    def build_request(
        self,
        profile: UserProfile,
        *,
        exclude_recipes: tuple[str, ...] = (),
        pantry_items: tuple[str, ...] = (),
        preferred_cuisines: tuple[str, ...] = (),
        week_start_date: datetime | None = None,
    ) -> MealPlanRequest:
        """Attach the user's household preferences to a generation request."""
        household = self.household_provider.get_household_preferences(profile.user_id)
        return MealPlanRequest(
            user_profile=profile,
            exclude_recipes=exclude_recipes,
            pantry_items=pantry_items,
            preferred_cuisines=preferred_cuisines,
            week_start_date=week_start_date,
            household_preferences=household,
        )

    def create_plan(
        self,
        profile: UserProfile,
        draft: MealPlanDraft,
        week_start_date: datetime | None = None,
    ) -> MealPlan:
        """Give a draft its identity, week start and timestamps."""
        now = self.clock()
        return MealPlan(
            id=f"plan_{int(now.timestamp() * 1000)}",
            user_id=profile.user_id,
            week_start_date=week_start_date or start_of_tomorrow(now),
            meals=draft.meals,
            total_estimated_cost=draft.total_estimated_cost,
            budget_status=draft.budget_status,
            created_at=now,
            updated_at=now,
        )

    async def swap_meal(self, meal_id: str, profile: UserProfile) -> Meal:
        """Replace one meal in its stored plan and return the replacement."""
        plan = self.repository.find_by_meal_id(meal_id)
        meal = plan.find_meal(meal_id) if plan is not None else None
        if plan is None or meal is None:
            raise MealNotFoundError(meal_id)

        exclude = tuple(dict.fromkeys(item.recipe_name for item in plan.meals))
        household = self.household_provider.get_household_preferences(profile.user_id)
        replacement = await self.generator.suggest_swap(
            meal, profile, exclude, household
        )
        plan.replace_meal(meal_id, replacement)
        plan.recalculate(profile.weekly_budget)
        self.persist_changes(plan)
        _logger.info(
            "Swapped meal %s for %s in plan %s", meal_id, replacement.id, plan.id
        )
        return replacement

    def persist_changes(self, plan: MealPlan) -> None:
        """Stamp and write the mutable parts of a plan back to storage."""
        plan.updated_at = self.clock()
        document = plan.to_document()
        self.repository.update(
            plan.id, {key: document[key] for key in _UPDATABLE_FIELDS}
        )

    def get_plan(self, plan_id: str) -> MealPlan:
        """Return a plan or raise if it does not exist."""
        plan = self.repository.get(plan_id)
        if plan is None:
            raise MealPlanNotFoundError(plan_id)
        return plan

    def get_meal(self, meal_id: str) -> Meal:
        """Return a stored meal by id."""
        plan = self.repository.find_by_meal_id(meal_id)
        meal = plan.find_meal(meal_id) if plan is not None else None
        if meal is None:
            raise MealNotFoundError(meal_id)
        return meal

    def list_user_plans(self, user_id: str) -> list[MealPlan]:
        """Return a user's plans, newest week first."""
        plans = self.repository.list_by_user(user_id)
        return sorted(
            plans, key=lambda plan: _aware(plan.week_start_date), reverse=True
        )

    def delete_plan(self, plan_id: str) -> None:
        """Delete a plan; unknown ids raise."""
        self.get_plan(plan_id)
        self.repository.delete(plan_id)

    def get_current_week_plan(self, user_id: str) -> MealPlan | None:
        """Return the most recent plan whose week contains tomorrow."""
        tomorrow = start_of_tomorrow(self.clock())
        for plan in self.list_user_plans(user_id):
            start = _aware(plan.week_start_date)
            if start <= tomorrow < start + timedelta(days=DAYS_PER_WEEK):
                return plan
        return None


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo is not None else moment.astimezone()
