"""End-to-end planning flow with budget renegotiation and recipe enrichment."""

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime

from meal_planner.adapters.recipe_client import RecipeClient
from meal_planner.domain.budget import BudgetStatus
from meal_planner.domain.meals import Meal, MealPlan
from meal_planner.domain.profiles import UserProfile
from meal_planner.services.ai import MealPlanGenerator
from meal_planner.services.meal_plans import MealPlanService

_logger = logging.getLogger(__name__)

RENEGOTIATION_BUDGET_FACTOR = 0.9


@dataclass(frozen=True)
class GenerationOptions:
    """Caller controls for a full plan generation."""

    exclude_recipes: tuple[str, ...] = ()
    pantry_items: tuple[str, ...] = ()
    preferred_cuisines: tuple[str, ...] = ()
    week_start_date: datetime | None = None
    max_renegotiations: int = 3
    budget_optimization: bool = True


@dataclass
class MealPlanOrchestrator:
    """Coordinates generation, renegotiation, enrichment and storage."""

    meal_plan_service: MealPlanService
    generator: MealPlanGenerator
    recipe_client: RecipeClient | None = None

    async def generate_meal_plan(
        self, profile: UserProfile, options: GenerationOptions | None = None
    ) -> MealPlan:
        """Generate a plan, regenerating against a tighter budget while over.

        Each retry asks for the original budget cut by a flat 10%; the cut
        does not compound across attempts. With a caching generator the
        second and later retries repeat the first retry's request and are
        served from the cache, so only the first retry reaches the model.
        The last plan is returned even if it is still over budget, and its
        status is judged against the real budget.
        """
        options = options or GenerationOptions()
        request = self.meal_plan_service.build_request(
            profile,
            exclude_recipes=options.exclude_recipes,
            pantry_items=options.pantry_items,
            preferred_cuisines=options.preferred_cuisines,
            week_start_date=options.week_start_date,
        )
        draft = await self.generator.generate_plan(request)

        attempts = 0
        while (
            options.budget_optimization
            and draft.budget_status == BudgetStatus.OVER
            and attempts < options.max_renegotiations
        ):
            attempts += 1
            target = profile.weekly_budget * RENEGOTIATION_BUDGET_FACTOR
            _logger.info(
                "Meal plan over budget (%.2f > %.2f), renegotiating %s/%s "
                "with target %.2f",
                draft.total_estimated_cost,
                profile.weekly_budget,
                attempts,
                options.max_renegotiations,
                target,
            )
            tighter = dataclasses.replace(
                request,
                user_profile=dataclasses.replace(profile, weekly_budget=target),
            )
            draft = await self.generator.generate_plan(tighter)

        draft.meals = await self._enrich_meals(draft.meals)
        plan = self.meal_plan_service.create_plan(
            profile, draft, options.week_start_date
        )
        plan.recalculate(profile.weekly_budget)
        self.meal_plan_service.save_plan(plan)
        return plan

    async def swap_meal(self, meal_id: str, profile: UserProfile) -> Meal:
        """Swap a stored meal and enrich the replacement."""
        replacement = await self.meal_plan_service.swap_meal(meal_id, profile)
        return await self._enrich_meal(replacement)

    async def get_meal_instructions(self, meal: Meal) -> list[str]:
        """Return catalogue instructions, falling back to generated ones."""
        if self.recipe_client is not None:
            try:
                instructions = await self.recipe_client.get_recipe_instructions(
                    _catalogue_id(meal)
                )
            except Exception:
                _logger.warning(
                    "Recipe catalogue instructions failed for %s, using AI",
                    meal.recipe_id,
                    exc_info=True,
                )
            else:
                if instructions:
                    return instructions
        return await self.generator.generate_instructions(meal)

    async def get_cooking_tips(self, meal: Meal, profile: UserProfile) -> list[str]:
        return await self.generator.generate_tips(meal, profile)

    async def _enrich_meals(self, meals: list[Meal]) -> list[Meal]:
        if self.recipe_client is None:
            return meals
        return list(await asyncio.gather(*(self._enrich_meal(meal) for meal in meals)))

    async def _enrich_meal(self, meal: Meal) -> Meal:
        """Fill missing description, times and ingredients from the catalogue."""
        if self.recipe_client is None:
            return meal
        try:
            recipe = await self.recipe_client.get_recipe_by_id(_catalogue_id(meal))
        except Exception:
            _logger.info("No catalogue data for %s, keeping generated meal", meal.id)
            return meal
        return meal.model_copy(
            update={
                "description": meal.description or recipe.description,
                "prep_time": meal.prep_time or recipe.prep_time,
                "cook_time": meal.cook_time or recipe.cook_time,
                "ingredients": meal.ingredients or list(recipe.ingredients),
            }
        )


def _catalogue_id(meal: Meal) -> str:
    return meal.recipe_id.removeprefix("recipe_")
