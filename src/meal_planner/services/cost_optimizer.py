"""Cost-saving suggestions for meal plans and their application."""

import asyncio
import logging
import re
from dataclasses import dataclass, field

from meal_planner.domain.budget import BudgetStatus, calculate_budget_status
from meal_planner.domain.meals import Ingredient, Meal, MealPlan
from meal_planner.domain.optimization import (
    Difficulty,
    Impact,
    Implementation,
    OptimizationResult,
    OptimizationSuggestion,
    Priority,
    Replacement,
    SuggestionType,
)
from meal_planner.domain.planning import Substitute
from meal_planner.domain.profiles import HouseholdPreferences, SkillLevel, UserProfile
from meal_planner.errors import MealPlannerError
from meal_planner.services.ai import MealPlanGenerator
from meal_planner.services.substitutions import (
    ANIMAL_PRODUCT_TERMS,
    MEAT_AND_SEAFOOD_TERMS,
    lookup_seasonal,
    lookup_substitutions,
)

_logger = logging.getLogger(__name__)

EXPENSIVE_INGREDIENT_PRICE = 3.00
EXPENSIVE_INGREDIENT_RATIO = 1.25
MIN_INGREDIENT_SAVINGS = 1.00
MAX_EXPENSIVE_INGREDIENTS = 5
MAX_ALTERNATIVES_PER_INGREDIENT = 2
EXPENSIVE_MEAL_RATIO = 1.5
MAX_MEAL_REPLACEMENTS = 3
BULK_MIN_MEALS = 3
MAX_BULK_SUGGESTIONS = 3
MAX_SEASONAL_SUGGESTIONS = 3

_DIFFICULT_SWAPS = ("flour", "eggs", "butter")
# Replacements overwrite earlier swaps; portions scale whichever meal remains.
_APPLY_PHASES = {
    SuggestionType.INGREDIENT_SWAP: 0,
    SuggestionType.MEAL_REPLACEMENT: 1,
    SuggestionType.PORTION_ADJUSTMENT: 2,
}
_NON_WORD = re.compile(r"[^a-z0-9]+")


@dataclass
class _Alternative:
    name: str
    price: float
    reason: str
    nutritional_impact: str = "none"
    taste_impact: str = "minimal"
    cooking_tip: str | None = None


@dataclass
class CostOptimizer:
    """Produces ranked savings suggestions and applies a chosen subset."""

    generator: MealPlanGenerator
    meal_replacement_min_savings: float = 2.0
    bulk_discount: float = 0.15

    async def generate_suggestions(  # noqa: PLR0913
        self,
        plan: MealPlan,
        profile: UserProfile,
        household: HouseholdPreferences | None = None,
        *,
        max_suggestions: int = 10,
        include_advanced: bool = True,
    ) -> list[OptimizationSuggestion]:
        """Analyze a plan and return the best suggestions, highest score first."""
        suggestions = [
            *await self._ingredient_swaps(plan, profile, household),
            *await self._meal_replacements(plan, profile, household),
            *self._portion_adjustments(plan, profile),
            *self._bulk_purchases(plan),
            *self._seasonal_swaps(plan),
        ]
        if not include_advanced:
            suggestions = [
                suggestion
                for suggestion in suggestions
                if suggestion.implementation.skill_required != SkillLevel.ADVANCED
            ]
        suggestions.sort(key=lambda suggestion: suggestion.score, reverse=True)
        return suggestions[:max_suggestions]

    async def apply_optimizations(
        self,
        plan: MealPlan,
        suggestions: list[OptimizationSuggestion],
        profile: UserProfile,
        household: HouseholdPreferences | None = None,
    ) -> OptimizationResult:
        """Apply suggestions to a copy of the plan and report the savings.

        Individual failures are recorded in ``failed`` and never abort the
        batch. Mutations run by type (ingredient swaps, then meal
        replacements, then portions) whatever the order of ``suggestions``.
        Totals and budget status are recomputed once at the end.

        Meal replacements are fetched again through the swap pathway, so the
        applied meal can differ from the one the suggestion priced when the
        generator cache is off or expired. Reported savings always come from
        the resulting plan, not from the suggestions.
        """
        optimized = plan.model_copy(deep=True)
        replacements = await self._fetch_replacements(
            optimized, suggestions, profile, household
        )
        succeeded: dict[str, bool] = {}
        for suggestion in sorted(suggestions, key=_apply_phase):
            try:
                self._apply_one(optimized, suggestion, replacements, profile)
            except (MealPlannerError, LookupError) as exc:
                _logger.warning(
                    "Skipping optimization %s (%s): %s",
                    suggestion.id,
                    suggestion.type,
                    exc,
                )
                succeeded[suggestion.id] = False
            else:
                succeeded[suggestion.id] = True
        applied = [item.id for item in suggestions if succeeded[item.id]]
        failed = [item.id for item in suggestions if not succeeded[item.id]]

        optimized.recalculate(profile.weekly_budget)
        original_cost = plan.total_estimated_cost
        optimized_cost = optimized.total_estimated_cost
        total_savings = original_cost - optimized_cost
        return OptimizationResult(
            original_cost=original_cost,
            optimized_cost=optimized_cost,
            total_savings=total_savings,
            savings_percentage=(
                total_savings / original_cost * 100 if original_cost > 0 else 0.0
            ),
            suggestions=list(suggestions),
            optimized_meal_plan=optimized,
            applied=applied,
            failed=failed,
        )

    async def _ingredient_swaps(
        self,
        plan: MealPlan,
        profile: UserProfile,
        household: HouseholdPreferences | None,
    ) -> list[OptimizationSuggestion]:
        avoid = _avoided_terms(profile, household)
        suggestions = []
        for meal, ingredient in find_expensive_ingredients(plan)[
            :MAX_EXPENSIVE_INGREDIENTS
        ]:
            alternatives = await self._find_alternatives(ingredient, profile, avoid)
            for alternative in alternatives[:MAX_ALTERNATIVES_PER_INGREDIENT]:
                savings = ingredient.estimated_price - alternative.price
                if savings <= MIN_INGREDIENT_SAVINGS:
                    continue
                suggestions.append(
                    OptimizationSuggestion(
                        id=(
                            f"ingredient_{meal.id}_{_slug(ingredient.name)}"
                            f"_{_slug(alternative.name)}"
                        ),
                        type=SuggestionType.INGREDIENT_SWAP,
                        priority=_priority(savings, high=3, medium=1.5),
                        title=f"Replace {ingredient.name} with {alternative.name}",
                        description=(
                            f"Save money by using {alternative.name} instead of "
                            f"{ingredient.name} in {meal.recipe_name}"
                        ),
                        current_cost=ingredient.estimated_price,
                        optimized_cost=alternative.price,
                        savings=savings,
                        savings_percentage=savings / ingredient.estimated_price * 100,
                        difficulty=_swap_difficulty(ingredient.name),
                        meal_id=meal.id,
                        ingredient_name=ingredient.name,
                        replacement=Replacement(
                            name=alternative.name,
                            reason=alternative.reason,
                            nutritional_impact=alternative.nutritional_impact,
                        ),
                        implementation=Implementation(
                            steps=(
                                f"Remove {ingredient.name} from your shopping list",
                                f"Add {alternative.name} to your shopping list",
                                f"Use {alternative.name} in the same quantity as "
                                f"{ingredient.name}",
                                alternative.cooking_tip
                                or f"Cook {alternative.name} the same way as "
                                f"{ingredient.name}",
                            ),
                            time_required=0,
                            skill_required=SkillLevel.BEGINNER,
                        ),
                        impact=Impact(
                            taste_change=alternative.taste_impact,
                            nutrition_change=(
                                "same"
                                if alternative.nutritional_impact == "none"
                                else "slightly_reduced"
                            ),
                        ),
                    )
                )
        return suggestions

    async def _find_alternatives(
        self, ingredient: Ingredient, profile: UserProfile, avoid: tuple[str, ...]
    ) -> list[_Alternative]:
        alternatives = [
            _Alternative(
                name=rule.substitute_name(ingredient.name),
                price=round(ingredient.estimated_price * rule.price_factor, 2),
                reason=rule.reason,
                nutritional_impact=rule.nutritional_impact,
                taste_impact=rule.taste_impact,
                cooking_tip=rule.cooking_tip,
            )
            for rule in lookup_substitutions(ingredient.name, ingredient.category)
        ]
        alternatives = [item for item in alternatives if _allowed(item.name, avoid)]
        if alternatives:
            return alternatives

        try:
            substitutes = await self.generator.suggest_substitutes(
                ingredient, profile, avoid
            )
        except MealPlannerError as exc:
            _logger.warning(
                "No substitutes available for %s: %s", ingredient.name, exc
            )
            return []
        return [
            _from_substitute(substitute)
            for substitute in substitutes
            if _allowed(substitute.name, avoid)
        ]

    async def _meal_replacements(
        self,
        plan: MealPlan,
        profile: UserProfile,
        household: HouseholdPreferences | None,
    ) -> list[OptimizationSuggestion]:
        candidates = find_expensive_meals(plan, profile.weekly_budget)[
            :MAX_MEAL_REPLACEMENTS
        ]
        results = await asyncio.gather(
            *(
                self.generator.suggest_swap(
                    meal, profile, (meal.recipe_name,), household
                )
                for meal in candidates
            ),
            return_exceptions=True,
        )
        suggestions = []
        for meal, result in zip(candidates, results, strict=True):
            if isinstance(result, MealPlannerError):
                _logger.warning(
                    "Failed to find an alternative for %s: %s", meal.recipe_name, result
                )
                continue
            if isinstance(result, BaseException):
                raise result
            alternative = result
            savings = meal.estimated_cost - alternative.estimated_cost
            if savings <= self.meal_replacement_min_savings:
                continue
            time_change = alternative.total_time - meal.total_time
            suggestions.append(
                OptimizationSuggestion(
                    id=f"meal_{meal.id}_replacement",
                    type=SuggestionType.MEAL_REPLACEMENT,
                    priority=_priority(savings, high=8, medium=4),
                    title=f"Replace {meal.recipe_name} with {alternative.recipe_name}",
                    description=(
                        f"Switch to a more budget-friendly {meal.meal_type} option"
                    ),
                    current_cost=meal.estimated_cost,
                    optimized_cost=alternative.estimated_cost,
                    savings=savings,
                    savings_percentage=savings / meal.estimated_cost * 100,
                    difficulty=Difficulty.EASY,
                    meal_id=meal.id,
                    replacement=Replacement(
                        name=alternative.recipe_name,
                        reason="More budget-friendly option with similar nutrition",
                        nutritional_impact="minimal",
                    ),
                    implementation=Implementation(
                        steps=(
                            f"Remove ingredients for {meal.recipe_name} from "
                            "shopping list",
                            f"Add ingredients for {alternative.recipe_name}",
                            f"Follow the new recipe for {alternative.recipe_name}",
                        ),
                        time_required=abs(time_change),
                        skill_required=profile.cooking_skill_level,
                    ),
                    impact=Impact(
                        taste_change="noticeable",
                        nutrition_change="same",
                        cooking_time_change=time_change,
                    ),
                )
            )
        return suggestions

    def _portion_adjustments(
        self, plan: MealPlan, profile: UserProfile
    ) -> list[OptimizationSuggestion]:
        suggestions = []
        target = profile.household_size
        for meal in plan.meals:
            if meal.servings <= target:
                continue
            ratio = target / meal.servings
            optimized_cost = meal.estimated_cost * ratio
            savings = meal.estimated_cost - optimized_cost
            if savings <= 0:
                continue
            suggestions.append(
                OptimizationSuggestion(
                    id=f"portion_{meal.id}",
                    type=SuggestionType.PORTION_ADJUSTMENT,
                    priority=Priority.MEDIUM if savings > 5 else Priority.LOW,
                    title=f"Reduce {meal.recipe_name} portion size",
                    description=(
                        f"Adjust serving size from {meal.servings} to {target} people"
                    ),
                    current_cost=meal.estimated_cost,
                    optimized_cost=optimized_cost,
                    savings=savings,
                    savings_percentage=savings / meal.estimated_cost * 100,
                    difficulty=Difficulty.EASY,
                    meal_id=meal.id,
                    implementation=Implementation(
                        steps=(
                            "Reduce all ingredient quantities by "
                            f"{round((1 - ratio) * 100)}%",
                            "Adjust cooking times if necessary",
                            "Store recipe with new serving size",
                        ),
                        time_required=5,
                        skill_required=SkillLevel.BEGINNER,
                    ),
                    impact=Impact(cooking_time_change=-5),
                )
            )
        return suggestions

    def _bulk_purchases(self, plan: MealPlan) -> list[OptimizationSuggestion]:
        usage: dict[str, _IngredientUsage] = {}
        for meal in plan.meals:
            for ingredient in meal.ingredients:
                entry = usage.setdefault(
                    ingredient.name.lower(), _IngredientUsage(name=ingredient.name)
                )
                entry.total_cost += ingredient.estimated_price
                entry.meal_ids.add(meal.id)

        candidates = sorted(
            (
                entry
                for entry in usage.values()
                if len(entry.meal_ids) >= BULK_MIN_MEALS
            ),
            key=lambda entry: entry.total_cost,
            reverse=True,
        )[:MAX_BULK_SUGGESTIONS]

        suggestions = []
        for entry in candidates:
            savings = entry.total_cost * self.bulk_discount
            if savings <= 0:
                continue
            suggestions.append(
                OptimizationSuggestion(
                    id=f"bulk_{_slug(entry.name)}",
                    type=SuggestionType.BULK_PURCHASE,
                    priority=Priority.MEDIUM if savings > 5 else Priority.LOW,
                    title=f"Buy {entry.name} in bulk",
                    description=(
                        f"{entry.name} appears in {len(entry.meal_ids)} meals; "
                        "purchase it in larger quantities to save money"
                    ),
                    current_cost=entry.total_cost,
                    optimized_cost=entry.total_cost - savings,
                    savings=savings,
                    savings_percentage=self.bulk_discount * 100,
                    difficulty=Difficulty.EASY,
                    ingredient_name=entry.name,
                    implementation=Implementation(
                        steps=(
                            f"Look for bulk or family-size packages of {entry.name}",
                            "Compare unit prices to ensure savings",
                            f"Store excess {entry.name} properly to prevent spoilage",
                        ),
                        time_required=10,
                        skill_required=SkillLevel.BEGINNER,
                    ),
                    impact=Impact(),
                )
            )
        return suggestions

    def _seasonal_swaps(self, plan: MealPlan) -> list[OptimizationSuggestion]:
        month = plan.week_start_date.month
        seen: set[str] = set()
        suggestions = []
        for meal in plan.meals:
            for ingredient in meal.ingredients:
                key = ingredient.name.lower()
                if ingredient.category.lower() != "produce" or key in seen:
                    continue
                rule = lookup_seasonal(ingredient.name)
                if rule is None or month in rule.in_season_months:
                    continue
                price = ingredient.estimated_price
                optimized_cost = round(price * rule.price_factor, 2)
                savings = ingredient.estimated_price - optimized_cost
                if savings <= 0:
                    continue
                seen.add(key)
                suggestions.append(
                    OptimizationSuggestion(
                        id=(
                            f"seasonal_{_slug(ingredient.name)}"
                            f"_{_slug(rule.alternative)}"
                        ),
                        type=SuggestionType.SEASONAL_SWAP,
                        priority=Priority.MEDIUM if savings > 3 else Priority.LOW,
                        title=(
                            f"Use {rule.alternative} instead of {ingredient.name}"
                        ),
                        description=(
                            f"{ingredient.name} is out of season; {rule.alternative} "
                            "costs less right now"
                        ),
                        current_cost=ingredient.estimated_price,
                        optimized_cost=optimized_cost,
                        savings=savings,
                        savings_percentage=savings / ingredient.estimated_price * 100,
                        difficulty=Difficulty.EASY,
                        meal_id=meal.id,
                        ingredient_name=ingredient.name,
                        replacement=Replacement(
                            name=rule.alternative,
                            reason=(
                                f"{ingredient.name} is out of season; "
                                f"{rule.alternative} is the in-season choice"
                            ),
                        ),
                        implementation=Implementation(
                            steps=(
                                f"Replace {ingredient.name} with {rule.alternative}",
                                f"Look for {rule.alternative} in the seasonal "
                                "produce section",
                                f"Adjust cooking time if needed for {rule.alternative}",
                            ),
                            time_required=0,
                            skill_required=SkillLevel.BEGINNER,
                        ),
                        impact=Impact(
                            taste_change="minimal", nutrition_change="improved"
                        ),
                    )
                )
                if len(suggestions) >= MAX_SEASONAL_SUGGESTIONS:
                    return suggestions
        return suggestions

    async def _fetch_replacements(
        self,
        plan: MealPlan,
        suggestions: list[OptimizationSuggestion],
        profile: UserProfile,
        household: HouseholdPreferences | None,
    ) -> dict[str, Meal | BaseException]:
        targets = [
            (suggestion.id, meal)
            for suggestion in suggestions
            if suggestion.type == SuggestionType.MEAL_REPLACEMENT
            and suggestion.meal_id is not None
            and (meal := plan.find_meal(suggestion.meal_id)) is not None
        ]
        results = await asyncio.gather(
            *(
                self.generator.suggest_swap(
                    meal, profile, (meal.recipe_name,), household
                )
                for _, meal in targets
            ),
            return_exceptions=True,
        )
        return {
            suggestion_id: result
            for (suggestion_id, _), result in zip(targets, results, strict=True)
        }

    def _apply_one(
        self,
        plan: MealPlan,
        suggestion: OptimizationSuggestion,
        replacements: dict[str, Meal | BaseException],
        profile: UserProfile,
    ) -> None:
        if suggestion.type in (
            SuggestionType.BULK_PURCHASE,
            SuggestionType.SEASONAL_SWAP,
        ):
            return
        meal = plan.find_meal(suggestion.meal_id or "")
        if meal is None:
            raise LookupError(f"Meal {suggestion.meal_id} is not in the plan")

        if suggestion.type == SuggestionType.INGREDIENT_SWAP:
            _substitute_ingredient(meal, suggestion)
        elif suggestion.type == SuggestionType.MEAL_REPLACEMENT:
            result = replacements.get(suggestion.id)
            if isinstance(result, BaseException):
                raise result
            if result is None:
                raise LookupError(f"No replacement fetched for {meal.id}")
            plan.replace_meal(
                meal.id,
                result.model_copy(
                    update={
                        "id": meal.id,
                        "day_of_week": meal.day_of_week,
                        "meal_type": meal.meal_type,
                    }
                ),
            )
        elif suggestion.type == SuggestionType.PORTION_ADJUSTMENT:
            _reduce_portions(meal, profile.household_size)


@dataclass
class _IngredientUsage:
    name: str
    total_cost: float = 0.0
    meal_ids: set[str] = field(default_factory=set)


def find_expensive_ingredients(plan: MealPlan) -> list[tuple[Meal, Ingredient]]:
    """Ingredients over $3 that also cost well above their meal-mates.

    Results are ordered by price, most expensive first.
    """
    found = []
    for meal in plan.meals:
        prices = [ingredient.estimated_price for ingredient in meal.ingredients]
        for index, ingredient in enumerate(meal.ingredients):
            price = ingredient.estimated_price
            if price <= EXPENSIVE_INGREDIENT_PRICE:
                continue
            others = prices[:index] + prices[index + 1 :]
            if others and price <= EXPENSIVE_INGREDIENT_RATIO * (
                sum(others) / len(others)
            ):
                continue
            found.append((meal, ingredient))
    found.sort(key=lambda item: item[1].estimated_price, reverse=True)
    return found


def find_expensive_meals(plan: MealPlan, weekly_budget: float) -> list[Meal]:
    """Meals well above the plan's average cost, most expensive first.

    When the plan is over budget any above-average meal qualifies.
    """
    if not plan.meals:
        return []
    average = sum(meal.estimated_cost for meal in plan.meals) / len(plan.meals)
    over_budget = (
        calculate_budget_status(plan.total_estimated_cost, weekly_budget)
        == BudgetStatus.OVER
    )
    threshold = average if over_budget else average * EXPENSIVE_MEAL_RATIO
    return sorted(
        (meal for meal in plan.meals if meal.estimated_cost > threshold),
        key=lambda meal: meal.estimated_cost,
        reverse=True,
    )


def _substitute_ingredient(meal: Meal, suggestion: OptimizationSuggestion) -> None:
    if suggestion.replacement is None or suggestion.ingredient_name is None:
        raise LookupError(f"Suggestion {suggestion.id} has no replacement")
    for index, ingredient in enumerate(meal.ingredients):
        if ingredient.name == suggestion.ingredient_name:
            # Prices may already be scaled by a portion change; keep the ratio.
            new_price = (
                ingredient.estimated_price
                * suggestion.optimized_cost
                / suggestion.current_cost
                if suggestion.current_cost > 0
                else suggestion.optimized_cost
            )
            meal.ingredients[index] = ingredient.model_copy(
                update={
                    "name": suggestion.replacement.name,
                    "estimated_price": new_price,
                }
            )
            meal.estimated_cost = max(
                0.0, meal.estimated_cost - ingredient.estimated_price + new_price
            )
            return
    raise LookupError(
        f"Ingredient {suggestion.ingredient_name} is not in meal {meal.id}"
    )


def _reduce_portions(meal: Meal, household_size: int) -> None:
    if meal.servings <= household_size:
        return
    ratio = household_size / meal.servings
    meal.ingredients = [
        ingredient.model_copy(
            update={
                "amount": ingredient.amount * ratio,
                "estimated_price": ingredient.estimated_price * ratio,
            }
        )
        for ingredient in meal.ingredients
    ]
    meal.estimated_cost = meal.estimated_cost * ratio
    meal.servings = household_size


def _avoided_terms(
    profile: UserProfile, household: HouseholdPreferences | None
) -> tuple[str, ...]:
    terms = list(profile.dietary_restrictions)
    if household is not None:
        terms.extend(household.all_dietary_restrictions)
        terms.extend(household.all_allergens)
        terms.extend(household.all_disliked_ingredients)
    lowered = {term.lower() for term in terms}
    if lowered & {"vegetarian", "vegan"}:
        terms.extend(MEAT_AND_SEAFOOD_TERMS)
    if "vegan" in lowered:
        terms.extend(ANIMAL_PRODUCT_TERMS)
    return tuple(dict.fromkeys(term.lower() for term in terms if term))


def _allowed(name: str, avoid: tuple[str, ...]) -> bool:
    lowered = name.lower()
    return not any(term in lowered for term in avoid)


def _from_substitute(substitute: Substitute) -> _Alternative:
    return _Alternative(
        name=substitute.name,
        price=substitute.estimated_price,
        reason=substitute.reason,
        nutritional_impact="minimal",
        cooking_tip=substitute.cooking_tip,
    )


def _apply_phase(suggestion: OptimizationSuggestion) -> int:
    return _APPLY_PHASES.get(suggestion.type, 0)


def _priority(savings: float, *, high: float, medium: float) -> Priority:
    if savings > high:
        return Priority.HIGH
    if savings > medium:
        return Priority.MEDIUM
    return Priority.LOW


def _swap_difficulty(ingredient_name: str) -> Difficulty:
    lowered = ingredient_name.lower()
    if any(item in lowered for item in _DIFFICULT_SWAPS):
        return Difficulty.MEDIUM
    return Difficulty.EASY


def _slug(value: str) -> str:
    return _NON_WORD.sub("_", value.lower()).strip("_")
