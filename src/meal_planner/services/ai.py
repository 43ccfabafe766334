"""Model-backed meal generation through cache, rate limiter and retry."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from meal_planner.domain.llm import ChatMessage, ChatRequest, ChatResponse
from meal_planner.domain.meals import Ingredient, Meal
from meal_planner.domain.planning import MealPlanDraft, MealPlanRequest, Substitute
from meal_planner.domain.profiles import HouseholdPreferences, UserProfile
from meal_planner.errors import classify_upstream_error
from meal_planner.services import parsing, prompts
from meal_planner.services.cache import Cache, cache_key
from meal_planner.services.rate_limiter import SlidingWindowRateLimiter
from meal_planner.services.retry import RetryPolicy

_logger = logging.getLogger(__name__)


class LlmClient(Protocol):
    """Interface for chat-completion style model calls."""

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """Send the request and return the generated text."""


class MealPlanGenerator(Protocol):
    """Strategy that produces plans, swaps and cooking guidance."""

    async def generate_plan(self, request: MealPlanRequest) -> MealPlanDraft:
        """Generate a full week of meals."""

    async def suggest_swap(
        self,
        meal: Meal,
        profile: UserProfile,
        exclude_recipes: tuple[str, ...] = (),
        household: HouseholdPreferences | None = None,
    ) -> Meal:
        """Return a replacement with the same day and meal type."""

    async def generate_instructions(self, meal: Meal) -> list[str]:
        """Return step-by-step cooking instructions."""

    async def generate_tips(self, meal: Meal, profile: UserProfile) -> list[str]:
        """Return cooking tips tailored to the cook's skill level."""

    async def suggest_substitutes(
        self,
        ingredient: Ingredient,
        profile: UserProfile,
        avoid: tuple[str, ...] = (),
    ) -> list[Substitute]:
        """Return cheaper substitutes for an ingredient."""

    def clear_cache(self) -> None:
        """Forget cached responses."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class LlmMealPlanGenerator(MealPlanGenerator):
    """Generator that calls a language model.

    Every call is checked against the cache first, then admitted through the
    rate limiter and issued under the retry policy. Cached values are copied
    on the way in and out so callers can mutate what they receive.
    """

    client: LlmClient
    cache: Cache
    rate_limiter: SlidingWindowRateLimiter
    retry_policy: RetryPolicy
    plan_model: str = "gpt-4"
    swap_model: str = "gpt-3.5-turbo"
    use_cache: bool = True
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def generate_plan(self, request: MealPlanRequest) -> MealPlanDraft:
        """Generate a weekly plan, reusing a live cache entry when present."""
        key = cache_key("mealplan", request)
        cached = self._cached(key)
        if isinstance(cached, MealPlanDraft):
            return cached.model_copy(deep=True)

        chat_request = ChatRequest(
            model=self.plan_model,
            messages=(
                ChatMessage("system", prompts.build_system_prompt()),
                ChatMessage("user", prompts.build_meal_plan_prompt(request)),
            ),
            temperature=0.7,
            max_tokens=3000,
            top_p=1.0,
            frequency_penalty=0.2,
            presence_penalty=0.1,
        )
        content = await self._complete(
            chat_request,
            action="Meal plan generation",
            default_message="Failed to generate meal plan",
        )
        draft = parsing.parse_meal_plan_response(
            content, request.user_profile.weekly_budget, self.clock()
        )
        _logger.info(
            "Generated meal plan: meals=%s total=%.2f status=%s",
            len(draft.meals),
            draft.total_estimated_cost,
            draft.budget_status,
        )
        self._store(key, draft.model_copy(deep=True))
        return draft

    async def suggest_swap(
        self,
        meal: Meal,
        profile: UserProfile,
        exclude_recipes: tuple[str, ...] = (),
        household: HouseholdPreferences | None = None,
    ) -> Meal:
        """Ask the model for one alternative recipe for ``meal``."""
        key = cache_key("mealswap", {"meal_id": meal.id, "exclude": exclude_recipes})
        cached = self._cached(key)
        if isinstance(cached, Meal):
            return cached.model_copy(deep=True)

        chat_request = ChatRequest(
            model=self.swap_model,
            messages=(
                ChatMessage("system", prompts.MEAL_SWAP_SYSTEM_PROMPT),
                ChatMessage(
                    "user",
                    prompts.build_meal_swap_prompt(
                        meal, profile, exclude_recipes, household
                    ),
                ),
            ),
            temperature=0.8,
            max_tokens=800,
        )
        content = await self._complete(
            chat_request,
            action="Meal swap",
            default_message="Failed to suggest meal alternative",
        )
        replacement = parsing.parse_meal_swap_response(content, meal, self.clock())
        self._store(key, replacement.model_copy(deep=True))
        return replacement

    async def generate_instructions(self, meal: Meal) -> list[str]:
        """Return cooking steps, cached per recipe id."""
        key = f"recipe:{meal.recipe_id}"
        cached = self._cached(key)
        if isinstance(cached, list):
            return list(cached)

        chat_request = ChatRequest(
            model=self.swap_model,
            messages=(
                ChatMessage("system", prompts.INSTRUCTIONS_SYSTEM_PROMPT),
                ChatMessage("user", prompts.build_instructions_prompt(meal)),
            ),
            temperature=0.7,
            max_tokens=1000,
        )
        content = await self._complete(
            chat_request,
            action="Recipe instructions",
            default_message="Failed to generate recipe instructions",
        )
        instructions = parsing.parse_string_list(content)
        self._store(key, list(instructions))
        return instructions

    async def generate_tips(self, meal: Meal, profile: UserProfile) -> list[str]:
        chat_request = ChatRequest(
            model=self.swap_model,
            messages=(
                ChatMessage("system", prompts.COOKING_TIPS_SYSTEM_PROMPT),
                ChatMessage("user", prompts.build_cooking_tips_prompt(meal, profile)),
            ),
            temperature=0.7,
            max_tokens=800,
        )
        content = await self._complete(
            chat_request,
            action="Cooking tips",
            default_message="Failed to generate cooking tips",
        )
        return parsing.parse_string_list(content)

    async def suggest_substitutes(
        self,
        ingredient: Ingredient,
        profile: UserProfile,
        avoid: tuple[str, ...] = (),
    ) -> list[Substitute]:
        key = cache_key(
            "substitutes",
            {
                "ingredient": ingredient,
                "restrictions": profile.dietary_restrictions,
                "avoid": avoid,
            },
        )
        cached = self._cached(key)
        if isinstance(cached, list):
            return list(cached)

        chat_request = ChatRequest(
            model=self.swap_model,
            messages=(
                ChatMessage("system", prompts.SUBSTITUTES_SYSTEM_PROMPT),
                ChatMessage(
                    "user",
                    prompts.build_substitutes_prompt(ingredient, profile, avoid),
                ),
            ),
            temperature=0.5,
            max_tokens=600,
        )
        content = await self._complete(
            chat_request,
            action="Ingredient substitutes",
            default_message="Failed to suggest ingredient substitutes",
        )
        substitutes = parsing.parse_substitutes(content)
        self._store(key, list(substitutes))
        return substitutes

    def clear_cache(self) -> None:
        self.cache.clear()

    async def _complete(
        self, request: ChatRequest, *, action: str, default_message: str
    ) -> str:
        async def attempt() -> ChatResponse:
            await self.rate_limiter.acquire()
            return await self.client.complete(request)

        try:
            response = await self.retry_policy.call(attempt, action=action)
        except Exception as exc:
            error = classify_upstream_error(exc, default_message)
            _logger.warning("%s failed: %s (%s)", action, error.message, exc)
            if error is exc:
                raise
            raise error from exc
        return response.content

    def _cached(self, key: str) -> object | None:
        if not self.use_cache:
            return None
        value = self.cache.get(key)
        if value is not None:
            _logger.info("Cache hit for %s", key.split(":", 1)[0])
        return value

    def _store(self, key: str, value: object) -> None:
        if self.use_cache:
            self.cache.set(key, value)
