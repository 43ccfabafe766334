"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_planner.adapters.openai_chat_client import OpenAIChatClient
from meal_planner.adapters.proxy_chat_client import (
    HttpxProxyChatClient,
    StaticTokenProvider,
)
from meal_planner.adapters.recipe_client import HttpxRecipeClient, RecipeClient
from meal_planner.adapters.supabase_household_repository import (
    SupabaseHouseholdRepository,
)
from meal_planner.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from meal_planner.config import Settings
from meal_planner.errors import ConfigurationError
from meal_planner.services.ai import LlmClient, LlmMealPlanGenerator, MealPlanGenerator
from meal_planner.services.cache import InMemoryCache
from meal_planner.services.cost_optimizer import CostOptimizer
from meal_planner.services.household import HouseholdPreferencesProvider
from meal_planner.services.meal_plans import MealPlanService
from meal_planner.services.mock_ai import MockMealPlanGenerator
from meal_planner.services.orchestrator import MealPlanOrchestrator
from meal_planner.services.rate_limiter import SlidingWindowRateLimiter
from meal_planner.services.retry import RetryPolicy


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    generator: MealPlanGenerator
    household_provider: HouseholdPreferencesProvider
    meal_plan_service: MealPlanService
    orchestrator: MealPlanOrchestrator
    cost_optimizer: CostOptimizer
    close_resources: Callable[[], Awaitable[None]]


def build_llm_client(settings: Settings) -> LlmClient:
    """Choose the proxy when configured, otherwise call OpenAI directly."""
    if settings.llm_proxy_url:
        return HttpxProxyChatClient.create(
            settings.llm_proxy_url, StaticTokenProvider(settings.llm_proxy_token)
        )
    if not settings.openai_api_key:
        raise ConfigurationError(
            "Set OPENAI_API_KEY or LLM_PROXY_URL, or enable USE_MOCK_AI"
        )
    return OpenAIChatClient.create(settings.openai_api_key)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_plan_repository = SupabaseMealPlanRepository(supabase_client)
    household_repository = SupabaseHouseholdRepository(supabase_client)

    llm_client: LlmClient | None = None
    generator: MealPlanGenerator
    if resolved_settings.use_mock_ai:
        generator = MockMealPlanGenerator()
    else:
        llm_client = build_llm_client(resolved_settings)
        generator = LlmMealPlanGenerator(
            client=llm_client,
            cache=InMemoryCache(resolved_settings.cache_ttl_seconds),
            rate_limiter=SlidingWindowRateLimiter(
                limit_per_minute=resolved_settings.rate_limit_per_minute
            ),
            retry_policy=RetryPolicy(
                max_retries=resolved_settings.max_retries,
                base_delay_seconds=resolved_settings.retry_delay_seconds,
            ),
            plan_model=resolved_settings.openai_plan_model,
            swap_model=resolved_settings.openai_swap_model,
            use_cache=resolved_settings.use_cache,
        )

    recipe_client: RecipeClient | None = None
    if resolved_settings.recipe_api_key:
        recipe_client = HttpxRecipeClient.create(
            api_key=resolved_settings.recipe_api_key,
            base_url=resolved_settings.recipe_api_base_url,
        )

    meal_plan_service = MealPlanService(
        generator=generator,
        repository=meal_plan_repository,
        household_provider=household_repository,
    )
    orchestrator = MealPlanOrchestrator(
        meal_plan_service=meal_plan_service,
        generator=generator,
        recipe_client=recipe_client,
    )
    cost_optimizer = CostOptimizer(
        generator=generator,
        meal_replacement_min_savings=resolved_settings.meal_replacement_min_savings,
        bulk_discount=resolved_settings.bulk_discount,
    )

    async def close_resources() -> None:
        if isinstance(llm_client, OpenAIChatClient | HttpxProxyChatClient):
            await llm_client.close()
        if isinstance(recipe_client, HttpxRecipeClient):
            await recipe_client.close()

    return AppContainer(
        settings=resolved_settings,
        generator=generator,
        household_provider=household_repository,
        meal_plan_service=meal_plan_service,
        orchestrator=orchestrator,
        cost_optimizer=cost_optimizer,
        close_resources=close_resources,
    )
