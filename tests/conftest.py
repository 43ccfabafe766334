"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from meal_planner.adapters.recipe_client import RecipeClient
from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.domain.budget import calculate_budget_status
from meal_planner.domain.llm import ChatRequest, ChatResponse
from meal_planner.domain.meals import (
    DAYS_PER_WEEK,
    MEAL_TYPES,
    Ingredient,
    Meal,
    MealPlan,
    MealType,
    recipe_id_from_name,
    total_meal_cost,
)
from meal_planner.domain.planning import MealPlanDraft, MealPlanRequest, Substitute
from meal_planner.domain.profiles import (
    CookingTimePreference,
    HouseholdPreferences,
    SkillLevel,
    UserProfile,
)
from meal_planner.domain.recipes import RecipeDetail
from meal_planner.services.ai import LlmClient, MealPlanGenerator
from meal_planner.services.cost_optimizer import CostOptimizer
from meal_planner.services.household import HouseholdPreferencesProvider
from meal_planner.services.meal_plans import MealPlanRepository, MealPlanService
from meal_planner.services.mock_ai import MockMealPlanGenerator
from meal_planner.services.orchestrator import MealPlanOrchestrator

FIXED_NOW = datetime(2024, 3, 4, 12, 0, tzinfo=UTC)


def fixed_clock() -> datetime:
    return FIXED_NOW


def make_profile(**overrides: object) -> UserProfile:
    values: dict[str, object] = {
        "user_id": "user-1",
        "household_size": 4,
        "weekly_budget": 100.0,
        "cooking_skill_level": SkillLevel.INTERMEDIATE,
        "cooking_time_preference": CookingTimePreference(weekday=30, weekend=60),
    }
    values.update(overrides)
    return UserProfile(**values)  # type: ignore[arg-type]


def make_ingredient(
    name: str, price: float, category: str = "produce", amount: float = 1
) -> Ingredient:
    return Ingredient(
        name=name,
        amount=amount,
        unit="unit",
        category=category,
        estimated_price=price,
    )


def make_meal(  # noqa: PLR0913
    meal_id: str,
    *,
    name: str = "Pasta Primavera",
    day: int = 0,
    meal_type: MealType = MealType.DINNER,
    cost: float = 10.0,
    servings: int = 4,
    ingredients: list[Ingredient] | None = None,
) -> Meal:
    return Meal(
        id=meal_id,
        day_of_week=day,
        meal_type=meal_type,
        recipe_name=name,
        description="A test meal",
        prep_time=10,
        cook_time=20,
        servings=servings,
        estimated_cost=cost,
        ingredients=ingredients or [make_ingredient("Onion", 1.0)],
        recipe_id=recipe_id_from_name(name),
    )


def make_plan(
    meals: list[Meal],
    *,
    plan_id: str = "plan_1",
    user_id: str = "user-1",
    weekly_budget: float = 100.0,
    week_start: datetime = FIXED_NOW,
) -> MealPlan:
    total = total_meal_cost(meals)
    return MealPlan(
        id=plan_id,
        user_id=user_id,
        week_start_date=week_start,
        meals=meals,
        total_estimated_cost=total,
        budget_status=calculate_budget_status(total, weekly_budget),
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )


def make_week(cost_per_meal: float, prefix: str = "Meal") -> list[Meal]:
    meals = []
    for day in range(DAYS_PER_WEEK):
        for meal_type in MEAL_TYPES:
            index = len(meals)
            meals.append(
                make_meal(
                    f"meal_{index}",
                    name=f"{prefix} {index}",
                    day=day,
                    meal_type=meal_type,
                    cost=cost_per_meal,
                )
            )
    return meals


def make_draft(cost_per_meal: float, weekly_budget: float = 100.0) -> MealPlanDraft:
    meals = make_week(cost_per_meal)
    total = total_meal_cost(meals)
    return MealPlanDraft(
        meals=meals,
        total_estimated_cost=total,
        budget_status=calculate_budget_status(total, weekly_budget),
    )


def meal_json(  # noqa: PLR0913
    day: int,
    meal_type: str,
    name: str,
    cost: float,
    *,
    servings: int = 4,
    prep_time: int = 10,
) -> dict[str, object]:
    return {
        "dayOfWeek": day,
        "mealType": meal_type,
        "recipeName": name,
        "description": f"{name} for the family",
        "prepTime": prep_time,
        "cookTime": 20,
        "servings": servings,
        "estimatedCost": cost,
        "ingredients": [
            {
                "name": "Rice",
                "amount": 2,
                "unit": "cups",
                "category": "grains",
                "estimatedPrice": 1.5,
            }
        ],
    }


def plan_content(cost_per_meal: float = 4.0) -> str:
    meals = [
        meal_json(day, str(meal_type), f"Meal {day}-{meal_type}", cost_per_meal)
        for day in range(DAYS_PER_WEEK)
        for meal_type in MEAL_TYPES
    ]
    return "Here is your plan:\n" + json.dumps({"meals": meals})


@dataclass
class FakeLlmClient(LlmClient):
    """Scripted LLM client; the last response repeats once the script runs out."""

    responses: list[str | Exception] = field(default_factory=list)
    requests: list[ChatRequest] = field(default_factory=list)

    async def complete(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if len(self.responses) > 1:
            item = self.responses.pop(0)
        else:
            item = self.responses[0]
        if isinstance(item, Exception):
            raise item
        return ChatResponse(content=item)

    @property
    def calls(self) -> int:
        return len(self.requests)


@dataclass
class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@dataclass
class FakeGenerator(MealPlanGenerator):
    """Scripted generator for orchestration and optimization tests."""

    drafts: list[MealPlanDraft] = field(default_factory=list)
    plan_requests: list[MealPlanRequest] = field(default_factory=list)
    swap_result: Meal | Exception | None = None
    swap_calls: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)
    substitutes: list[Substitute] | Exception = field(default_factory=list)
    substitute_calls: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=lambda: ["Generated step"])
    tips: list[str] = field(default_factory=lambda: ["Generated tip"])
    cleared: bool = False

    async def generate_plan(self, request: MealPlanRequest) -> MealPlanDraft:
        self.plan_requests.append(request)
        if len(self.drafts) > 1:
            draft = self.drafts.pop(0)
        else:
            draft = self.drafts[0]
        return draft.model_copy(deep=True)

    async def suggest_swap(
        self,
        meal: Meal,
        profile: UserProfile,
        exclude_recipes: tuple[str, ...] = (),
        household: HouseholdPreferences | None = None,
    ) -> Meal:
        self.swap_calls.append((meal.id, exclude_recipes))
        if isinstance(self.swap_result, Exception):
            raise self.swap_result
        if self.swap_result is None:
            raise AssertionError("No swap result scripted")
        return self.swap_result.model_copy(
            deep=True,
            update={
                "day_of_week": meal.day_of_week,
                "meal_type": meal.meal_type,
            },
        )

    async def generate_instructions(self, meal: Meal) -> list[str]:
        return list(self.instructions)

    async def generate_tips(self, meal: Meal, profile: UserProfile) -> list[str]:
        return list(self.tips)

    async def suggest_substitutes(
        self,
        ingredient: Ingredient,
        profile: UserProfile,
        avoid: tuple[str, ...] = (),
    ) -> list[Substitute]:
        self.substitute_calls.append(ingredient.name)
        if isinstance(self.substitutes, Exception):
            raise self.substitutes
        return list(self.substitutes)

    def clear_cache(self) -> None:
        self.cleared = True


@dataclass
class InMemoryMealPlanRepository(MealPlanRepository):
    """In-memory meal plan repository for tests."""

    plans: dict[str, MealPlan] = field(default_factory=dict)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def save(self, plan: MealPlan) -> str:
        self.plans[plan.id] = plan.model_copy(deep=True)
        return plan.id

    def get(self, plan_id: str) -> MealPlan | None:
        plan = self.plans.get(plan_id)
        return plan.model_copy(deep=True) if plan else None

    def list_by_user(self, user_id: str) -> list[MealPlan]:
        return [
            plan.model_copy(deep=True)
            for plan in self.plans.values()
            if plan.user_id == user_id
        ]

    def delete(self, plan_id: str) -> None:
        self.plans.pop(plan_id, None)

    def update(self, plan_id: str, fields: dict[str, object]) -> None:
        document = self.plans[plan_id].to_document()
        document.update(fields)
        self.plans[plan_id] = MealPlan.model_validate(document)
        self.updates.append((plan_id, fields))

    def find_by_meal_id(self, meal_id: str) -> MealPlan | None:
        for plan in self.plans.values():
            if plan.find_meal(meal_id) is not None:
                return plan.model_copy(deep=True)
        return None


@dataclass
class FakeHouseholdProvider(HouseholdPreferencesProvider):
    """Household provider returning fixed preferences."""

    preferences: HouseholdPreferences = field(default_factory=HouseholdPreferences)
    requested: list[str] = field(default_factory=list)

    def get_household_preferences(self, user_id: str) -> HouseholdPreferences:
        self.requested.append(user_id)
        return self.preferences


@dataclass
class FakeRecipeClient(RecipeClient):
    """Recipe catalogue fake with optional failures."""

    instructions: list[str] = field(default_factory=list)
    detail: RecipeDetail | None = None
    error: Exception | None = None
    requested_ids: list[str] = field(default_factory=list)

    async def get_recipe_instructions(self, recipe_id: str) -> list[str]:
        self.requested_ids.append(recipe_id)
        if self.error is not None:
            raise self.error
        return list(self.instructions)

    async def get_recipe_by_id(self, recipe_id: str) -> RecipeDetail:
        self.requested_ids.append(recipe_id)
        if self.error is not None:
            raise self.error
        if self.detail is None:
            raise LookupError(recipe_id)
        return self.detail


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def profile() -> UserProfile:
    return make_profile()


@pytest.fixture
def meal_plan_repository() -> InMemoryMealPlanRepository:
    return InMemoryMealPlanRepository()


@pytest.fixture
def household_provider() -> FakeHouseholdProvider:
    return FakeHouseholdProvider()


@pytest.fixture
def container(
    settings: Settings,
    meal_plan_repository: InMemoryMealPlanRepository,
    household_provider: FakeHouseholdProvider,
) -> AppContainer:
    generator = MockMealPlanGenerator()
    meal_plan_service = MealPlanService(
        generator=generator,
        repository=meal_plan_repository,
        household_provider=household_provider,
    )
    orchestrator = MealPlanOrchestrator(
        meal_plan_service=meal_plan_service,
        generator=generator,
    )
    cost_optimizer = CostOptimizer(generator=generator)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        generator=generator,
        household_provider=household_provider,
        meal_plan_service=meal_plan_service,
        orchestrator=orchestrator,
        cost_optimizer=cost_optimizer,
        close_resources=close_resources,
    )
