"""Tests for the meal plan service."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from meal_planner.domain.budget import BudgetStatus
from meal_planner.domain.meals import MealType
from meal_planner.domain.profiles import HouseholdPreferences
from meal_planner.errors import MealNotFoundError, MealPlanNotFoundError
from meal_planner.services.meal_plans import MealPlanService, start_of_tomorrow
from tests.conftest import (
    FIXED_NOW,
    FakeGenerator,
    FakeHouseholdProvider,
    InMemoryMealPlanRepository,
    fixed_clock,
    make_draft,
    make_meal,
    make_plan,
    make_profile,
    make_week,
)


def _service(
    generator: FakeGenerator,
    repository: InMemoryMealPlanRepository | None = None,
    household: FakeHouseholdProvider | None = None,
) -> MealPlanService:
    return MealPlanService(
        generator=generator,
        repository=repository or InMemoryMealPlanRepository(),
        household_provider=household or FakeHouseholdProvider(),
        clock=fixed_clock,
    )


def test_start_of_tomorrow() -> None:
    now = datetime(2024, 3, 4, 18, 30, tzinfo=UTC)

    assert start_of_tomorrow(now) == datetime(2024, 3, 5, tzinfo=UTC)


def test_generate_weekly_plan_persists_plan() -> None:
    repository = InMemoryMealPlanRepository()
    household = FakeHouseholdProvider(
        preferences=HouseholdPreferences(all_allergens=("peanuts",))
    )
    generator = FakeGenerator(drafts=[make_draft(4.0)])
    service = _service(generator, repository, household)

    plan = asyncio.run(
        service.generate_weekly_plan(make_profile(), pantry_items=("rice",))
    )

    assert plan.id == f"plan_{int(FIXED_NOW.timestamp() * 1000)}"
    assert plan.user_id == "user-1"
    assert plan.week_start_date == start_of_tomorrow(FIXED_NOW)
    assert plan.id in repository.plans
    request = generator.plan_requests[0]
    assert request.pantry_items == ("rice",)
    assert request.household_preferences.all_allergens == ("peanuts",)
    assert household.requested == ["user-1"]


def test_generate_weekly_plan_uses_given_week_start() -> None:
    week_start = datetime(2024, 4, 1, tzinfo=UTC)
    service = _service(FakeGenerator(drafts=[make_draft(4.0)]))

    plan = asyncio.run(
        service.generate_weekly_plan(make_profile(), week_start_date=week_start)
    )

    assert plan.week_start_date == week_start


def test_swap_meal_replaces_meal_and_recalculates() -> None:
    repository = InMemoryMealPlanRepository()
    meals = make_week(4.0)
    repository.save(make_plan(meals))
    generator = FakeGenerator(
        swap_result=make_meal("meal_new", name="Lentil Soup", cost=2.0)
    )
    service = _service(generator, repository)
    target = meals[5]

    replacement = asyncio.run(service.swap_meal(target.id, make_profile()))

    assert replacement.day_of_week == target.day_of_week
    assert replacement.meal_type == target.meal_type
    stored = repository.plans["plan_1"]
    assert stored.find_meal("meal_new") is not None
    assert stored.find_meal(target.id) is None
    assert stored.total_estimated_cost == pytest.approx(20 * 4.0 + 2.0)
    assert stored.updated_at == FIXED_NOW
    meal_id, excluded = generator.swap_calls[0]
    assert meal_id == target.id
    assert "Meal 0" in excluded
    assert len(excluded) == 21
    assert set(repository.updates[0][1]) == {
        "meals",
        "totalEstimatedCost",
        "budgetStatus",
        "updatedAt",
    }


def test_swap_meal_unknown_meal_raises() -> None:
    service = _service(FakeGenerator())

    with pytest.raises(MealNotFoundError):
        asyncio.run(service.swap_meal("missing", make_profile()))


def test_get_plan_and_delete_plan() -> None:
    repository = InMemoryMealPlanRepository()
    repository.save(make_plan(make_week(4.0)))
    service = _service(FakeGenerator(), repository)

    assert service.get_plan("plan_1").id == "plan_1"
    service.delete_plan("plan_1")

    with pytest.raises(MealPlanNotFoundError):
        service.get_plan("plan_1")
    with pytest.raises(MealPlanNotFoundError):
        service.delete_plan("plan_1")


def test_get_meal() -> None:
    repository = InMemoryMealPlanRepository()
    repository.save(make_plan([make_meal("meal_a", meal_type=MealType.LUNCH)]))
    service = _service(FakeGenerator(), repository)

    assert service.get_meal("meal_a").meal_type == MealType.LUNCH
    with pytest.raises(MealNotFoundError):
        service.get_meal("meal_b")


def test_list_user_plans_newest_week_first() -> None:
    repository = InMemoryMealPlanRepository()
    older = make_plan(
        make_week(4.0), plan_id="plan_old", week_start=FIXED_NOW - timedelta(days=7)
    )
    newer = make_plan(make_week(4.0), plan_id="plan_new", week_start=FIXED_NOW)
    other = make_plan(make_week(4.0), plan_id="plan_other", user_id="user-2")
    for plan in (older, newer, other):
        repository.save(plan)
    service = _service(FakeGenerator(), repository)

    plans = service.list_user_plans("user-1")

    assert [plan.id for plan in plans] == ["plan_new", "plan_old"]


def test_get_current_week_plan() -> None:
    repository = InMemoryMealPlanRepository()
    current = make_plan(
        make_week(4.0), plan_id="plan_current", week_start=FIXED_NOW - timedelta(days=2)
    )
    stale = make_plan(
        make_week(4.0), plan_id="plan_stale", week_start=FIXED_NOW - timedelta(days=14)
    )
    repository.save(current)
    repository.save(stale)
    service = _service(FakeGenerator(), repository)

    assert service.get_current_week_plan("user-1").id == "plan_current"
    assert service.get_current_week_plan("user-2") is None


def test_persist_changes_writes_status() -> None:
    repository = InMemoryMealPlanRepository()
    plan = make_plan(make_week(4.0))
    repository.save(plan)
    service = _service(FakeGenerator(), repository)

    plan.meals[0].estimated_cost = 25.0
    plan.recalculate(100.0)
    service.persist_changes(plan)

    stored = repository.plans["plan_1"]
    assert stored.budget_status == BudgetStatus.AT
    assert stored.total_estimated_cost == pytest.approx(105.0)
