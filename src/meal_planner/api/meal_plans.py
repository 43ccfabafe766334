"""Meal plan and meal endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, Response, status

from meal_planner.api.models import GeneratePlanBody, ProfileRequestBody
from meal_planner.services.orchestrator import GenerationOptions

if TYPE_CHECKING:
    from meal_planner.containers import AppContainer

router = APIRouter(tags=["meal-plans"])


@router.post("/meal-plans", status_code=status.HTTP_201_CREATED)
async def generate_meal_plan(
    body: GeneratePlanBody, request: Request
) -> dict[str, object]:
    """Generate, enrich and store a plan for the coming week."""
    container: AppContainer = request.app.state.container
    options = GenerationOptions(
        exclude_recipes=tuple(body.exclude_recipes),
        pantry_items=tuple(body.pantry_items),
        preferred_cuisines=tuple(body.preferred_cuisines),
        week_start_date=body.week_start_date,
        max_renegotiations=body.max_renegotiations,
        budget_optimization=body.budget_optimization,
    )
    plan = await container.orchestrator.generate_meal_plan(
        body.profile.to_domain(), options
    )
    return plan.model_dump(mode="json")


@router.get("/meal-plans/{plan_id}")
async def get_meal_plan(plan_id: str, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    return container.meal_plan_service.get_plan(plan_id).model_dump(mode="json")


@router.delete("/meal-plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal_plan(plan_id: str, request: Request) -> Response:
    container: AppContainer = request.app.state.container
    container.meal_plan_service.delete_plan(plan_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/meal-plans")
async def list_meal_plans(user_id: str, request: Request) -> dict[str, object]:
    """Return a user's plans, newest week first."""
    container: AppContainer = request.app.state.container
    plans = container.meal_plan_service.list_user_plans(user_id)
    return {"meal_plans": [plan.model_dump(mode="json") for plan in plans]}


@router.get("/users/{user_id}/meal-plans/current")
async def current_meal_plan(user_id: str, request: Request) -> dict[str, object]:
    """Return the plan covering tomorrow, or null."""
    container: AppContainer = request.app.state.container
    plan = container.meal_plan_service.get_current_week_plan(user_id)
    return {"meal_plan": plan.model_dump(mode="json") if plan else None}


@router.post("/meals/{meal_id}/swap")
async def swap_meal(
    meal_id: str, body: ProfileRequestBody, request: Request
) -> dict[str, object]:
    """Replace a stored meal with a fresh alternative."""
    container: AppContainer = request.app.state.container
    replacement = await container.orchestrator.swap_meal(
        meal_id, body.profile.to_domain()
    )
    return replacement.model_dump(mode="json")


@router.get("/meals/{meal_id}/instructions")
async def meal_instructions(meal_id: str, request: Request) -> dict[str, object]:
    container: AppContainer = request.app.state.container
    meal = container.meal_plan_service.get_meal(meal_id)
    instructions = await container.orchestrator.get_meal_instructions(meal)
    return {"meal_id": meal_id, "instructions": instructions}


@router.post("/meals/{meal_id}/tips")
async def meal_tips(
    meal_id: str, body: ProfileRequestBody, request: Request
) -> dict[str, object]:
    """Return cooking tips pitched at the user's skill level."""
    container: AppContainer = request.app.state.container
    meal = container.meal_plan_service.get_meal(meal_id)
    tips = await container.orchestrator.get_cooking_tips(
        meal, body.profile.to_domain()
    )
    return {"meal_id": meal_id, "tips": tips}
