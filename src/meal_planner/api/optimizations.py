"""Cost optimization endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from meal_planner.api.models import ApplyOptimizationsBody, SuggestionsBody
from meal_planner.errors import NotFoundError

if TYPE_CHECKING:
    from meal_planner.containers import AppContainer
    from meal_planner.domain.optimization import (
        OptimizationResult,
        OptimizationSuggestion,
    )

router = APIRouter(
    prefix="/meal-plans/{plan_id}/optimizations", tags=["optimizations"]
)

# Suggestions are regenerated on apply, so selection looks past the usual top ten.
_SELECTABLE_SUGGESTIONS = 50


@router.post("")
async def suggest_optimizations(
    plan_id: str, body: SuggestionsBody, request: Request
) -> dict[str, object]:
    """Return ranked savings suggestions for a stored plan."""
    container: AppContainer = request.app.state.container
    plan = container.meal_plan_service.get_plan(plan_id)
    profile = body.profile.to_domain()
    household = container.household_provider.get_household_preferences(
        profile.user_id
    )
    suggestions = await container.cost_optimizer.generate_suggestions(
        plan,
        profile,
        household,
        max_suggestions=body.max_suggestions,
        include_advanced=body.include_advanced,
    )
    return {
        "plan_id": plan_id,
        "suggestions": [_suggestion_payload(item) for item in suggestions],
    }


@router.post("/apply")
async def apply_optimizations(
    plan_id: str, body: ApplyOptimizationsBody, request: Request
) -> dict[str, object]:
    """Apply the selected suggestions and store the optimized plan."""
    container: AppContainer = request.app.state.container
    plan = container.meal_plan_service.get_plan(plan_id)
    profile = body.profile.to_domain()
    household = container.household_provider.get_household_preferences(
        profile.user_id
    )
    available = await container.cost_optimizer.generate_suggestions(
        plan,
        profile,
        household,
        max_suggestions=_SELECTABLE_SUGGESTIONS,
        include_advanced=body.include_advanced,
    )
    by_id = {suggestion.id: suggestion for suggestion in available}
    for suggestion_id in body.suggestion_ids:
        if suggestion_id not in by_id:
            raise NotFoundError("Optimization suggestion", suggestion_id)
    selected = [
        by_id[suggestion_id] for suggestion_id in dict.fromkeys(body.suggestion_ids)
    ]

    result = await container.cost_optimizer.apply_optimizations(
        plan, selected, profile, household
    )
    if result.applied:
        container.meal_plan_service.persist_changes(result.optimized_meal_plan)
    return _result_payload(result)


def _suggestion_payload(suggestion: OptimizationSuggestion) -> dict[str, object]:
    payload = asdict(suggestion)
    payload["score"] = suggestion.score
    return payload


def _result_payload(result: OptimizationResult) -> dict[str, object]:
    return {
        "original_cost": result.original_cost,
        "optimized_cost": result.optimized_cost,
        "total_savings": result.total_savings,
        "savings_percentage": result.savings_percentage,
        "applied": result.applied,
        "failed": result.failed,
        "suggestions": [_suggestion_payload(item) for item in result.suggestions],
        "optimized_meal_plan": result.optimized_meal_plan.model_dump(mode="json"),
    }
