"""Extraction and validation of JSON payloads embedded in model output."""

import json
from datetime import datetime

from pydantic import ValidationError

from meal_planner.domain.budget import calculate_budget_status
from meal_planner.domain.meals import (
    MEALS_PER_WEEK,
    Meal,
    recipe_id_from_name,
    total_meal_cost,
)
from meal_planner.domain.planning import MealPlanDraft, Substitute
from meal_planner.errors import InvalidResponseFormatError

_CLOSING = {"{": "}", "[": "]"}


def extract_json(content: str, opening: str = "{") -> object:
    """Parse the first balanced JSON object (or array) found in ``content``.

    Brackets inside string literals are ignored, so prose around the payload
    and braces inside recipe descriptions do not confuse the scan.
    """
    closing = _CLOSING.get(opening)
    if closing is None:
        raise ValueError(f"Unsupported JSON opening character: {opening!r}")
    start = content.find(opening)
    if start == -1:
        raise InvalidResponseFormatError("Invalid response format from AI service")

    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(content)):
        char = content[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == opening:
            depth += 1
        elif char == closing:
            depth -= 1
            if depth == 0:
                try:
                    return json.loads(content[start : index + 1])
                except json.JSONDecodeError as exc:
                    raise InvalidResponseFormatError(
                        f"Invalid JSON in AI response: {exc.msg}"
                    ) from exc
    raise InvalidResponseFormatError("Invalid response format from AI service")


def parse_meal_plan_response(
    content: str, weekly_budget: float, generated_at: datetime
) -> MealPlanDraft:
    """Validate a full-plan response and derive ids, totals and status.

    The plan must fill every (day, meal type) slot of the week exactly once.
    """
    payload = extract_json(content)
    raw_meals = payload.get("meals") if isinstance(payload, dict) else None
    if not isinstance(raw_meals, list):
        raise InvalidResponseFormatError("AI response is missing the meals array")

    stamp = _millis(generated_at)
    meals = []
    for index, raw_meal in enumerate(raw_meals):
        fields = _require_object(raw_meal, "meal")
        meal_id = f"meal_{stamp}_{index}"
        meals.append(_build_meal(fields, meal_id))
    _require_full_week(meals)

    total = total_meal_cost(meals)
    return MealPlanDraft(
        meals=meals,
        total_estimated_cost=total,
        budget_status=calculate_budget_status(total, weekly_budget),
    )


def parse_meal_swap_response(
    content: str, original: Meal, generated_at: datetime
) -> Meal:
    """Validate a single-recipe response as a replacement for ``original``."""
    fields = _require_object(extract_json(content), "replacement meal")
    fields.update(
        dayOfWeek=original.day_of_week,
        mealType=str(original.meal_type),
        servings=original.servings,
    )
    for key in ("day_of_week", "meal_type"):
        fields.pop(key, None)
    return _build_meal(fields, f"meal_{_millis(generated_at)}_swap")


def parse_string_list(content: str) -> list[str]:
    """Parse a JSON array of strings, such as instructions or tips."""
    payload = extract_json(content, opening="[")
    if not isinstance(payload, list):
        raise InvalidResponseFormatError("Expected a JSON array in AI response")
    return [str(item).strip() for item in payload if str(item).strip()]


def parse_substitutes(content: str) -> list[Substitute]:
    """Parse a JSON array of ingredient substitutes."""
    payload = extract_json(content, opening="[")
    if not isinstance(payload, list):
        raise InvalidResponseFormatError("Expected a JSON array in AI response")
    substitutes = []
    for item in payload:
        fields = _require_object(item, "substitute")
        try:
            name = str(fields["name"]).strip()
            price = float(fields.get("estimatedPrice", fields.get("estimated_price")))
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidResponseFormatError(
                "AI substitute is missing a name or price"
            ) from exc
        tips = fields.get("tips") or []
        substitutes.append(
            Substitute(
                name=name,
                estimated_price=price,
                reason=str(fields.get("description") or "Lower cost alternative"),
                cooking_tip=str(tips[0]) if isinstance(tips, list) and tips else None,
            )
        )
    return substitutes


def _build_meal(fields: dict[str, object], meal_id: str) -> Meal:
    name = fields.get("recipeName", fields.get("recipe_name"))
    if not isinstance(name, str) or not name.strip():
        raise InvalidResponseFormatError("AI meal is missing a recipe name")
    fields = {**fields, "id": meal_id, "recipeId": recipe_id_from_name(name)}
    fields.pop("recipe_id", None)
    try:
        return Meal.model_validate(fields)
    except ValidationError as exc:
        raise InvalidResponseFormatError(
            f"AI meal '{name}' failed validation: {exc.error_count()} error(s)"
        ) from exc


def _require_object(value: object, label: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise InvalidResponseFormatError(f"Expected a JSON object for {label}")
    return dict(value)


def _millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _require_full_week(meals: list[Meal]) -> None:
    if len(meals) != MEALS_PER_WEEK:
        raise InvalidResponseFormatError(
            f"AI meal plan has {len(meals)} meals, expected {MEALS_PER_WEEK}"
        )
    seen: set[tuple[int, str]] = set()
    for meal in meals:
        slot = (meal.day_of_week, str(meal.meal_type))
        if slot in seen:
            raise InvalidResponseFormatError(
                f"AI meal plan repeats {slot[1]} on day {slot[0]}"
            )
        seen.add(slot)
